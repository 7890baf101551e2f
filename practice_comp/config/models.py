# practice_comp/config/models.py
"""
Pydantic models for validating the structure and types of the engine
configuration loaded from YAML files (e.g., defaults.yaml).
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from practice_comp.state.scenario import HistoricYear

logger = logging.getLogger(__name__)

# --- Low-level Reusable Models ---


class PayrollTaxRates(BaseModel):
    """Employer-side payroll tax rates and wage bases."""

    federal_unemployment_rate: float = Field(0.006, ge=0.0)
    federal_unemployment_wage_base: float = Field(7000, ge=0.0)
    social_security_rate: float = Field(0.062, ge=0.0)
    medicare_rate: float = Field(0.0145, ge=0.0)
    wa_unemployment_rate: float = Field(0.009, ge=0.0)
    wa_unemployment_wage_base: float = Field(72800, ge=0.0)
    wa_family_leave_rate: float = Field(
        0.00658, ge=0.0, description="Applied to wages up to the social security wage base"
    )
    wa_state_disability_rate: float = Field(0.00255, ge=0.0)
    washington_rate: float = Field(0.0003, ge=0.0)
    social_security_wage_bases: Dict[int, float] = Field(
        default_factory=lambda: {
            2025: 176100,
            2026: 183600,
            2027: 190800,
            2028: 198900,
            2029: 207000,
            2030: 215400,
        },
        description="Year -> social security wage base",
    )

    @model_validator(mode='after')
    def check_wage_base_table(self) -> 'PayrollTaxRates':
        if not self.social_security_wage_bases:
            raise ValueError("social_security_wage_bases must contain at least one year")
        return self


class BenefitsConfig(BaseModel):
    """Monthly physician benefit premiums in the base year."""

    base_year: int = 2025
    monthly_medical: float = Field(722.81, ge=0.0)
    monthly_dental: float = Field(57.12, ge=0.0)
    monthly_vision: float = Field(6.44, ge=0.0)
    waiting_period_days: int = Field(30, ge=0)

    @property
    def annual_base_cost(self) -> float:
        return (self.monthly_medical + self.monthly_dental + self.monthly_vision) * 12


class PayrollCalendar(BaseModel):
    """Fixed-length pay periods anchored on one known period."""

    reference_period_end: date = date(2024, 12, 13)
    reference_pay_date: date = date(2024, 12, 20)
    period_days: int = Field(14, gt=0)
    hours_per_day: float = Field(8, gt=0)
    annual_work_hours: float = Field(2080, gt=0, description="52 weeks x 5 days x 8 hours")


class DelayedCompOverride(BaseModel):
    """A literal delayed-compensation result for one physician and year."""

    physician_id: str
    year: int
    amount: float = Field(..., ge=0.0)
    taxes: float = Field(..., ge=0.0)
    period_details: str = ""


class MedicalDirectorConfig(BaseModel):
    default_trailing_shared_md_amount: float = Field(2500, ge=0.0)


class ProgressionConfig(BaseModel):
    """How a newly added employee advances in years after the one it was added to."""

    employee_years_before_transition: int = Field(1, ge=0)
    transition_employee_portion: float = Field(0.5, ge=0.0, le=1.0)
    default_clone_salary: float = Field(500000, ge=0.0)
    default_clone_weeks_vacation: float = Field(8, ge=0.0, le=24.0)


class EngineFlags(BaseModel):
    match_by_name: bool = Field(
        True, description="Fall back to display-name matching when locating a physician in other years"
    )
    deduct_prior_year_buyouts: bool = Field(
        False, description="Also deduct buyouts of partners who retired in a prior year from the pool"
    )


class BaselineFigures(BaseModel):
    """Aggregate figures used to seed a scenario's baseline year."""

    year: int
    therapy_income: float = Field(..., ge=0.0)
    non_employment_costs: float = Field(..., ge=0.0)
    non_md_employment_costs: float = Field(0.0, ge=0.0)
    misc_employment_costs: float = Field(0.0, ge=0.0)
    locum_costs: float = Field(0.0, ge=0.0)
    medical_director_pool: float = Field(0.0, ge=0.0)
    prcs_director_pool: float = Field(0.0, ge=0.0)
    consulting_services: float = Field(0.0, ge=0.0)


# --- Top-Level Configuration Model ---


class EngineConfig(BaseModel):
    """The root model for the engine configuration file."""

    current_year: int = 2025
    projection_years: int = Field(5, ge=0)
    payroll_taxes: PayrollTaxRates = Field(default_factory=PayrollTaxRates)
    benefits: BenefitsConfig = Field(default_factory=BenefitsConfig)
    payroll_calendar: PayrollCalendar = Field(default_factory=PayrollCalendar)
    delayed_comp_overrides: List[DelayedCompOverride] = Field(default_factory=list)
    medical_director: MedicalDirectorConfig = Field(default_factory=MedicalDirectorConfig)
    progression: ProgressionConfig = Field(default_factory=ProgressionConfig)
    flags: EngineFlags = Field(default_factory=EngineFlags)
    fallback_baseline: BaselineFigures = Field(
        default_factory=lambda: BaselineFigures(
            year=2025, therapy_income=3164006.93, non_employment_costs=229713.57
        )
    )
    # Historic actuals, read-only input to baseline resolution
    historic: List[HistoricYear] = Field(default_factory=list)

    @model_validator(mode='after')
    def check_overrides_unique(self) -> 'EngineConfig':
        seen = set()
        for override in self.delayed_comp_overrides:
            key = (override.physician_id, override.year)
            if key in seen:
                raise ValueError(
                    f"Duplicate delayed compensation override for {override.physician_id} in {override.year}"
                )
            seen.add(key)
        return self

    def delayed_comp_override(self, physician_id: str, year: int) -> Optional[DelayedCompOverride]:
        for override in self.delayed_comp_overrides:
            if override.physician_id == physician_id and override.year == year:
                return override
        return None
