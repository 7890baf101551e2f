# practice_comp/state/scenario.py
"""
Scenario-level state: per-year financial aggregates, projection settings,
and the scenario container that owns both.

Every model here is plain data. Reducers in ``practice_comp.projections``
take a ScenarioState and return a new one; nothing mutates a state that a
caller still holds.
"""

import logging
from enum import Enum
from typing import Any, List, Optional, Set

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from practice_comp.state.schema import PhysicianRecord

logger = logging.getLogger(__name__)

# Aggregate fields the user can edit directly; editing one marks it overridden
FINANCIAL_FIELDS = (
    "therapy_income",
    "non_employment_costs",
    "non_md_employment_costs",
    "locum_costs",
    "misc_employment_costs",
    "medical_director_pool",
    "prcs_director_pool",
    "consulting_services",
)

GROWTH_PCT_MIN = -10.0
GROWTH_PCT_MAX = 20.0


class BaselineMode(str, Enum):
    CURRENT_YEAR = "Current Year Data"
    PRIOR_YEAR = "Prior Year Data"
    CUSTOM = "Custom"

    @classmethod
    def normalise(cls, value: Any, current_year: int) -> 'BaselineMode':
        """Accept the preferred values plus the legacy '<year> Data' strings."""
        if isinstance(value, BaselineMode):
            return value
        text = str(value or "").strip()
        for mode in cls:
            if mode.value == text:
                return mode
        if text.endswith(" Data") and text[:4].isdigit():
            legacy_year = int(text[:4])
            if legacy_year == current_year - 1:
                return cls.PRIOR_YEAR
            if legacy_year == current_year:
                return cls.CURRENT_YEAR
        logger.warning(f"[BASELINE] Unknown baseline mode {value!r}; using '{cls.CURRENT_YEAR.value}'")
        return cls.CURRENT_YEAR


class _StateModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _money(v: Any) -> float:
    if v is None:
        return 0.0
    return max(0.0, float(v))


def _legacy(name: str, *legacy_names: str, **kwargs: Any) -> Any:
    """A field that also accepts the key names used by older saved snapshots."""
    alias = to_camel(name)
    return Field(
        validation_alias=AliasChoices(alias, name, *legacy_names),
        serialization_alias=alias,
        **kwargs,
    )


class HistoricYear(_StateModel):
    """Actual figures for a past year. Read-only input to baseline resolution."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    year: int
    therapy_income: float
    non_employment_costs: float
    employee_payroll: Optional[float] = None
    non_md_employment_costs: Optional[float] = None
    misc_employment_costs: Optional[float] = None
    locum_costs: Optional[float] = None
    medical_director_pool: Optional[float] = None
    prcs_director_pool: Optional[float] = None
    consulting_services: Optional[float] = None


class YearFinancials(_StateModel):
    """Aggregates and physician roster for one year of a scenario."""

    year: int
    therapy_income: float = 0.0
    non_employment_costs: float = 0.0
    non_md_employment_costs: float = 0.0
    locum_costs: float = 0.0
    misc_employment_costs: float = 0.0
    medical_director_pool: float = _legacy("medical_director_pool", "medicalDirectorHours", default=0.0)
    prcs_director_pool: float = _legacy("prcs_director_pool", "prcsMedicalDirectorHours", default=0.0)
    prcs_director_physician_id: Optional[str] = None
    consulting_services: float = _legacy("consulting_services", "consultingServicesAgreement", default=0.0)
    physicians: List[PhysicianRecord] = Field(default_factory=list)
    overrides: Set[str] = _legacy("overrides", "_overrides", default_factory=set)

    @field_validator(*FINANCIAL_FIELDS, mode="before")
    @classmethod
    def _non_negative(cls, v: Any) -> float:
        return _money(v)

    @field_validator("overrides", mode="before")
    @classmethod
    def _known_overrides(cls, v: Any) -> Set[str]:
        # Older snapshots store overrides as {field: bool}
        if isinstance(v, dict):
            v = [key for key, flag in v.items() if flag]
        return {name for name in (v or []) if name in FINANCIAL_FIELDS}

    def physician(self, physician_id: str) -> Optional[PhysicianRecord]:
        for p in self.physicians:
            if p.id == physician_id:
                return p
        return None


class ProjectionSettings(_StateModel):
    """Growth assumptions and global amounts for one scenario."""

    income_growth_pct: float = 3.7
    non_employment_costs_pct: float = 5.7
    non_md_employment_costs_pct: float = 2.4
    misc_employment_costs_pct: float = 3.2
    benefit_costs_growth_pct: float = 7.2
    locum_costs: float = _legacy("locum_costs", "locumsCosts", default=120000.0)
    medical_director_pool: float = _legacy("medical_director_pool", "medicalDirectorHours", default=97200.0)
    prcs_director_pool: float = _legacy("prcs_director_pool", "prcsMedicalDirectorHours", default=50000.0)
    consulting_services: float = _legacy("consulting_services", "consultingServicesAgreement", default=17030.0)

    @field_validator(
        "income_growth_pct",
        "non_employment_costs_pct",
        "non_md_employment_costs_pct",
        "misc_employment_costs_pct",
        "benefit_costs_growth_pct",
        mode="before",
    )
    @classmethod
    def _clamp_pct(cls, v: Any) -> float:
        v = 0.0 if v is None else float(v)
        return max(GROWTH_PCT_MIN, min(GROWTH_PCT_MAX, v))

    @field_validator(
        "locum_costs", "medical_director_pool", "prcs_director_pool", "consulting_services", mode="before"
    )
    @classmethod
    def _non_negative(cls, v: Any) -> float:
        return _money(v)


class ScenarioState(_StateModel):
    """One what-if scenario: the baseline year followed by the projected years."""

    years: List[YearFinancials] = _legacy("years", "future", default_factory=list)
    projection: ProjectionSettings = Field(default_factory=ProjectionSettings)
    baseline_mode: BaselineMode = _legacy("baseline_mode", "dataMode", default=BaselineMode.CURRENT_YEAR)
    selected_year: Optional[int] = None

    @property
    def baseline_year(self) -> Optional[int]:
        return self.years[0].year if self.years else None

    def year(self, year: int) -> Optional[YearFinancials]:
        for fy in self.years:
            if fy.year == year:
                return fy
        return None

    def clone(self) -> 'ScenarioState':
        return self.model_copy(deep=True)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "BaselineMode",
    "HistoricYear",
    "YearFinancials",
    "ProjectionSettings",
    "ScenarioState",
    "FINANCIAL_FIELDS",
]
