# practice_comp/engines/benefits.py
"""
Physician benefit costs (medical, dental, vision) with the new-hire waiting
period.
"""

import logging
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from practice_comp.config.loaders import get_config
from practice_comp.config.models import BenefitsConfig
from practice_comp.engines.proration import employee_portion
from practice_comp.state.schema import (
    Employee,
    EmployeeToPartner,
    EmployeeToTerminate,
    NewEmployee,
    PhysicianRecord,
)
from practice_comp.utils.date_utils import (
    date_to_day_of_year,
    day_of_year_to_date,
    days_in_year,
    start_portion_to_start_day,
)

logger = logging.getLogger(__name__)


def annual_benefit_cost(year: int, growth_pct: float, benefits: Optional[BenefitsConfig] = None) -> float:
    """Full-year premium cost, compounded from the base year at ``growth_pct`` per year."""
    benefits = benefits or get_config().benefits
    base_cost = benefits.annual_base_cost
    if year <= benefits.base_year:
        return base_cost
    return base_cost * (1 + growth_pct / 100.0) ** (year - benefits.base_year)


def benefit_start_day(start_day: int, year: int, benefits: Optional[BenefitsConfig] = None) -> int:
    """
    Day of ``year`` on which benefits begin for someone starting on ``start_day``.

    A start on the 1st of any month except February begins benefits on the 1st
    of the following month. Any other start waits ``waiting_period_days`` and
    then begins on the 1st of the month after that. Results past the end of
    the year are reported as ``days_in_year(year) + 1``.
    """
    benefits = benefits or get_config().benefits
    total_days = days_in_year(year)
    start = day_of_year_to_date(start_day, year)

    if start.day == 1 and start.month != 2:
        begins = start + relativedelta(months=1)
    else:
        waited = day_of_year_to_date(start_day + benefits.waiting_period_days, year)
        begins = date(waited.year, waited.month, 1) + relativedelta(months=1)

    if begins.year > year:
        return total_days + 1
    return date_to_day_of_year(begins)


def benefits_cost(
    record: PhysicianRecord,
    year: int,
    growth_pct: float,
    benefits: Optional[BenefitsConfig] = None,
) -> float:
    if not record.receives_benefits:
        return 0.0

    annual = annual_benefit_cost(year, growth_pct, benefits)

    if isinstance(record, NewEmployee):
        total_days = days_in_year(year)
        start_day = start_portion_to_start_day(record.start_portion_of_year, year)
        begins = benefit_start_day(start_day, year, benefits)
        if begins > total_days:
            logger.debug(f"[BENEFITS] {record.name}: benefits begin after {year}; no cost this year")
            return 0.0
        return annual * (total_days - begins + 1) / total_days

    if isinstance(record, (EmployeeToPartner, EmployeeToTerminate)):
        return annual * employee_portion(record)

    if isinstance(record, Employee):
        return annual

    # Partners are not on the practice benefits plan
    return 0.0


__all__ = ["annual_benefit_cost", "benefit_start_day", "benefits_cost"]
