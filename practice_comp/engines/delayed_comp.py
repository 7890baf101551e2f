# practice_comp/engines/delayed_comp.py
"""
Delayed W2 compensation for physicians who become partners mid-year.

Pay periods that straddle the year boundary pay out, in January, wages that
were earned in December of the prior year. When an employee transitions to
partner, those wages are still owed to them as W2 pay in the new year.

The calculation:

1. a known-correction table is consulted first (identity + year);
2. the transition date is derived from ``employee_portion_of_year``;
3. the practice's fixed-length pay periods paying out between Jan 1 of the
   year and Jan 31 of the following year are enumerated;
4. for every period paid on or after the transition date that started in the
   prior year, the Mon-Fri business days falling in the prior year are
   counted;
5. amount = days * hours_per_day * salary / annual_work_hours, and employer
   payroll taxes are computed on that amount.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from practice_comp.config.loaders import get_config
from practice_comp.config.models import EngineConfig
from practice_comp.engines.payroll_tax import employer_payroll_taxes
from practice_comp.state.schema import EmployeeToPartner, PhysicianRecord
from practice_comp.utils.date_utils import employee_portion_to_transition_day, day_of_year_to_date

logger = logging.getLogger(__name__)

PERIOD_START = "period_start"
PERIOD_END = "period_end"
PAY_DATE = "pay_date"


@dataclass(frozen=True)
class DelayedPeriod:
    period_start: date
    period_end: date
    pay_date: date
    work_days: int


@dataclass(frozen=True)
class DelayedCompensation:
    amount: float = 0.0
    taxes: float = 0.0
    period_details: str = ""
    periods: Tuple[DelayedPeriod, ...] = ()

    @property
    def total_cost(self) -> float:
        return self.amount + self.taxes


NO_DELAYED_COMPENSATION = DelayedCompensation()


def pay_periods_for_year(year: int, config: Optional[EngineConfig] = None) -> pd.DataFrame:
    """
    Pay periods whose pay date falls between Jan 1 of ``year`` and Jan 31 of
    ``year + 1``, one row per period.
    """
    calendar = (config or get_config()).payroll_calendar
    step = pd.Timedelta(days=calendar.period_days)
    ref_pay = pd.Timestamp(calendar.reference_pay_date)
    pay_lag = ref_pay - pd.Timestamp(calendar.reference_period_end)

    window_start = pd.Timestamp(year, 1, 1)
    window_end = pd.Timestamp(year + 1, 1, 31)

    # First pay date on or after Jan 1, stepping whole periods from the anchor
    offset = int(np.ceil((window_start - ref_pay) / step))
    first_pay = ref_pay + offset * step

    pay_dates = pd.date_range(start=first_pay, end=window_end, freq=step)
    periods = pd.DataFrame({PAY_DATE: pay_dates})
    periods[PERIOD_END] = periods[PAY_DATE] - pay_lag
    periods[PERIOD_START] = periods[PERIOD_END] - (step - pd.Timedelta(days=1))
    return periods[[PERIOD_START, PERIOD_END, PAY_DATE]]


def _format_md(d: date) -> str:
    return f"{d.month}/{d.day}"


def _prior_year_work_days(periods: pd.DataFrame, year: int, transition: date) -> List[DelayedPeriod]:
    prior_year_end = pd.Timestamp(year - 1, 12, 31)
    eligible = periods[
        (periods[PAY_DATE] >= pd.Timestamp(transition)) & (periods[PERIOD_START] <= prior_year_end)
    ]
    found = []
    for row in eligible.itertuples(index=False):
        start = getattr(row, PERIOD_START).date()
        end = min(getattr(row, PERIOD_END), prior_year_end).date()
        # busday_count excludes its end date
        work_days = int(np.busday_count(start, end + timedelta(days=1)))
        found.append(DelayedPeriod(start, end, getattr(row, PAY_DATE).date(), work_days))
    return found


def delayed_compensation(
    record: PhysicianRecord, year: int, config: Optional[EngineConfig] = None
) -> DelayedCompensation:
    """Delayed W2 amount and employer taxes owed to ``record`` in ``year``."""
    if not isinstance(record, EmployeeToPartner):
        return NO_DELAYED_COMPENSATION

    config = config or get_config()
    override = config.delayed_comp_override(record.id, year)
    if override is not None:
        logger.debug(f"[DELAYED] Using recorded delayed compensation for {record.name} ({record.id}) in {year}")
        return DelayedCompensation(override.amount, override.taxes, override.period_details)

    calendar = config.payroll_calendar
    transition_day = employee_portion_to_transition_day(record.employee_portion_of_year, year)
    transition = day_of_year_to_date(transition_day, year)

    periods = _prior_year_work_days(pay_periods_for_year(year, config), year, transition)
    total_days = sum(p.work_days for p in periods)
    if total_days == 0:
        return NO_DELAYED_COMPENSATION

    hourly_rate = record.salary / calendar.annual_work_hours
    amount = total_days * calendar.hours_per_day * hourly_rate
    taxes = employer_payroll_taxes(amount, year, config.payroll_taxes)
    details = ", ".join(
        f"{_format_md(p.period_start)}-{_format_md(p.period_end)} "
        f"(paid {_format_md(p.pay_date)}, {p.work_days} work days)"
        for p in periods
    )
    logger.debug(
        f"[DELAYED] {record.name} ({record.id}) {year}: {total_days} prior-year work days, "
        f"amount={amount:.2f}, taxes={taxes:.2f}"
    )
    return DelayedCompensation(amount, taxes, details, tuple(periods))


__all__ = [
    "DelayedCompensation",
    "DelayedPeriod",
    "NO_DELAYED_COMPENSATION",
    "pay_periods_for_year",
    "delayed_compensation",
]
