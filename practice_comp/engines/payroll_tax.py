# practice_comp/engines/payroll_tax.py
"""
Employer-side payroll taxes for a Washington State practice with fewer than
50 employees.

The additional-medicare surtax is employee-borne and is not computed here.
"""

import logging
from dataclasses import astuple, dataclass
from typing import Optional

from practice_comp.config.loaders import get_config
from practice_comp.config.models import PayrollTaxRates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PayrollTaxBreakdown:
    federal_unemployment: float
    social_security: float
    medicare: float
    wa_unemployment: float
    wa_family_leave: float
    wa_state_disability: float
    washington_rate: float

    @property
    def total(self) -> float:
        return sum(astuple(self))


def _default_rates() -> PayrollTaxRates:
    return get_config().payroll_taxes


def social_security_wage_base(year: int, rates: Optional[PayrollTaxRates] = None) -> float:
    """
    Wage base for ``year``; years past the table use the last tabulated year,
    years before it use the first.
    """
    rates = rates or _default_rates()
    table = rates.social_security_wage_bases
    if year in table:
        return table[year]
    years = sorted(table)
    if year > years[-1]:
        return table[years[-1]]
    return table[years[0]]


def payroll_tax_breakdown(wages: float, year: int, rates: Optional[PayrollTaxRates] = None) -> PayrollTaxBreakdown:
    rates = rates or _default_rates()
    wages = max(0.0, float(wages or 0.0))
    ss_base = social_security_wage_base(year, rates)

    return PayrollTaxBreakdown(
        federal_unemployment=min(wages, rates.federal_unemployment_wage_base) * rates.federal_unemployment_rate,
        social_security=min(wages, ss_base) * rates.social_security_rate,
        medicare=wages * rates.medicare_rate,
        wa_unemployment=min(wages, rates.wa_unemployment_wage_base) * rates.wa_unemployment_rate,
        wa_family_leave=min(wages, ss_base) * rates.wa_family_leave_rate,
        wa_state_disability=wages * rates.wa_state_disability_rate,
        washington_rate=wages * rates.washington_rate,
    )


def employer_payroll_taxes(wages: float, year: int, rates: Optional[PayrollTaxRates] = None) -> float:
    """Total employer payroll tax on ``wages`` paid in ``year``."""
    return payroll_tax_breakdown(wages, year, rates).total


__all__ = [
    "PayrollTaxBreakdown",
    "social_security_wage_base",
    "payroll_tax_breakdown",
    "employer_payroll_taxes",
]
