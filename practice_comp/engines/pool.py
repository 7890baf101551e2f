# practice_comp/engines/pool.py
"""
Partner pool waterfall for one year.

    total income      = therapy income + MD pool + PRCS pool (if assigned) + consulting
    base pool         = max(0, total income - operating costs - employee cost
                                - buyouts - delayed W2 cost)
    distributable     = max(0, base pool - MD allocations - additional-days pay)

The distributable pool is split among partner-eligible physicians by FTE
weight. Direct allocations (medical director, additional days, buyout,
trailing MD, W2 salary and delayed W2 for transitioning partners) are added
on top of the pool share.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from practice_comp.config.loaders import get_config
from practice_comp.config.models import EngineConfig
from practice_comp.engines.benefits import benefits_cost
from practice_comp.engines.delayed_comp import delayed_compensation
from practice_comp.engines.medical_director import MedicalDirectorAllocation, allocate_medical_director
from practice_comp.engines.payroll_tax import employer_payroll_taxes
from practice_comp.engines.proration import (
    employee_portion,
    is_employee_type,
    is_partner_eligible,
    partner_fte_weight,
    prorated_salary,
)
from practice_comp.state.scenario import YearFinancials
from practice_comp.state.schema import EmployeeToPartner, PartnerToRetire, PhysicianRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolBreakdown:
    """Totals of the waterfall for one year."""

    total_income: float = 0.0
    base_pool: float = 0.0
    distributable_pool: float = 0.0
    total_employee_cost: float = 0.0
    total_buyout_cost: float = 0.0
    total_delayed_cost: float = 0.0
    total_medical_director_allocation: float = 0.0
    total_additional_days_allocation: float = 0.0
    total_weight: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class CompensationLine:
    """One physician's compensation and the pieces it is made of."""

    physician_id: str
    name: str
    role: str
    compensation: float
    fte_weight: float = 0.0
    pool_share: float = 0.0
    medical_director: float = 0.0
    trailing_md: float = 0.0
    additional_days: float = 0.0
    buyout: float = 0.0
    w2_salary: float = 0.0
    delayed_w2: float = 0.0
    bonus: float = 0.0


@dataclass(frozen=True)
class PoolDistribution:
    breakdown: PoolBreakdown
    lines: List[CompensationLine] = field(default_factory=list)
    medical_director: Optional[MedicalDirectorAllocation] = None

    def line(self, physician_id: str) -> Optional[CompensationLine]:
        for line in self.lines:
            if line.physician_id == physician_id:
                return line
        return None

    @property
    def total_pool_shares(self) -> float:
        return sum(line.pool_share for line in self.lines)


def employee_total_cost(
    record: PhysicianRecord,
    year: int,
    benefit_growth_pct: float,
    config: Optional[EngineConfig] = None,
) -> float:
    """
    Practice cost of a physician's employee time: prorated salary, bonus,
    benefits and employer payroll tax on the prorated salary.
    """
    if not is_employee_type(record) or employee_portion(record) <= 0:
        return 0.0
    config = config or get_config()
    salary = prorated_salary(record)
    return (
        salary
        + record.bonus_amount
        + benefits_cost(record, year, benefit_growth_pct, config.benefits)
        + employer_payroll_taxes(salary, year, config.payroll_taxes)
    )


def _buyout_is_practice_cost(record: PartnerToRetire, config: EngineConfig) -> bool:
    # A partner who retired in a prior year carries no weight this year
    return partner_fte_weight(record) > 0 or config.flags.deduct_prior_year_buyouts


def distribute_partner_pool(
    fy: YearFinancials,
    benefit_growth_pct: float,
    config: Optional[EngineConfig] = None,
    exclude_w2: bool = False,
) -> PoolDistribution:
    """
    Run the full waterfall for one year and return per-physician compensation.

    With ``exclude_w2`` the W2 salary portion and delayed W2 pay of a
    transitioning partner are left out of their compensation figure (they are
    still practice costs).
    """
    config = config or get_config()
    year = fy.year
    physicians = list(fy.physicians)
    partners = [p for p in physicians if is_partner_eligible(p)]

    total_employee_cost = sum(employee_total_cost(p, year, benefit_growth_pct, config) for p in physicians)

    total_buyout_cost = sum(
        p.buyout_cost for p in partners if isinstance(p, PartnerToRetire) and _buyout_is_practice_cost(p, config)
    )

    delayed = {p.id: delayed_compensation(p, year, config) for p in physicians if isinstance(p, EmployeeToPartner)}
    total_delayed_cost = sum(d.total_cost for d in delayed.values())

    md = allocate_medical_director(
        fy.medical_director_pool,
        fy.prcs_director_pool,
        fy.prcs_director_physician_id,
        physicians,
        config.medical_director,
    )

    additional_days = {p.id: p.additional_days_worked for p in partners if p.additional_days_worked > 0}
    total_additional_days = sum(additional_days.values())

    total_income = fy.therapy_income + fy.medical_director_pool + md.prcs_total + fy.consulting_services
    total_costs = (
        fy.non_employment_costs
        + fy.non_md_employment_costs
        + fy.misc_employment_costs
        + fy.locum_costs
        + total_employee_cost
        + total_buyout_cost
        + total_delayed_cost
    )
    base_pool = max(0.0, total_income - total_costs)
    distributable_pool = max(0.0, base_pool - md.total - total_additional_days)

    weights = {p.id: partner_fte_weight(p) for p in partners}
    total_weight = sum(weights.values())
    if total_weight <= 0 and partners:
        logger.warning(f"[POOL] {year}: partners present but total FTE weight is 0; no pool shares paid")

    lines: List[CompensationLine] = []
    for p in partners:
        weight = weights[p.id]
        share = weight / total_weight * distributable_pool if total_weight > 0 else 0.0
        md_amount = md.allocations.get(p.id, 0.0)
        trailing = md.trailing.get(p.id, 0.0)
        extra_days = additional_days.get(p.id, 0.0)
        buyout = p.buyout_cost if isinstance(p, PartnerToRetire) else 0.0
        w2_salary = prorated_salary(p) if isinstance(p, EmployeeToPartner) else 0.0
        delayed_w2 = delayed[p.id].amount if p.id in delayed else 0.0

        compensation = share + md_amount + trailing + extra_days + buyout
        if not exclude_w2:
            compensation += w2_salary + delayed_w2

        lines.append(
            CompensationLine(
                physician_id=p.id,
                name=p.name,
                role=p.type,
                compensation=compensation,
                fte_weight=weight,
                pool_share=share,
                medical_director=md_amount,
                trailing_md=trailing,
                additional_days=extra_days,
                buyout=buyout,
                w2_salary=w2_salary,
                delayed_w2=delayed_w2,
            )
        )

    for p in physicians:
        if is_partner_eligible(p):
            continue
        salary = prorated_salary(p)
        # Payroll tax and benefits are practice costs, not take-home pay
        lines.append(
            CompensationLine(
                physician_id=p.id,
                name=p.name,
                role=p.type,
                compensation=salary + p.bonus_amount,
                w2_salary=salary,
                bonus=p.bonus_amount,
            )
        )

    breakdown = PoolBreakdown(
        total_income=total_income,
        base_pool=base_pool,
        distributable_pool=distributable_pool,
        total_employee_cost=total_employee_cost,
        total_buyout_cost=total_buyout_cost,
        total_delayed_cost=total_delayed_cost,
        total_medical_director_allocation=md.total,
        total_additional_days_allocation=total_additional_days,
        total_weight=total_weight,
    )
    logger.debug(
        f"[POOL] {year}: income={total_income:.2f} costs={total_costs:.2f} base={base_pool:.2f} "
        f"md={md.total:.2f} extra_days={total_additional_days:.2f} distributable={distributable_pool:.2f} "
        f"partners={len(partners)} employees={len(physicians) - len(partners)}"
    )
    return PoolDistribution(breakdown=breakdown, lines=lines, medical_director=md)


__all__ = [
    "PoolBreakdown",
    "CompensationLine",
    "PoolDistribution",
    "employee_total_cost",
    "distribute_partner_pool",
]
