# practice_comp/engines/medical_director.py
"""
Allocation of the two fixed-dollar medical director pools.

* Partners who retired in a prior year receive a fixed trailing amount of
  shared medical director money, taken off the top of the shared pool.
* The rest of the shared pool is split by ``medical_director_hours_percentage``
  among current partners that have medical director hours; those percentages
  total 100.
* The PRCS pool goes in full to the assigned physician, when that physician
  is on this year's roster.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from practice_comp.config.loaders import get_config
from practice_comp.config.models import MedicalDirectorConfig
from practice_comp.engines.proration import is_partner_eligible, is_prior_year_retiree
from practice_comp.state.schema import PhysicianRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MedicalDirectorAllocation:
    allocations: Dict[str, float]  # shared + PRCS, by physician id
    shared_total: float
    prcs_total: float
    trailing: Dict[str, float]  # trailing shared MD for prior-year retirees
    trailing_total: float

    @property
    def total(self) -> float:
        return self.shared_total + self.prcs_total + self.trailing_total

    def for_physician(self, physician_id: str) -> float:
        return self.allocations.get(physician_id, 0.0) + self.trailing.get(physician_id, 0.0)


def trailing_md_amount(record: PhysicianRecord, md_config: Optional[MedicalDirectorConfig] = None) -> float:
    if not is_prior_year_retiree(record):
        return 0.0
    if record.trailing_shared_md_amount is not None:
        return record.trailing_shared_md_amount
    md_config = md_config or get_config().medical_director
    return md_config.default_trailing_shared_md_amount


def allocate_medical_director(
    md_pool: float,
    prcs_pool: float,
    prcs_physician_id: Optional[str],
    physicians: Iterable[PhysicianRecord],
    md_config: Optional[MedicalDirectorConfig] = None,
) -> MedicalDirectorAllocation:
    physicians = list(physicians)
    allocations: Dict[str, float] = {}
    trailing: Dict[str, float] = {}

    for p in physicians:
        if is_prior_year_retiree(p):
            amount = trailing_md_amount(p, md_config)
            if amount > 0:
                trailing[p.id] = amount
    trailing_total = sum(trailing.values())
    if trailing_total > md_pool:
        logger.debug(f"[MD] Trailing amounts {trailing_total:.2f} exceed the shared pool {md_pool:.2f}")
    shared_pool = max(0.0, md_pool - trailing_total)

    for p in physicians:
        if not is_partner_eligible(p) or is_prior_year_retiree(p):
            continue
        if p.has_medical_director_hours and p.medical_director_hours_percentage > 0:
            allocations[p.id] = p.medical_director_hours_percentage / 100.0 * shared_pool

    shared_total = sum(allocations.values())

    prcs_total = 0.0
    if prcs_physician_id:
        if any(p.id == prcs_physician_id for p in physicians):
            allocations[prcs_physician_id] = allocations.get(prcs_physician_id, 0.0) + prcs_pool
            prcs_total = prcs_pool
        else:
            logger.debug(f"[MD] PRCS director {prcs_physician_id!r} not on this year's roster; no PRCS allocation")

    return MedicalDirectorAllocation(
        allocations=allocations,
        shared_total=shared_total,
        prcs_total=prcs_total,
        trailing=trailing,
        trailing_total=trailing_total,
    )


__all__ = ["MedicalDirectorAllocation", "allocate_medical_director", "trailing_md_amount"]
