# practice_comp/projections/propagation.py
"""
Cross-year propagation of physician edits.

Every entry point takes a ScenarioState and returns a new one; the input is
never modified. Physicians are located in other years by their stable id and,
when ``flags.match_by_name`` is on, by display name as a fallback so that
scenarios saved with per-year ids still propagate.
"""

import logging
from typing import Dict, List, Optional, Sequence

from practice_comp.config.loaders import get_config
from practice_comp.config.models import EngineConfig
from practice_comp.engines.proration import (
    is_employee_type,
    is_partner_eligible,
    is_prior_year_retiree,
    partner_portion,
)
from practice_comp.state.scenario import ScenarioState, YearFinancials
from practice_comp.state.schema import (
    Employee,
    EmployeeToPartner,
    EmployeeToTerminate,
    NewEmployee,
    Partner,
    PartnerToRetire,
    PhysicianRecord,
    PhysicianType,
    change_role,
    updated,
)

logger = logging.getLogger(__name__)

PERCENT_TOLERANCE = 1e-6


# --- Medical director percentages ---


def _md_eligible(record: PhysicianRecord) -> bool:
    return is_partner_eligible(record) and not is_prior_year_retiree(record)


def recompute_medical_director_percentages(physicians: Sequence[PhysicianRecord]) -> List[PhysicianRecord]:
    """
    Split 100% of medical director hours by partner portion of the year.
    With no partner time at all, everyone is set to 0%.
    """
    portions = [partner_portion(p) for p in physicians]
    total = sum(portions)
    result = []
    for p, portion in zip(physicians, portions):
        pct = portion / total * 100.0 if total > 0 else 0.0
        result.append(updated(p, medical_director_hours_percentage=pct, has_medical_director_hours=pct > 0))
    return result


def rebalance_medical_director_percentages(
    physicians: Sequence[PhysicianRecord], edited_id: str
) -> List[PhysicianRecord]:
    """
    Keep the edited physician's percentage as entered and spread the rest of
    100% over the other eligible partners: in proportion to their current
    percentages, else by partner portion, else evenly.
    """
    physicians = list(physicians)
    edited = next((p for p in physicians if p.id == edited_id), None)
    if edited is None or not _md_eligible(edited):
        return physicians

    others = [p for p in physicians if p.id != edited_id and _md_eligible(p)]
    if not others:
        # Sole eligible partner holds all of the hours
        return [
            updated(p, medical_director_hours_percentage=100.0, has_medical_director_hours=True)
            if p.id == edited_id else p
            for p in physicians
        ]

    remaining = max(0.0, 100.0 - edited.medical_director_hours_percentage)
    current = {p.id: p.medical_director_hours_percentage for p in others}
    portions = {p.id: partner_portion(p) for p in others}
    if sum(current.values()) > 0:
        basis = current
    elif sum(portions.values()) > 0:
        basis = portions
    else:
        basis = {p.id: 1.0 for p in others}
    basis_total = sum(basis.values())

    result = []
    for p in physicians:
        if p.id in basis:
            pct = basis[p.id] / basis_total * remaining
            p = updated(p, medical_director_hours_percentage=pct, has_medical_director_hours=pct > 0)
        result.append(p)
    return result


def medical_director_total(physicians: Sequence[PhysicianRecord]) -> float:
    return sum(p.medical_director_hours_percentage for p in physicians if _md_eligible(p))


def normalise_medical_director_percentages(physicians: Sequence[PhysicianRecord]) -> List[PhysicianRecord]:
    """
    Scale entered percentages so the eligible partners total 100, keeping
    their proportions. Without any entered hours, fall back to partner portions.
    """
    physicians = list(physicians)
    total = medical_director_total(physicians)
    if total <= 0:
        return recompute_medical_director_percentages(physicians)
    if abs(total - 100.0) <= PERCENT_TOLERANCE:
        return physicians
    result = []
    for p in physicians:
        if _md_eligible(p):
            pct = p.medical_director_hours_percentage / total * 100.0
            p = updated(p, medical_director_hours_percentage=pct, has_medical_director_hours=pct > 0)
        elif p.medical_director_hours_percentage:
            p = updated(p, medical_director_hours_percentage=0.0, has_medical_director_hours=False)
        result.append(p)
    return result


# --- Helpers ---


def _partner_mix(physicians: Sequence[PhysicianRecord]) -> Dict[str, float]:
    return {p.id: partner_portion(p) for p in physicians if partner_portion(p) > 0}


def _locate(physicians: Sequence[PhysicianRecord], physician_id: str, name: str, match_by_name: bool) -> int:
    for i, p in enumerate(physicians):
        if p.id == physician_id:
            return i
    if match_by_name and name:
        for i, p in enumerate(physicians):
            if p.name == name:
                return i
    return -1


def _matches(record: PhysicianRecord, physician_id: str, name: Optional[str], match_by_name: bool) -> bool:
    if record.id == physician_id:
        return True
    return bool(match_by_name and name and record.name == name)


def _with_physicians(fy: YearFinancials, physicians: List[PhysicianRecord]) -> YearFinancials:
    before = _partner_mix(fy.physicians)
    if _partner_mix(physicians) != before:
        physicians = recompute_medical_director_percentages(physicians)
    return fy.model_copy(update={"physicians": physicians})


def _progressed_clone(
    record: PhysicianRecord, years_after: int, config: EngineConfig
) -> Optional[PhysicianRecord]:
    """
    Record for a physician added in an earlier year, ``years_after`` years on.

    EmployeeToPartner becomes Partner. Employee and NewEmployee stay employees
    for ``employee_years_before_transition`` years, transition the year after,
    and are partners from then on.
    """
    progression = config.progression
    salary = record.salary if record.salary > 0 else progression.default_clone_salary
    weeks = record.weeks_vacation if record.weeks_vacation > 0 else progression.default_clone_weeks_vacation
    common = dict(id=record.id, name=record.name)

    if isinstance(record, (Partner, EmployeeToPartner)):
        return Partner(weeks_vacation=weeks, **common)

    if isinstance(record, (Employee, NewEmployee)):
        if years_after <= progression.employee_years_before_transition:
            return Employee(
                salary=salary,
                receives_benefits=record.receives_benefits,
                **common,
            )
        if years_after == progression.employee_years_before_transition + 1:
            return EmployeeToPartner(
                employee_portion_of_year=progression.transition_employee_portion,
                salary=salary,
                weeks_vacation=weeks,
                **common,
            )
        return Partner(weeks_vacation=weeks, **common)

    # Leaving physicians are never carried forward
    return None


def _carry_forward(target: PhysicianRecord, source: PhysicianRecord) -> PhysicianRecord:
    """Apply an edit made in an earlier year to the physician's later-year record."""
    if isinstance(source, EmployeeToPartner) and not isinstance(target, (Partner, PartnerToRetire)):
        target = change_role(target, PhysicianType.PARTNER, salary=0.0)

    changes = {}
    # Floors only ever raise the later year's value
    if is_employee_type(target) and source.salary > target.salary:
        changes["salary"] = source.salary
    if is_partner_eligible(target) and source.weeks_vacation > target.weeks_vacation:
        changes["weeks_vacation"] = source.weeks_vacation
    return updated(target, **changes) if changes else target


# --- Entry points ---


def apply_physician_edit(
    state: ScenarioState,
    year: int,
    record: PhysicianRecord,
    config: Optional[EngineConfig] = None,
) -> ScenarioState:
    """
    Store ``record`` in ``year`` and bring every later year of the scenario
    back in line with it.
    """
    config = config or get_config()
    match_by_name = config.flags.match_by_name
    state = state.clone()

    fy = state.year(year)
    if fy is None:
        logger.warning(f"[PROPAGATE] Year {year} is not part of the scenario; edit to {record.id} ignored")
        return state

    physicians = list(fy.physicians)
    idx = next((i for i, p in enumerate(physicians) if p.id == record.id), -1)
    previous = physicians[idx] if idx >= 0 else None
    if previous is None:
        physicians.append(record)
    else:
        physicians[idx] = record

    mix_changed = _partner_mix(fy.physicians) != _partner_mix(physicians)
    previous_pct = previous.medical_director_hours_percentage if previous is not None else 0.0
    pct_changed = abs(previous_pct - record.medical_director_hours_percentage) > PERCENT_TOLERANCE
    if mix_changed:
        physicians = recompute_medical_director_percentages(physicians)
        # A role change built with no hours leaves the split to the recompute
        pct_changed = pct_changed and record.medical_director_hours_percentage > 0
        if pct_changed:
            # The entered value survives the recompute
            physicians = [
                updated(p, medical_director_hours_percentage=record.medical_director_hours_percentage,
                        has_medical_director_hours=True)
                if p.id == record.id else p
                for p in physicians
            ]
    if pct_changed:
        physicians = rebalance_medical_director_percentages(physicians, record.id)

    new_years: List[YearFinancials] = []
    old_name = previous.name if previous is not None else None
    renamed = old_name is not None and old_name != record.name
    leaving = isinstance(record, (PartnerToRetire, EmployeeToTerminate))

    for row in state.years:
        if row.year == year:
            row = row.model_copy(update={"physicians": physicians})
        elif renamed and row.year < year:
            row = row.model_copy(update={"physicians": [
                updated(p, name=record.name) if _matches(p, record.id, old_name, match_by_name) else p
                for p in row.physicians
            ]})
        elif row.year > year:
            row = _propagate_into(row, year, record, previous, old_name, leaving, config)
        new_years.append(row)

    logger.info(
        f"[PROPAGATE] {record.type} edit for {record.name} ({record.id}) in {year}"
        f"{'; removed from later years' if leaving else ''}"
    )
    return state.model_copy(update={"years": new_years})


def _propagate_into(
    row: YearFinancials,
    year: int,
    record: PhysicianRecord,
    previous: Optional[PhysicianRecord],
    old_name: Optional[str],
    leaving: bool,
    config: EngineConfig,
) -> YearFinancials:
    match_by_name = config.flags.match_by_name
    physicians = list(row.physicians)

    if leaving:
        kept = [
            p for p in physicians
            if not (_matches(p, record.id, record.name, match_by_name)
                    or _matches(p, record.id, old_name, match_by_name))
        ]
        if len(kept) != len(physicians):
            logger.debug(f"[PROPAGATE] Removed {record.name} ({record.id}) from {row.year}")
        return _with_physicians(row, kept)

    j = _locate(physicians, record.id, record.name, match_by_name)
    if j < 0 and old_name:
        j = _locate(physicians, record.id, old_name, match_by_name)

    if j < 0:
        if previous is not None:
            # Only physicians added in this edit are created in later years
            return row
        clone = _progressed_clone(record, row.year - year, config)
        if clone is None:
            return row
        logger.debug(f"[PROPAGATE] Added {clone.type} {clone.name} ({clone.id}) to {row.year}")
        physicians.append(clone)
        return _with_physicians(row, physicians)

    target = physicians[j]
    if target.name != record.name:
        target = updated(target, name=record.name)
    physicians[j] = _carry_forward(target, record)
    return _with_physicians(row, physicians)


def remove_physician(
    state: ScenarioState,
    year: int,
    physician_id: str,
    config: Optional[EngineConfig] = None,
) -> ScenarioState:
    """Remove a physician from ``year`` and every later year."""
    config = config or get_config()
    match_by_name = config.flags.match_by_name
    state = state.clone()

    fy = state.year(year)
    if fy is None:
        logger.warning(f"[PROPAGATE] Year {year} is not part of the scenario; nothing removed")
        return state
    target = fy.physician(physician_id)
    if target is None:
        logger.warning(f"[PROPAGATE] Physician {physician_id!r} not found in {year}; nothing removed")
        return state

    new_years = []
    for row in state.years:
        if row.year >= year:
            kept = [p for p in row.physicians if not _matches(p, physician_id, target.name, match_by_name)]
            if len(kept) != len(row.physicians):
                row = _with_physicians(row, kept)
                if row.prcs_director_physician_id == physician_id:
                    row = row.model_copy(update={"prcs_director_physician_id": None})
        new_years.append(row)

    logger.info(f"[PROPAGATE] Removed {target.name} ({physician_id}) from {year} onward")
    return state.model_copy(update={"years": new_years})


__all__ = [
    "apply_physician_edit",
    "remove_physician",
    "rebalance_medical_director_percentages",
    "recompute_medical_director_percentages",
    "medical_director_total",
    "normalise_medical_director_percentages",
]
