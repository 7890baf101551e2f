# practice_comp/projections/baseline.py
"""
Resolution of the aggregates that seed a scenario's baseline year.
"""

import logging
from typing import Iterable, Optional

from practice_comp.config.models import BaselineFigures
from practice_comp.state.scenario import BaselineMode, HistoricYear, YearFinancials

logger = logging.getLogger(__name__)

_SEEDED_FIELDS = (
    "therapy_income",
    "non_employment_costs",
    "non_md_employment_costs",
    "misc_employment_costs",
    "locum_costs",
    "medical_director_pool",
    "prcs_director_pool",
    "consulting_services",
)


def _find_historic(historic: Iterable[HistoricYear], year: int) -> Optional[HistoricYear]:
    for row in historic:
        if row.year == year:
            return row
    return None


def _from_fallback(fallback: BaselineFigures, year: int) -> YearFinancials:
    return YearFinancials(year=year, **{name: getattr(fallback, name) for name in _SEEDED_FIELDS})


def resolve_baseline(
    mode: BaselineMode,
    historic: Iterable[HistoricYear],
    current_year: int,
    fallback: BaselineFigures,
    existing: Optional[YearFinancials] = None,
) -> YearFinancials:
    """
    Aggregates for the baseline row (``current_year``) under ``mode``.

    * Current Year Data: the historic actuals for ``current_year``.
    * Prior Year Data: the historic actuals for ``current_year - 1``.
    * Custom: the scenario's own baseline row, when there is one.

    Missing actuals, and missing optional fields of a historic row, fall back
    to the configured default baseline. The returned row has no physicians.
    """
    if mode == BaselineMode.CUSTOM:
        if existing is not None:
            return existing.model_copy(update={"physicians": []}, deep=True)
        logger.warning("[BASELINE] Custom baseline requested with no existing row; using default baseline")
        return _from_fallback(fallback, current_year)

    source_year = current_year if mode == BaselineMode.CURRENT_YEAR else current_year - 1
    row = _find_historic(historic, source_year)
    if row is None:
        logger.warning(f"[BASELINE] No historic data for {source_year}; using default baseline figures")
        return _from_fallback(fallback, current_year)

    values = {}
    for name in _SEEDED_FIELDS:
        value = getattr(row, name)
        values[name] = value if value is not None else getattr(fallback, name)
    logger.debug(f"[BASELINE] Seeded {current_year} baseline from {source_year} actuals ({mode.value})")
    return YearFinancials(year=current_year, **values)


__all__ = ["resolve_baseline"]
