# practice_comp/projections/growth.py
"""
Projection of the yearly aggregates from the baseline year.
"""

import logging
from typing import Dict, List, Sequence

from practice_comp.state.scenario import ProjectionSettings, YearFinancials

logger = logging.getLogger(__name__)

# Aggregate field -> ProjectionSettings growth-percentage field
COMPOUNDED_FIELDS: Dict[str, str] = {
    "therapy_income": "income_growth_pct",
    "non_employment_costs": "non_employment_costs_pct",
    "non_md_employment_costs": "non_md_employment_costs_pct",
    "misc_employment_costs": "misc_employment_costs_pct",
}

# Aggregate fields taken as flat amounts from ProjectionSettings
GLOBAL_AMOUNT_FIELDS = (
    "locum_costs",
    "medical_director_pool",
    "prcs_director_pool",
    "consulting_services",
)


def grow_projection(years: Sequence[YearFinancials], settings: ProjectionSettings) -> List[YearFinancials]:
    """
    Return new YearFinancials with every year after the first derived from the
    year before it.

    Compounded fields grow the prior year's value by ``(1 + pct/100)``; global
    amount fields take the scenario's flat amounts. A field listed in a year's
    ``overrides`` keeps its value, and later years compound from it. The first
    (baseline) year is returned unchanged.
    """
    if not years:
        return []

    grown: List[YearFinancials] = [years[0].model_copy(deep=True)]
    for fy in years[1:]:
        prior = grown[-1]
        update = {}
        for name, pct_field in COMPOUNDED_FIELDS.items():
            if name in fy.overrides:
                continue
            pct = getattr(settings, pct_field)
            update[name] = getattr(prior, name) * (1 + pct / 100.0)
        for name in GLOBAL_AMOUNT_FIELDS:
            if name not in fy.overrides:
                update[name] = getattr(settings, name)
        grown.append(fy.model_copy(update=update, deep=True))

    logger.debug(
        f"[GROWTH] Projected {len(grown) - 1} years from baseline {grown[0].year}; "
        f"final therapy income {grown[-1].therapy_income:.2f}"
    )
    return grown


__all__ = ["grow_projection", "COMPOUNDED_FIELDS", "GLOBAL_AMOUNT_FIELDS"]
