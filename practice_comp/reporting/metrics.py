# practice_comp/reporting/metrics.py
"""
Multi-year summary tables built from a scenario's pool distributions.
"""

import logging
from typing import Optional

import pandas as pd

from practice_comp.config.models import EngineConfig
from practice_comp.engines.pool import distribute_partner_pool
from practice_comp.state.scenario import ScenarioState

logger = logging.getLogger(__name__)

PHYSICIAN_ID = "physician_id"
NAME = "name"
YEAR = "year"
ROLE = "role"
COMPENSATION = "compensation"


def compensation_records(
    state: ScenarioState, config: Optional[EngineConfig] = None, exclude_w2: bool = False
) -> pd.DataFrame:
    """Long-format frame: one row per physician per year."""
    rows = []
    growth = state.projection.benefit_costs_growth_pct
    for fy in state.years:
        distribution = distribute_partner_pool(fy, growth, config, exclude_w2=exclude_w2)
        for line in distribution.lines:
            rows.append({
                YEAR: fy.year,
                PHYSICIAN_ID: line.physician_id,
                NAME: line.name,
                ROLE: line.role,
                COMPENSATION: line.compensation,
            })
    return pd.DataFrame(rows, columns=[YEAR, PHYSICIAN_ID, NAME, ROLE, COMPENSATION])


def compensation_table(
    state: ScenarioState, config: Optional[EngineConfig] = None, exclude_w2: bool = False
) -> pd.DataFrame:
    """
    Physician x year table of compensation, rounded to cents.

    Rows are indexed by physician id with the most recent display name; a
    physician absent from a year shows 0 for it.
    """
    records = compensation_records(state, config, exclude_w2)
    if records.empty:
        logger.warning("[REPORT] Scenario has no physicians; compensation table is empty")
        return pd.DataFrame()

    table = records.pivot_table(
        index=PHYSICIAN_ID, columns=YEAR, values=COMPENSATION, aggfunc="sum", fill_value=0.0
    )
    names = records.groupby(PHYSICIAN_ID)[NAME].last()
    table.insert(0, NAME, names.reindex(table.index))
    order = records[PHYSICIAN_ID].drop_duplicates().tolist()
    table = table.reindex(order)
    year_cols = [c for c in table.columns if c != NAME]
    table[year_cols] = table[year_cols].round(2)
    table.columns.name = None
    return table


def pool_summary(state: ScenarioState, config: Optional[EngineConfig] = None) -> pd.DataFrame:
    """One row per year with the waterfall totals."""
    growth = state.projection.benefit_costs_growth_pct
    rows = []
    for fy in state.years:
        breakdown = distribute_partner_pool(fy, growth, config).breakdown
        rows.append({YEAR: fy.year, **breakdown.as_dict()})
    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(rows).set_index(YEAR)


__all__ = ["compensation_records", "compensation_table", "pool_summary"]
