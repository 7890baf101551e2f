# practice_comp/scenario_loader.py
"""
Loading of scenario YAML files and conversion into ScenarioState objects.

A scenario file may ``extends`` another file in the same directory; the child
is deep-merged over its parent (mappings merge recursively, lists and scalars
are replaced wholesale).
"""

import glob
import logging
import os
import re
from copy import deepcopy
from typing import Any, Dict, List, Optional

import yaml

from practice_comp.config.models import EngineConfig
from practice_comp.projections.baseline import resolve_baseline
from practice_comp.projections.growth import grow_projection
from practice_comp.projections.propagation import (
    normalise_medical_director_percentages,
    recompute_medical_director_percentages,
)
from practice_comp.state.scenario import BaselineMode, ProjectionSettings, ScenarioState, YearFinancials
from practice_comp.state.schema import PORTION_FIELDS, physician_from_dict
from practice_comp.utils.date_utils import calendar_date_to_portion

logger = logging.getLogger(__name__)

__all__ = ['load', 'deep_merge', 'build_scenario']

_CALENDAR_DATE = re.compile(r"^(\d{1,2})-(\d{1,2})$")


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge override into base and return the result.
    """
    for key, val in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(val, dict):
            base[key] = deep_merge(base[key], val)
        else:
            base[key] = deepcopy(val)
    return base


def load(path: str) -> Any:
    """
    Load a scenario from a YAML file or directory of YAMLs.
    If path is a directory, returns Dict[str, Dict].
    If path is a file, returns a single config dict, resolving 'extends'.
    """
    path = str(path)
    if os.path.isdir(path):
        raw = {}
        for ext in ('*.yaml', '*.yml'):
            for fp in sorted(glob.glob(os.path.join(path, ext))):
                name = os.path.splitext(os.path.basename(fp))[0]
                with open(fp) as f:
                    raw[name] = yaml.safe_load(f) or {}

        def resolve(name: str, seen=None):
            if seen is None:
                seen = set()
            if name in seen:
                raise ValueError(f"Circular extends detected in '{name}'")
            seen.add(name)
            cfg = raw.get(name)
            if cfg is None:
                raise ValueError(f"Scenario '{name}' not found in {path}")
            parent = cfg.get('extends')
            base = {}
            if parent:
                parent_name = os.path.splitext(parent)[0]
                base = resolve(parent_name, seen)
            overrides = {k: v for k, v in cfg.items() if k != 'extends'}
            return deep_merge(base, overrides)

        return {name: resolve(name) for name in raw}

    dirpath = os.path.dirname(path)
    with open(path) as f:
        cfg = yaml.safe_load(f) or {}
    parent = cfg.get('extends')
    if not parent:
        return cfg
    parent_fp = os.path.join(dirpath, parent)
    if not os.path.exists(parent_fp):
        raise FileNotFoundError(f"Parent config '{parent}' not found for {path}")
    parent_cfg = load(parent_fp)
    overrides = {k: v for k, v in cfg.items() if k != 'extends'}
    return deep_merge(parent_cfg, overrides)


def _portion_value(value: Any, year: int) -> Any:
    """Portions may be written as "MM-DD"; convert those to a fraction of ``year``."""
    if isinstance(value, str):
        m = _CALENDAR_DATE.match(value.strip())
        if m is None:
            raise ValueError(f"Unrecognised portion value {value!r}; expected a number or 'MM-DD'")
        return calendar_date_to_portion(int(m.group(1)), int(m.group(2)), year)
    return value


def _roster_for_year(physicians: Dict[str, Any], year: int) -> List[Any]:
    roster = []
    for physician_id, entry in (physicians or {}).items():
        years = (entry or {}).get('years') or {}
        # YAML keeps int keys; snapshots converted to YAML may carry strings
        record = years.get(year, years.get(str(year)))
        if record is None:
            continue
        data = dict(record)
        for field in PORTION_FIELDS:
            if field in data:
                data[field] = _portion_value(data[field], year)
        data['id'] = str(physician_id)
        data.setdefault('name', entry.get('name', str(physician_id)))
        roster.append(physician_from_dict(data))
    return roster


def build_scenario(raw: Dict[str, Any], config: EngineConfig, baseline_mode: Optional[str] = None) -> ScenarioState:
    """
    Turn a resolved scenario mapping into a ScenarioState covering the baseline
    year plus ``config.projection_years`` projected years.
    """
    mode = BaselineMode.normalise(baseline_mode or raw.get('baseline_mode'), config.current_year)
    projection = ProjectionSettings.model_validate(raw.get('projection') or {})
    manual_md_years = set(raw.get('manual_md_years') or [])
    prcs_id = raw.get('prcs_director_physician_id')
    physicians = raw.get('physicians') or {}

    baseline = resolve_baseline(mode, config.historic, config.current_year, config.fallback_baseline)
    first_year = config.current_year
    years: List[YearFinancials] = []
    for offset in range(config.projection_years + 1):
        year = first_year + offset
        roster = _roster_for_year(physicians, year)
        if year in manual_md_years:
            roster = normalise_medical_director_percentages(roster)
        else:
            roster = recompute_medical_director_percentages(roster)
        prcs = prcs_id if any(p.id == prcs_id for p in roster) else None
        if offset == 0:
            row = baseline.model_copy(update={'year': year, 'physicians': roster,
                                              'prcs_director_physician_id': prcs})
        else:
            row = YearFinancials(year=year, physicians=roster, prcs_director_physician_id=prcs)
        years.append(row)

    state = ScenarioState(
        years=grow_projection(years, projection),
        projection=projection,
        baseline_mode=mode,
        selected_year=first_year,
    )
    logger.info(
        f"[SCENARIO] Built '{raw.get('name', 'scenario')}' for {first_year}-{years[-1].year} "
        f"({len(physicians)} physicians, baseline mode '{mode.value}')"
    )
    return state
