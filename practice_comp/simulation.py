# practice_comp/simulation.py
"""
Engine facade: owns Scenario A (always present) and Scenario B (optional) and
exposes the read and mutation entry points used by display and persistence
layers.

Every mutation replaces the scenario's state with a new ScenarioState built
by the pure reducers in ``practice_comp.projections``; compensation is
recomputed from scratch on every read.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
import yaml
from pydantic import ValidationError

from practice_comp import scenario_loader
from practice_comp.config.loaders import SCENARIOS_DIR, ConfigLoadError, get_config, load_engine_config
from practice_comp.config.models import EngineConfig
from practice_comp.engines.pool import PoolBreakdown, PoolDistribution, distribute_partner_pool
from practice_comp.projections.baseline import resolve_baseline
from practice_comp.projections.growth import grow_projection
from practice_comp.projections.propagation import apply_physician_edit, remove_physician
from practice_comp.reporting.metrics import compensation_table
from practice_comp.state.scenario import FINANCIAL_FIELDS, BaselineMode, ProjectionSettings, ScenarioState
from practice_comp.state.schema import PhysicianRecord, physician_from_dict
from practice_comp.utils.decimal_helpers import to_money

logger = logging.getLogger(__name__)

SCENARIO_A = "A"
SCENARIO_B = "B"
# Scenario file stem -> scenario key
SCENARIO_FILES = {"scenario_a": SCENARIO_A, "scenario_b": SCENARIO_B}

_SNAPSHOT_MODE_KEYS = ("baselineMode", "baseline_mode", "dataMode")


class SnapshotLoadError(ValueError):
    """Raised when a snapshot payload does not have a valid scenario shape."""

    pass


def _field_name(name: str, allowed) -> Optional[str]:
    """Accept snake_case or camelCase field names."""
    if name in allowed:
        return name
    snake = "".join(f"_{c.lower()}" if c.isupper() else c for c in name)
    return snake if snake in allowed else None


class CompensationEngine:
    """Compensation model for two independent what-if scenarios."""

    def __init__(self, config: EngineConfig, scenario_defaults: Dict[str, Dict[str, Any]]):
        if SCENARIO_A not in scenario_defaults:
            raise ConfigLoadError("Scenario defaults must include scenario A")
        self.config = config
        self._defaults = scenario_defaults
        self._scenarios: Dict[str, ScenarioState] = {SCENARIO_A: self._default_state(SCENARIO_A)}
        logger.info(f"[ENGINE] Initialised with baseline year {config.current_year}")

    @classmethod
    def from_config(
        cls,
        path: Optional[Union[str, Path]] = None,
        scenarios_dir: Optional[Union[str, Path]] = None,
    ) -> 'CompensationEngine':
        """Build an engine from the YAML defaults (or the given config and scenario directory)."""
        config = load_engine_config(path) if path is not None else get_config()
        directory = Path(scenarios_dir) if scenarios_dir is not None else SCENARIOS_DIR
        try:
            raw = scenario_loader.load(str(directory))
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Could not load scenario defaults from {directory}: {e}")
            raise ConfigLoadError(f"Could not load scenario defaults from {directory}") from e
        defaults = {SCENARIO_FILES[name]: cfg for name, cfg in raw.items() if name in SCENARIO_FILES}
        return cls(config, defaults)

    # --- State access ---

    def _default_state(self, key: str) -> ScenarioState:
        raw = self._defaults.get(key) or self._defaults[SCENARIO_A]
        try:
            return scenario_loader.build_scenario(raw, self.config)
        except (ValidationError, ValueError) as e:
            logger.error(f"Invalid default scenario {key}: {e}")
            raise ConfigLoadError(f"Invalid default scenario {key}") from e

    @property
    def scenario_b_enabled(self) -> bool:
        return SCENARIO_B in self._scenarios

    def scenario(self, scenario_key: str = SCENARIO_A) -> Optional[ScenarioState]:
        state = self._scenarios.get(str(scenario_key).upper())
        if state is None:
            logger.warning(f"[ENGINE] Unknown or disabled scenario {scenario_key!r}")
        return state

    def _replace(self, scenario_key: str, state: ScenarioState) -> None:
        self._scenarios[str(scenario_key).upper()] = state

    # --- Reads ---

    def distribution(
        self, year: int, scenario_key: str = SCENARIO_A, exclude_w2: bool = False
    ) -> Optional[PoolDistribution]:
        state = self.scenario(scenario_key)
        if state is None:
            return None
        fy = state.year(year)
        if fy is None:
            logger.warning(f"[ENGINE] Year {year} is not part of scenario {scenario_key}")
            return None
        return distribute_partner_pool(fy, state.projection.benefit_costs_growth_pct, self.config, exclude_w2)

    def compute_compensation(
        self, year: int, scenario_key: str = SCENARIO_A, exclude_w2: bool = False
    ) -> List[Dict[str, Any]]:
        """Per-physician compensation for ``year``, rounded to cents."""
        distribution = self.distribution(year, scenario_key, exclude_w2)
        if distribution is None:
            return []
        return [
            {
                "physician_id": line.physician_id,
                "name": line.name,
                "role": line.role,
                "compensation": to_money(line.compensation),
            }
            for line in distribution.lines
        ]

    def partner_pool_breakdown(self, year: int, scenario_key: str = SCENARIO_A) -> Dict[str, float]:
        distribution = self.distribution(year, scenario_key)
        breakdown = distribution.breakdown if distribution is not None else PoolBreakdown()
        return {name: to_money(value) for name, value in breakdown.as_dict().items()}

    def compensation_table(self, scenario_key: str = SCENARIO_A, exclude_w2: bool = False) -> pd.DataFrame:
        state = self.scenario(scenario_key)
        if state is None:
            return pd.DataFrame()
        return compensation_table(state, self.config, exclude_w2)

    # --- Mutations ---

    def apply_physician_edit(
        self, scenario_key: str, year: int, record: Union[PhysicianRecord, Dict[str, Any]]
    ) -> None:
        state = self.scenario(scenario_key)
        if state is None:
            return
        if isinstance(record, dict):
            record = physician_from_dict(record)
        self._replace(scenario_key, apply_physician_edit(state, year, record, self.config))

    def remove_physician(self, scenario_key: str, year: int, physician_id: str) -> None:
        state = self.scenario(scenario_key)
        if state is None:
            return
        self._replace(scenario_key, remove_physician(state, year, physician_id, self.config))

    def apply_financial_edit(self, scenario_key: str, year: int, field: str, value: float) -> None:
        """Set an aggregate directly; the field stops following projected growth for that year."""
        state = self.scenario(scenario_key)
        if state is None:
            return
        name = _field_name(field, FINANCIAL_FIELDS)
        fy = state.year(year)
        if name is None or fy is None:
            logger.warning(f"[ENGINE] Ignoring financial edit {field!r} for {year} in scenario {scenario_key}")
            return

        years = []
        for row in state.years:
            if row.year == year:
                data = row.model_dump()
                data[name] = value
                data["overrides"] = set(row.overrides) | {name}
                row = type(row).model_validate(data)
            years.append(row)
        self._replace(scenario_key, state.model_copy(update={"years": grow_projection(years, state.projection)}))
        logger.info(f"[ENGINE] Scenario {scenario_key} {year}: {name} set to {value}")

    def apply_projection_setting(self, scenario_key: str, field: str, value: float) -> None:
        state = self.scenario(scenario_key)
        if state is None:
            return
        name = _field_name(field, ProjectionSettings.model_fields)
        if name is None:
            logger.warning(f"[ENGINE] Unknown projection setting {field!r}")
            return
        data = state.projection.model_dump()
        data[name] = value
        projection = ProjectionSettings.model_validate(data)
        years = grow_projection(state.years, projection)
        self._replace(scenario_key, state.model_copy(update={"projection": projection, "years": years}, deep=True))

    def set_baseline_mode(self, scenario_key: str, mode: Union[BaselineMode, str]) -> None:
        """Reseed the baseline row's aggregates from the chosen source and re-project."""
        state = self.scenario(scenario_key)
        if state is None or not state.years:
            return
        mode = BaselineMode.normalise(mode, self.config.current_year)
        current = state.years[0]
        seeded = resolve_baseline(
            mode, self.config.historic, self.config.current_year, self.config.fallback_baseline, existing=current
        )
        baseline = seeded.model_copy(update={
            "year": current.year,
            "physicians": current.physicians,
            "prcs_director_physician_id": current.prcs_director_physician_id,
            "overrides": set(current.overrides) if mode == BaselineMode.CUSTOM else set(),
        }, deep=True)
        years = grow_projection([baseline] + list(state.years[1:]), state.projection)
        self._replace(scenario_key, state.model_copy(update={"years": years, "baseline_mode": mode}, deep=True))
        logger.info(f"[ENGINE] Scenario {scenario_key} baseline mode set to '{mode.value}'")

    def select_year(self, scenario_key: str, year: int) -> None:
        state = self.scenario(scenario_key)
        if state is None:
            return
        if state.year(year) is None:
            logger.warning(f"[ENGINE] Cannot select {year}; not part of scenario {scenario_key}")
            return
        self._replace(scenario_key, state.model_copy(update={"selected_year": year}))

    def enable_scenario_b(self, enabled: bool = True) -> None:
        """Turn Scenario B on (seeded from its own defaults) or off."""
        if not enabled:
            self._scenarios.pop(SCENARIO_B, None)
            return
        if SCENARIO_B not in self._scenarios:
            self._scenarios[SCENARIO_B] = self._default_state(SCENARIO_B)

    def reset_to_defaults(self) -> None:
        enabled_b = self.scenario_b_enabled
        self._scenarios = {SCENARIO_A: self._default_state(SCENARIO_A)}
        if enabled_b:
            self._scenarios[SCENARIO_B] = self._default_state(SCENARIO_B)
        logger.info("[ENGINE] Scenarios reset to defaults")

    # --- Snapshots ---

    def export_snapshot(self) -> Dict[str, Any]:
        snapshot: Dict[str, Any] = {
            "scenarioA": self._scenarios[SCENARIO_A].to_payload(),
            "scenarioBEnabled": self.scenario_b_enabled,
        }
        if self.scenario_b_enabled:
            snapshot["scenarioB"] = self._scenarios[SCENARIO_B].to_payload()
        return snapshot

    def _state_from_payload(self, payload: Dict[str, Any], label: str) -> ScenarioState:
        payload = dict(payload)
        for key in _SNAPSHOT_MODE_KEYS:
            if key in payload:
                payload[key] = BaselineMode.normalise(payload[key], self.config.current_year).value
        try:
            return ScenarioState.model_validate(payload)
        except ValidationError as e:
            logger.error(f"[ENGINE] Snapshot {label} is not a valid scenario: {e}")
            raise SnapshotLoadError(f"Snapshot {label} is not a valid scenario") from e

    def load_snapshot(self, payload: Dict[str, Any]) -> None:
        """Replace both scenarios with a snapshot; a missing Scenario B leaves B disabled."""
        if not isinstance(payload, dict) or "scenarioA" not in payload:
            raise SnapshotLoadError("Snapshot must contain scenarioA")
        scenarios = {SCENARIO_A: self._state_from_payload(payload["scenarioA"], "scenarioA")}
        if payload.get("scenarioBEnabled") and payload.get("scenarioB"):
            scenarios[SCENARIO_B] = self._state_from_payload(payload["scenarioB"], "scenarioB")
        self._scenarios = scenarios
        logger.info(f"[ENGINE] Snapshot loaded (scenario B {'enabled' if self.scenario_b_enabled else 'disabled'})")


__all__ = ["CompensationEngine", "SnapshotLoadError", "SCENARIO_A", "SCENARIO_B"]
