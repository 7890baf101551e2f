import pytest

from practice_comp.config.loaders import load_engine_config
from practice_comp.simulation import CompensationEngine
from practice_comp.state.scenario import ProjectionSettings, ScenarioState, YearFinancials


@pytest.fixture
def config():
    """Fresh copy of the packaged defaults; tests may model_copy it freely."""
    return load_engine_config()


@pytest.fixture
def engine(config):
    return CompensationEngine.from_config()


@pytest.fixture
def make_year():
    def _make(physicians=(), year=2025, **aggregates):
        return YearFinancials(year=year, physicians=list(physicians), **aggregates)
    return _make


@pytest.fixture
def make_state():
    """Scenario with the same roster in every year and no aggregates."""
    def _make(physicians_by_year, **projection):
        years = [
            YearFinancials(year=year, physicians=list(physicians))
            for year, physicians in sorted(physicians_by_year.items())
        ]
        return ScenarioState(
            years=years,
            projection=ProjectionSettings(**projection),
            selected_year=years[0].year if years else None,
        )
    return _make
