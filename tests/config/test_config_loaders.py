import pytest
import yaml

from practice_comp.config.loaders import (
    ConfigLoadError,
    build_engine_config,
    load_engine_config,
    load_yaml_config,
)


def test_packaged_defaults_load():
    config = load_engine_config()
    assert config.current_year == 2025
    assert config.projection_years == 5
    assert config.payroll_taxes.social_security_wage_bases[2030] == 215400
    assert config.delayed_comp_override("MC", 2025).amount == pytest.approx(15289.23)
    assert config.delayed_comp_override("MC", 2026) is None
    assert [h.year for h in config.historic][-2:] == [2024, 2025]


def test_minimal_mapping_uses_model_defaults():
    config = build_engine_config({"current_year": 2026})
    assert config.current_year == 2026
    assert config.benefits.waiting_period_days == 30
    assert config.flags.match_by_name is True


def test_missing_file(tmp_path):
    with pytest.raises(ConfigLoadError):
        load_yaml_config(tmp_path / "nope.yaml")


def test_malformed_yaml(tmp_path):
    f = tmp_path / "broken.yaml"
    f.write_text("current_year: [2025, 2026\n")
    with pytest.raises(ConfigLoadError):
        load_engine_config(f)


def test_top_level_must_be_mapping(tmp_path):
    f = tmp_path / "list.yaml"
    f.write_text(yaml.safe_dump([1, 2, 3]))
    with pytest.raises(ConfigLoadError):
        load_yaml_config(f)


def test_schema_rejects_wrong_types():
    with pytest.raises(ConfigLoadError):
        build_engine_config({"current_year": "next year"})
    with pytest.raises(ConfigLoadError):
        build_engine_config({"projection_years": 5})
    with pytest.raises(ConfigLoadError):
        build_engine_config({"current_year": 2025, "payroll_taxes": {"medicare_rate": 1.5}})


def test_duplicate_delayed_overrides_rejected():
    override = {"physician_id": "MC", "year": 2025, "amount": 1.0, "taxes": 0.1}
    with pytest.raises(ConfigLoadError):
        build_engine_config({"current_year": 2025, "delayed_comp_overrides": [override, dict(override)]})
