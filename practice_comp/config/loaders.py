# practice_comp/config/loaders.py
"""
Loading of the engine configuration: YAML -> cerberus structural check ->
pydantic ``EngineConfig``. Any failure along the way is a ``ConfigLoadError``.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from cerberus import Validator
from pydantic import ValidationError

from practice_comp.config.models import EngineConfig

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent
DEFAULT_CONFIG_PATH = CONFIG_DIR / "defaults.yaml"
SCENARIOS_DIR = CONFIG_DIR / "scenarios"

_money = {"type": "number", "min": 0}
_rate = {"type": "number", "min": 0, "max": 1}

# Structural schema for the raw mapping; value-level rules live in the pydantic models
ENGINE_SCHEMA: Dict[str, Any] = {
    "current_year": {"type": "integer", "required": True},
    "projection_years": {"type": "integer", "min": 0, "required": False},
    "payroll_taxes": {
        "type": "dict",
        "required": False,
        "schema": {
            "federal_unemployment_rate": _rate,
            "federal_unemployment_wage_base": _money,
            "social_security_rate": _rate,
            "medicare_rate": _rate,
            "wa_unemployment_rate": _rate,
            "wa_unemployment_wage_base": _money,
            "wa_family_leave_rate": _rate,
            "wa_state_disability_rate": _rate,
            "washington_rate": _rate,
            "social_security_wage_bases": {
                "type": "dict",
                "keysrules": {"type": "integer"},
                "valuesrules": _money,
            },
        },
    },
    "benefits": {"type": "dict", "required": False},
    "payroll_calendar": {"type": "dict", "required": False},
    "delayed_comp_overrides": {
        "type": "list",
        "required": False,
        "schema": {
            "type": "dict",
            "schema": {
                "physician_id": {"type": "string", "required": True},
                "year": {"type": "integer", "required": True},
                "amount": {"type": "number", "required": True},
                "taxes": {"type": "number", "required": True},
                "period_details": {"type": "string", "required": False},
            },
        },
    },
    "medical_director": {"type": "dict", "required": False},
    "progression": {"type": "dict", "required": False},
    "flags": {
        "type": "dict",
        "required": False,
        "schema": {
            "match_by_name": {"type": "boolean"},
            "deduct_prior_year_buyouts": {"type": "boolean"},
        },
    },
    "fallback_baseline": {"type": "dict", "required": False},
    "historic": {
        "type": "list",
        "required": False,
        "schema": {
            "type": "dict",
            "schema": {
                "year": {"type": "integer", "required": True},
                "therapy_income": {"type": "number", "required": True},
                "non_employment_costs": {"type": "number", "required": True},
            },
            "allow_unknown": True,
        },
    },
}


class ConfigLoadError(Exception):
    """Custom exception for errors during config loading."""

    pass


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Loads configuration data from a YAML file.

    Args:
        config_path: Path pointing to the YAML configuration file.

    Returns:
        A dictionary containing the loaded configuration.

    Raises:
        ConfigLoadError: If the file cannot be found or parsed.
    """
    config_path = Path(config_path)
    logger.info(f"Attempting to load configuration from: {config_path}")

    if not config_path.is_file():
        logger.error(f"Configuration file not found at path: {config_path}")
        raise ConfigLoadError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.exception(f"Error parsing YAML configuration file {config_path}: {e}")
        raise ConfigLoadError(f"Error parsing YAML file {config_path}") from e
    except OSError as e:
        logger.exception(f"Could not read configuration file {config_path}: {e}")
        raise ConfigLoadError(f"Could not read config {config_path}") from e

    if not isinstance(config_data, dict):
        logger.error(f"Configuration file {config_path} did not parse into a dictionary.")
        raise ConfigLoadError(f"Invalid configuration format in {config_path}: Expected a dictionary.")

    logger.info(f"Successfully loaded configuration from {config_path}")
    return config_data


def build_engine_config(config_data: Dict[str, Any], source: str = "<mapping>") -> EngineConfig:
    """Validate a raw mapping against the schema and build the pydantic model."""
    v = Validator(ENGINE_SCHEMA, allow_unknown=True)
    if not v.validate(config_data):
        logger.error(f"Config validation failed for {source}: {v.errors}")
        raise ConfigLoadError(f"Config validation failed: {v.errors}")

    try:
        config = EngineConfig.model_validate(config_data)
    except ValidationError as e:
        logger.error(f"Config model validation failed for {source}: {e}")
        raise ConfigLoadError(f"Invalid engine configuration in {source}") from e

    logger.debug(f"Engine configuration built from {source}: current_year={config.current_year}")
    return config


def load_engine_config(config_path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """Load and validate the engine configuration; defaults to the packaged defaults.yaml."""
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    return build_engine_config(load_yaml_config(path), source=str(path))


_default_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Process-wide default configuration, loaded once."""
    global _default_config
    if _default_config is None:
        _default_config = load_engine_config()
    return _default_config


__all__ = [
    "ConfigLoadError",
    "load_yaml_config",
    "build_engine_config",
    "load_engine_config",
    "get_config",
    "DEFAULT_CONFIG_PATH",
    "SCENARIOS_DIR",
]
