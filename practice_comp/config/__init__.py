from .loaders import (
    ConfigLoadError,
    build_engine_config,
    get_config,
    load_engine_config,
    load_yaml_config,
)
from .models import EngineConfig

__all__ = [
    "ConfigLoadError",
    "EngineConfig",
    "build_engine_config",
    "get_config",
    "load_engine_config",
    "load_yaml_config",
]
