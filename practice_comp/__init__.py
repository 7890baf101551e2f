from practice_comp.config.loaders import ConfigLoadError, get_config, load_engine_config
from practice_comp.simulation import CompensationEngine, SnapshotLoadError

__all__ = ['CompensationEngine', 'ConfigLoadError', 'SnapshotLoadError', 'get_config', 'load_engine_config']
