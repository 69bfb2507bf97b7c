"""Dr.Leak — Модуль конфігурації"""
from .settings import (
    DrLeakConfig,
    get_default_config,
    EngineConfig,
    LikelihoodConfig,
    PruningConfig,
)
from .loader import save_config, load_config, save_yaml, load_yaml

__all__ = [
    "DrLeakConfig",
    "get_default_config",
    "EngineConfig",
    "LikelihoodConfig",
    "PruningConfig",
    "save_config",
    "load_config",
    "save_yaml",
    "load_yaml",
]
