"""Core configuration and exceptions shared by the indexer and runtime."""

from .config import AppConfig, IndexConfig, PathMappingConfig
from .exceptions import ConfigError, IndexBuildError, LogDocError

__all__ = [
    "AppConfig",
    "ConfigError",
    "IndexBuildError",
    "IndexConfig",
    "LogDocError",
    "PathMappingConfig",
]
