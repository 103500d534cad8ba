"""Configuration management."""
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError

DEFAULT_INDEX_PATH = Path(".logdoc") / "logdoc-map.json"

DEFAULT_EXCLUDE_DIRS: tuple[str, ...] = (
    ".git",
    ".hg",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    ".tox",
    ".logdoc",
    "build",
    "dist",
)


def _split_env_list(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class IndexConfig:
    """Declaration index build settings.

    Usage in .env:
        LOGDOC_SOURCE_ROOT=src
        LOGDOC_INDEX_PATH=.logdoc/logdoc-map.json
        LOGDOC_SUFFIXES=.py,.pyi
        LOGDOC_EXCLUDE_DIRS=.git,.venv,build
    """
    source_root: Path = field(default_factory=lambda: Path("."))
    index_path: Path = DEFAULT_INDEX_PATH
    suffixes: list[str] = field(default_factory=lambda: [".py"])
    exclude_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))

    @classmethod
    def from_env(cls) -> "IndexConfig":
        return cls(
            source_root=Path(os.environ.get("LOGDOC_SOURCE_ROOT", ".")),
            index_path=Path(os.environ.get("LOGDOC_INDEX_PATH", str(DEFAULT_INDEX_PATH))),
            suffixes=_split_env_list(os.environ.get("LOGDOC_SUFFIXES")) or [".py"],
            exclude_dirs=(
                _split_env_list(os.environ.get("LOGDOC_EXCLUDE_DIRS"))
                or list(DEFAULT_EXCLUDE_DIRS)
            ),
        )


@dataclass
class PathMappingConfig:
    """How runtime file paths map back to index keys.

    project_root is stripped from absolute paths. Files under compiled_dir
    ending in compiled_suffix are rewritten to source_dir/source_suffix.

    Example: build/lib/app/jobs.py -> src/app/jobs.py
    """
    project_root: Path = field(default_factory=Path.cwd)
    compiled_dir: str = "build/lib"
    source_dir: str = "src"
    compiled_suffix: str = ".py"
    source_suffix: str = ".py"

    @classmethod
    def from_env(cls) -> "PathMappingConfig":
        root = os.environ.get("LOGDOC_PROJECT_ROOT")
        return cls(
            project_root=Path(root) if root else Path.cwd(),
            compiled_dir=os.environ.get("LOGDOC_COMPILED_DIR", "build/lib"),
            source_dir=os.environ.get("LOGDOC_SOURCE_DIR", "src"),
            compiled_suffix=os.environ.get("LOGDOC_COMPILED_SUFFIX", ".py"),
            source_suffix=os.environ.get("LOGDOC_SOURCE_SUFFIX", ".py"),
        )


@dataclass
class AppConfig:
    """Main application configuration."""
    index: IndexConfig = field(default_factory=IndexConfig)
    paths: PathMappingConfig = field(default_factory=PathMappingConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            index=IndexConfig.from_env(),
            paths=PathMappingConfig.from_env(),
        )

    @classmethod
    def from_yaml(cls, config_path: Path) -> "AppConfig":
        """Load configuration from a logdoc.yaml file.

        Keys missing from the file keep their environment/default values.

        Args:
            config_path: Path to logdoc.yaml.

        Returns:
            AppConfig with file values applied.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ConfigError: If the file is not valid YAML or not a mapping.
        """
        with open(config_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Failed to parse {config_path}: {e}", path=str(config_path)) from e

        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a mapping at the root", path=str(config_path))

        base = cls.from_env()
        return cls(
            index=_apply_section(base.index, data.get("index"), config_path),
            paths=_apply_section(base.paths, data.get("paths"), config_path),
        )


def _apply_section(current: Any, section: Any, config_path: Path) -> Any:
    if section is None:
        return current
    if not isinstance(section, dict):
        raise ConfigError(f"Section in {config_path} must be a mapping", path=str(config_path))

    updates: dict[str, Any] = {}
    for f in fields(current):
        if f.name not in section:
            continue
        value = section[f.name]
        if isinstance(getattr(current, f.name), Path):
            value = Path(value)
        elif isinstance(getattr(current, f.name), list):
            value = [str(item) for item in (value or [])]
        updates[f.name] = value
    return replace(current, **updates)
