"""Maps runtime file paths to declaration index keys.

Frames report absolute paths, and code may run from a build copy or a
bytecode cache instead of the source tree. PathNormalizer turns all of
those into the project-relative source path the indexer used as a key.
It is a pure string transformation and never touches the filesystem.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from src.core.config import PathMappingConfig

_PYCACHE = re.compile(r"^(?P<dir>(?:.*/)?)__pycache__/(?P<stem>[^/.]+)(?:\.[^/]+)?\.pyc$")


@dataclass(frozen=True)
class CompiledPathRule:
    """Rewrite ``compiled_dir/<rest><compiled_suffix>`` to ``source_dir/<rest><source_suffix>``.

    Example:
        CompiledPathRule("build/lib", "src", ".py", ".py")
        build/lib/app/jobs.py -> src/app/jobs.py
    """
    compiled_dir: str
    source_dir: str
    compiled_suffix: str
    source_suffix: str

    def matches(self, rel_path: str) -> bool:
        prefix = _as_prefix(self.compiled_dir)
        return rel_path.startswith(prefix) and rel_path.endswith(self.compiled_suffix)

    def apply(self, rel_path: str) -> str:
        if not self.matches(rel_path):
            return rel_path
        middle = rel_path[len(_as_prefix(self.compiled_dir)):]
        if self.compiled_suffix:
            middle = middle[: -len(self.compiled_suffix)]
        return f"{_as_prefix(self.source_dir)}{middle}{self.source_suffix}"


def _as_prefix(directory: str) -> str:
    directory = directory.replace("\\", "/").strip("/")
    return f"{directory}/" if directory else ""


class PathNormalizer:
    """Turns raw frame paths into index keys.

    Steps:
    1. Convert separators to '/'
    2. Strip the project root prefix
    3. Rewrite bytecode-cache and compiled-output locations to source paths
    """

    def __init__(
        self,
        project_root: Optional[Union[str, Path]] = None,
        rules: Optional[list[CompiledPathRule]] = None,
    ):
        root = str(project_root) if project_root is not None else os.getcwd()
        self.root_prefix = root.replace("\\", "/").rstrip("/") + "/"
        self.rules = rules or []

    @classmethod
    def from_config(cls, config: PathMappingConfig) -> "PathNormalizer":
        return cls(
            project_root=config.project_root,
            rules=[
                CompiledPathRule(
                    compiled_dir=config.compiled_dir,
                    source_dir=config.source_dir,
                    compiled_suffix=config.compiled_suffix,
                    source_suffix=config.source_suffix,
                )
            ],
        )

    def relativize(self, raw_path: str) -> str:
        path = raw_path.replace("\\", "/")
        if path.startswith(self.root_prefix):
            path = path[len(self.root_prefix):]
        return path

    def to_source(self, rel_path: str) -> str:
        match = _PYCACHE.match(rel_path)
        if match:
            rel_path = f"{match.group('dir')}{match.group('stem')}.py"
        for rule in self.rules:
            if rule.matches(rel_path):
                return rule.apply(rel_path)
        return rel_path

    def normalize(self, raw_path: str) -> str:
        """Return the index key for a raw runtime path. Idempotent."""
        return self.to_source(self.relativize(raw_path))
