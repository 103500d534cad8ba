"""Builds and persists the declaration index for a source tree."""

import json
import logging
import os
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Optional

from src.core.config import DEFAULT_EXCLUDE_DIRS, IndexConfig
from src.core.exceptions import IndexBuildError

from .ast_walker import extract_spans
from .models import FileSpanMap, span_map_to_dict
from .spans import flatten_spans

logger = logging.getLogger(__name__)


class IndexBuilder:
    """Walks a source tree and produces a FileSpanMap.

    Keys of the map are POSIX paths relative to ``base`` (the directory the
    instrumented process runs from), so they line up with what
    PathNormalizer produces at runtime.

    Usage:
        builder = IndexBuilder(Path("src"), base=Path.cwd())
        span_map = builder.build()
        builder.write(span_map, Path(".logdoc/logdoc-map.json"))
    """

    def __init__(
        self,
        root: Path,
        base: Optional[Path] = None,
        suffixes: Sequence[str] = (".py",),
        exclude_dirs: Sequence[str] = DEFAULT_EXCLUDE_DIRS,
    ):
        self.root = Path(root).expanduser().resolve()
        self.base = Path(base).expanduser().resolve() if base else Path.cwd().resolve()
        self.suffixes = tuple(suffixes)
        self.exclude_dirs = set(exclude_dirs)
        self.skipped: list[str] = []

    @classmethod
    def from_config(cls, config: IndexConfig, base: Optional[Path] = None) -> "IndexBuilder":
        return cls(
            root=config.source_root,
            base=base,
            suffixes=config.suffixes,
            exclude_dirs=config.exclude_dirs,
        )

    def iter_source_files(self) -> Iterator[Path]:
        """Yield matching source files in a stable order."""
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(name for name in dirnames if name not in self.exclude_dirs)
            for filename in sorted(filenames):
                if filename.endswith(self.suffixes):
                    yield Path(dirpath) / filename

    def relative_key(self, path: Path) -> str:
        """Index key for a file: relative to base when possible, else absolute."""
        try:
            return path.relative_to(self.base).as_posix()
        except ValueError:
            return path.as_posix()

    def build(self) -> FileSpanMap:
        """Index every source file under root.

        Returns:
            Map of relative path to flattened spans; files without
            declarations are omitted.

        Raises:
            IndexBuildError: If root does not exist or is not a directory
        """
        if not self.root.exists():
            raise IndexBuildError(str(self.root), "source root not found")
        if not self.root.is_dir():
            raise IndexBuildError(str(self.root), "source root is not a directory")

        self.skipped = []
        span_map: FileSpanMap = {}
        for path in self.iter_source_files():
            try:
                source = path.read_text(encoding="utf-8")
                spans = extract_spans(source, filename=str(path))
            except (
                SyntaxError, UnicodeDecodeError, OSError, ValueError, RecursionError, MemoryError
            ) as e:
                logger.warning(f"Skipping {path}: {e}")
                self.skipped.append(str(path))
                continue

            if spans:
                span_map[self.relative_key(path)] = flatten_spans(spans)

        logger.info(
            f"Indexed {sum(len(s) for s in span_map.values())} spans "
            f"in {len(span_map)} files ({len(self.skipped)} skipped)"
        )
        return span_map

    def write(self, span_map: FileSpanMap, output: Path) -> Path:
        """Persist the map as JSON, creating parent directories.

        Raises:
            IndexBuildError: If the file cannot be written
        """
        output = Path(output)
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(
                json.dumps(span_map_to_dict(span_map), indent=2, sort_keys=True),
                encoding="utf-8",
            )
        except OSError as e:
            raise IndexBuildError(str(output), f"cannot write index: {e}") from e

        logger.info(f"Wrote {output}")
        return output


def build_index(
    root: Path,
    output: Path,
    base: Optional[Path] = None,
    exclude_dirs: Sequence[str] = DEFAULT_EXCLUDE_DIRS,
) -> FileSpanMap:
    """Build the index for root and write it to output in one call."""
    builder = IndexBuilder(root, base=base, exclude_dirs=exclude_dirs)
    span_map = builder.build()
    builder.write(span_map, output)
    return span_map
