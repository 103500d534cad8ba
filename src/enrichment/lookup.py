"""Span lookup against the loaded declaration index."""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import jsonschema

from src.indexer.models import INDEX_SCHEMA, DeclarationSpan, span_map_from_dict
from src.indexer.spans import flatten_spans

logger = logging.getLogger(__name__)


class SpanIndex:
    """Read-only view of a FileSpanMap with O(log n) line lookup.

    An index built from nothing (files=None) is "not loaded": every lookup
    returns None, exactly like a loaded index with no matching span.

    Usage:
        index = SpanIndex.load(Path(".logdoc/logdoc-map.json"))
        index.describe("src/app/jobs.py", 42)
    """

    def __init__(self, files: Optional[Mapping[str, list[DeclarationSpan]]] = None):
        if files is None:
            self._files: Optional[dict[str, list[DeclarationSpan]]] = None
        else:
            self._files = {path: flatten_spans(spans) for path, spans in files.items()}

    @classmethod
    def load(cls, path: Path) -> "SpanIndex":
        """Load an index file, tolerating absence and corruption.

        Returns:
            Loaded SpanIndex, or an unloaded one if the file is missing,
            unreadable or does not match INDEX_SCHEMA.
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.debug(f"No declaration index at {path}; descriptions disabled")
            return cls()
        except (OSError, ValueError) as e:
            logger.warning(f"Cannot read declaration index {path}: {e}")
            return cls()

        try:
            return cls.from_dict(data)
        except jsonschema.ValidationError as e:
            logger.warning(f"Invalid declaration index {path}: {e.message}")
            return cls()
        except ValueError as e:
            logger.warning(f"Invalid declaration index {path}: {e}")
            return cls()

    @classmethod
    def from_dict(cls, data: Any) -> "SpanIndex":
        """Build from the persisted JSON structure.

        Raises:
            jsonschema.ValidationError: If data does not match INDEX_SCHEMA
            ValueError: If a span has start_line after end_line
        """
        jsonschema.validate(data, INDEX_SCHEMA)
        return cls(span_map_from_dict(data))

    @property
    def is_loaded(self) -> bool:
        return self._files is not None

    @property
    def files(self) -> list[str]:
        return sorted(self._files) if self._files else []

    def spans_for(self, rel_path: str) -> list[DeclarationSpan]:
        if not self._files:
            return []
        return self._files.get(rel_path, [])

    def find_span(self, rel_path: str, line: int) -> Optional[DeclarationSpan]:
        """Binary search the file's spans for the one containing line."""
        spans = self.spans_for(rel_path)
        lo, hi = 0, len(spans) - 1
        while lo <= hi:
            mid = (lo + hi) // 2
            span = spans[mid]
            if line < span.start_line:
                hi = mid - 1
            elif line > span.end_line:
                lo = mid + 1
            else:
                return span
        return None

    def describe(self, rel_path: str, line: int) -> Optional[str]:
        """Effective description for a line, None if absent or suppressed."""
        span = self.find_span(rel_path, line)
        if span is None:
            return None
        return span.description
