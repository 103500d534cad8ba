"""Declaration indexer: static extraction of documented function spans.

Runs once at build time (``python main.py index``) and writes a JSON map
from source file to the line ranges of its functions and their docstring
summaries. The runtime side (src.enrichment) loads that map to describe
log call sites.
"""

from .ast_walker import DeclarationWalker, extract_spans
from .builder import IndexBuilder, build_index
from .docstrings import DocInfo, parse_docstring
from .models import (
    INDEX_SCHEMA,
    SUPPRESSED,
    DeclarationSpan,
    FileSpanMap,
    span_map_from_dict,
    span_map_to_dict,
)
from .spans import flatten_spans

__all__ = [
    "INDEX_SCHEMA",
    "SUPPRESSED",
    "DeclarationSpan",
    "DeclarationWalker",
    "DocInfo",
    "FileSpanMap",
    "IndexBuilder",
    "build_index",
    "extract_spans",
    "flatten_spans",
    "parse_docstring",
    "span_map_from_dict",
    "span_map_to_dict",
]
