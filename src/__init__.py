"""Documentation-enriched structured logging."""
from .core.config import AppConfig
from .enrichment import Enricher, LogOptions, SpanIndex
from .indexer import IndexBuilder, build_index
from .observability import (
    initialize_observability,
    log_event,
    shutdown,
    start_run,
)

__all__ = [
    "AppConfig",
    "Enricher",
    "IndexBuilder",
    "LogOptions",
    "SpanIndex",
    "build_index",
    "initialize_observability",
    "log_event",
    "shutdown",
    "start_run",
]
