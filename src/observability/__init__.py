"""Observability module for documentation-enriched logging.

This module provides:
- log_event(): structured events annotated with the caller's docstring
- Run context (start_run / current_run) merged into every record
- Pluggable backends (handlers) and local outputs

Architecture:
- Enricher: resolves the call site and looks it up in the declaration index
- Emitters: compose the flat record, payload last
- LogHandler: sends records to a backend (OTel Collector)
- LogOutput: console / JSON Lines for local use, filtered by min level

Usage:
    from src.observability import initialize_observability, log_event, start_run

    initialize_observability()
    start_run({"run_id": "nightly-42", "model": "gpt-4o"})

    def sync_orders():
        \"\"\"Pull new orders from the shop API.\"\"\"
        log_event("orders.sync", {"count": 3}, {"snippet": True})

Key Concepts:
    - Every event is emitted at INFO; outputs filter by LOGDOC_LOG_LEVEL
    - Missing index, missing run or unknown call site just omit fields
    - Logging never raises into instrumented code
"""

from .config import (
    ObservabilityConfig,
    get_config,
    get_enricher,
    get_handler,
    get_outputs,
    initialize_observability,
    is_initialized,
    shutdown,
)
from .context import (
    RunContext,
    current_run,
    reset_run,
    run_scope,
    start_run,
)
from .emitters import compose_record, dispatch, log_event
from .handlers import (
    CompositeHandler,
    LogHandler,
    NullHandler,
    OTelConfig,
    OTelGrpcHandler,
)
from .outputs import ConsoleOutput, JSONLinesOutput, LogOutput, NullOutput
from .schema import EMIT_LEVEL, F, RecordBuilder
from .serializers import safe_serialize, serialize_payload

__all__ = [
    "EMIT_LEVEL",
    "CompositeHandler",
    "ConsoleOutput",
    "F",
    "JSONLinesOutput",
    # Handlers (backends)
    "LogHandler",
    # Outputs (local)
    "LogOutput",
    "NullHandler",
    "NullOutput",
    "OTelConfig",
    "OTelGrpcHandler",
    # Configuration
    "ObservabilityConfig",
    "RecordBuilder",
    # Context
    "RunContext",
    "compose_record",
    "current_run",
    "dispatch",
    "get_config",
    "get_enricher",
    "get_handler",
    "get_outputs",
    "initialize_observability",
    "is_initialized",
    # Emitters
    "log_event",
    "reset_run",
    "run_scope",
    # Serializers
    "safe_serialize",
    "serialize_payload",
    "shutdown",
    "start_run",
]

__version__ = "1.0.0"
