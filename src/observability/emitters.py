"""Log emitters for documentation-enriched events.

log_event() is the one entry point instrumented code calls. It resolves
the caller, looks up the caller's documentation, optionally captures a
snippet and stack, composes the record and hands it to the handler and
the local outputs.

Emission is UNCONDITIONAL at a fixed INFO level; outputs decide what to
drop. Nothing here raises into the instrumented code.
"""

import contextlib
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Optional, Union

from src.enrichment.enricher import Enrichment, LogOptions

from .config import get_config, get_enricher, get_handler, get_outputs, is_initialized
from .context import current_run
from .schema import EMIT_LEVEL, F, EventRecord, RecordBuilder
from .serializers import serialize_payload

logger = logging.getLogger(__name__)


def compose_record(
    event: str,
    service: str,
    enrichment: Optional[Enrichment],
    payload: Optional[Mapping[str, Any]] = None,
    timestamp: Optional[datetime] = None,
) -> EventRecord:
    """Merge the record parts in priority order, payload last.

    Order: base fields, run context, call site, description, snippet and
    stack, payload. A payload key equal to any internal field replaces it.
    """
    builder = RecordBuilder().merge({
        F.TIMESTAMP: (timestamp or datetime.now(UTC)).isoformat(),
        F.LEVEL: EMIT_LEVEL,
        F.SERVICE: service,
        F.EVENT: event,
    })

    run = current_run()
    if run is not None:
        builder.merge(run.to_fields())

    if enrichment is not None:
        site = enrichment.call_site
        builder.merge({
            F.FUNCTION_NAME: site.function,
            F.FILE: site.file,
            F.LINE: site.line,
            F.COLUMN: site.column,
        })
        builder.merge({F.DESC: enrichment.description})
        builder.merge({
            F.STACK: enrichment.stack,
            F.CODE_SNIPPET: enrichment.code_snippet,
        })

    builder.merge(serialize_payload(payload), keep_none=True)
    return builder.build()


def dispatch(record: EventRecord) -> None:
    """Send a composed record to the handler and every accepting output."""
    handler = get_handler()
    if handler:
        with contextlib.suppress(Exception):
            handler.send_log(record)

    for output in get_outputs():
        with contextlib.suppress(Exception):
            if output.accepts(record):
                output.write_log(record)


def log_event(
    event: str,
    payload: Optional[Mapping[str, Any]] = None,
    options: Union[LogOptions, dict[str, Any], None] = None,
    *,
    stacklevel: int = 1,
) -> None:
    """Emit an event annotated with the calling function's documentation.

    Does nothing until initialize_observability() has run.

    Args:
        event: Event name, dot-namespaced by convention (e.g. "job.start")
        payload: Extra fields; merged last, so they override any
            internal field of the same name
        options: LogOptions or a dict like {"stack": True, "snippet": {"context": 5}}
        stacklevel: 1 describes the direct caller of log_event; wrappers
            around log_event pass 2 (or more) to describe their own caller

    Usage:
        def sync_orders():
            \"\"\"Pull new orders from the shop API.\"\"\"
            log_event("orders.sync", {"count": 3})
            # -> {..., "event": "orders.sync",
            #     "desc": "Pull new orders from the shop API.", "count": 3}
    """
    if not is_initialized():
        return

    try:
        enricher = get_enricher()
        config = get_config()
        enrichment = None
        if enricher is not None:
            enrichment = enricher.enrich(LogOptions.coerce(options), skip=stacklevel + 1)

        record = compose_record(
            event=event,
            service=config.service_name if config else "logdoc",
            enrichment=enrichment,
            payload=payload,
        )
    except Exception as e:
        logger.debug(f"Dropping event {event!r}: {e}")
        return

    dispatch(record)
