"""Record schema for enriched log events.

A record is a flat dict. Field names live on class F; records are composed
with RecordBuilder as an ordered series of merges, so later steps (and the
caller's payload, merged last) win over earlier ones.

Level is fixed metadata: the emitter always writes INFO and leaves
filtering to the outputs.
"""

from collections.abc import Mapping
from typing import Any

EventRecord = dict[str, Any]

EMIT_LEVEL = "INFO"

LEVEL_ORDER: dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


def level_value(level: str) -> int:
    """Numeric severity for a level name; unknown names count as INFO."""
    return LEVEL_ORDER.get(level.upper(), LEVEL_ORDER[EMIT_LEVEL])


# =============================================================================
# FIELD NAME CONSTANTS - Single source of truth for field names
# =============================================================================

class F:
    """Field name constants for enriched records.

    Use these instead of hardcoded strings to keep emitters, outputs and
    handlers consistent.
    """
    # Base fields
    TIMESTAMP = "timestamp"
    LEVEL = "level"
    SERVICE = "service"
    EVENT = "event"

    # Run context
    RUN_ID = "run_id"
    MODEL = "model"
    SESSION_ID = "session_id"
    USER_ID = "user_id"
    TAGS = "tags"

    # Call site
    FUNCTION_NAME = "function_name"
    FILE = "file"
    LINE = "line"
    COLUMN = "column"

    # Documentation enrichment
    DESC = "desc"
    STACK = "stack"
    CODE_SNIPPET = "code_snippet"


class RecordBuilder:
    """Builds a record from ordered merge steps.

    Each merge overwrites keys set by earlier merges. Internal steps drop
    None values so absent enrichment never appears in the record; the
    caller's payload keeps them (keep_none=True) because the caller wins.

    Usage:
        record = (
            RecordBuilder()
            .merge({F.EVENT: "job.start"})
            .merge({F.DESC: None})            # dropped
            .merge(payload, keep_none=True)   # last, wins
            .build()
        )
    """

    def __init__(self):
        self._fields: EventRecord = {}

    def merge(self, fields: Mapping[str, Any] | None, keep_none: bool = False) -> "RecordBuilder":
        if not fields:
            return self
        for key, value in fields.items():
            if value is None and not keep_none:
                continue
            self._fields[key] = value
        return self

    def build(self) -> EventRecord:
        return dict(self._fields)
