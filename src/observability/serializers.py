"""Safe serialization of caller payloads.

Payload values can be anything the instrumented code has at hand. They are
converted to JSON-friendly structures before they reach the outputs so a
sink never fails on an odd object.
"""

import uuid
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any


def safe_serialize(obj: Any, max_depth: int = 10, current_depth: int = 0) -> Any:
    """Convert any object into JSON-serializable data.

    Handles primitives, dataclasses, enums, dates, paths, UUIDs, bytes and
    nested containers. Deep or cyclic structures stop at max_depth; anything
    else falls back to str().

    Args:
        obj: Object to serialize
        max_depth: Maximum nesting depth
        current_depth: Current depth in recursion (internal use)

    Returns:
        JSON-serializable representation of the object
    """
    if current_depth > max_depth:
        return f"<max depth {max_depth} exceeded>"

    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj

    if isinstance(obj, (datetime, date)):
        return obj.isoformat()

    if isinstance(obj, (Path, uuid.UUID)):
        return str(obj)

    if isinstance(obj, Enum):
        return obj.value

    next_depth = current_depth + 1

    if is_dataclass(obj) and not isinstance(obj, type):
        try:
            return safe_serialize(asdict(obj), max_depth, next_depth)
        except Exception:
            return str(obj)

    if isinstance(obj, Mapping):
        return {
            str(k): safe_serialize(v, max_depth, next_depth)
            for k, v in obj.items()
        }

    if isinstance(obj, (list, tuple)):
        return [safe_serialize(item, max_depth, next_depth) for item in obj]

    if isinstance(obj, (set, frozenset)):
        return [safe_serialize(item, max_depth, next_depth) for item in sorted(obj, key=str)]

    if isinstance(obj, bytes):
        try:
            return obj.decode("utf-8")
        except UnicodeDecodeError:
            return f"<bytes: {len(obj)} bytes>"

    if isinstance(obj, type):
        return f"<class {obj.__name__}>"

    try:
        return str(obj)
    except Exception:
        return f"<unserializable: {type(obj).__name__}>"


def serialize_payload(payload: Mapping[str, Any] | None) -> dict[str, Any]:
    """Serialize a payload mapping one value at a time, keeping top-level keys."""
    if not payload:
        return {}
    return {str(key): safe_serialize(value) for key, value in payload.items()}
