"""Data model for the declaration index.

A FileSpanMap maps a project-relative POSIX path to the ordered list of
DeclarationSpans found in that file. It is persisted as JSON:

    {
        "src/app/jobs.py": [
            {"start_line": 3, "end_line": 9, "name": "run",
             "first_paragraph": "Run all pending jobs."},
            {"start_line": 12, "end_line": 14, "name": "cleanup",
             "first_paragraph": "Drop temp files.", "override": ""}
        ]
    }
"""

from dataclasses import dataclass
from typing import Any, Optional

SUPPRESSED = ""
"""Override value meaning "never describe this span"."""


class K:
    """JSON key constants for persisted spans."""
    START_LINE = "start_line"
    END_LINE = "end_line"
    NAME = "name"
    FIRST_PARAGRAPH = "first_paragraph"
    OVERRIDE = "override"


INDEX_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": {
        "type": "array",
        "items": {
            "type": "object",
            "required": [K.START_LINE, K.END_LINE],
            "properties": {
                K.START_LINE: {"type": "integer", "minimum": 1},
                K.END_LINE: {"type": "integer", "minimum": 1},
                K.NAME: {"type": ["string", "null"]},
                K.FIRST_PARAGRAPH: {"type": ["string", "null"]},
                K.OVERRIDE: {"type": ["string", "null"]},
            },
        },
    },
}


@dataclass(frozen=True)
class DeclarationSpan:
    """One function-like region of a source file.

    Attributes:
        start_line: First line (1-based, inclusive)
        end_line: Last line (1-based, inclusive)
        name: Function or bound lambda name, None when unknown
        first_paragraph: First docstring paragraph, "" if undocumented
        override: Explicit description; SUPPRESSED ("") hides the span
    """
    start_line: int
    end_line: int
    name: Optional[str] = None
    first_paragraph: str = ""
    override: Optional[str] = None

    def __post_init__(self):
        if self.start_line > self.end_line:
            raise ValueError(
                f"start_line {self.start_line} is after end_line {self.end_line}"
            )

    @property
    def is_suppressed(self) -> bool:
        return self.override == SUPPRESSED

    @property
    def description(self) -> Optional[str]:
        """Effective description: None when suppressed, override over docstring."""
        if self.is_suppressed:
            return None
        return self.override or self.first_paragraph

    def contains(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line

    def to_dict(self) -> dict[str, Any]:
        """Serialize, omitting unset optional fields."""
        data: dict[str, Any] = {K.START_LINE: self.start_line, K.END_LINE: self.end_line}
        if self.name is not None:
            data[K.NAME] = self.name
        if self.first_paragraph:
            data[K.FIRST_PARAGRAPH] = self.first_paragraph
        if self.override is not None:
            data[K.OVERRIDE] = self.override
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeclarationSpan":
        return cls(
            start_line=data[K.START_LINE],
            end_line=data[K.END_LINE],
            name=data.get(K.NAME),
            first_paragraph=data.get(K.FIRST_PARAGRAPH) or "",
            override=data.get(K.OVERRIDE),
        )


FileSpanMap = dict[str, list[DeclarationSpan]]


def span_map_to_dict(span_map: FileSpanMap) -> dict[str, list[dict[str, Any]]]:
    return {path: [span.to_dict() for span in spans] for path, spans in span_map.items()}


def span_map_from_dict(data: dict[str, Any]) -> FileSpanMap:
    return {
        path: [DeclarationSpan.from_dict(entry) for entry in entries]
        for path, entries in data.items()
    }
