"""Call-site introspection.

The rest of the engine only sees the CallerResolver interface, so tests can
swap in a fixed call site instead of relying on real frame layout.
"""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import FrameType
from typing import Any, Optional


@dataclass(frozen=True)
class CallSite:
    """Source location of a log call. All fields are None when unknown."""
    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    function: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.file is not None and self.line is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "function": self.function,
        }


class CallerResolver(ABC):
    """Finds the source location of a frame on the current stack."""

    @abstractmethod
    def resolve_caller(self, skip: int = 2) -> CallSite:
        """Return the call site ``skip`` frames above this method.

        skip=0 is resolve_caller itself, skip=1 its caller, and so on.
        A stack shallower than ``skip`` yields an empty CallSite.
        """
        pass


class FrameCallerResolver(CallerResolver):
    """CallerResolver backed by the interpreter's frame objects."""

    def resolve_caller(self, skip: int = 2) -> CallSite:
        try:
            frame = sys._getframe(skip)
        except ValueError:
            return CallSite()

        code = frame.f_code
        return CallSite(
            file=code.co_filename,
            line=frame.f_lineno,
            column=frame_column(frame),
            function=getattr(code, "co_qualname", code.co_name),
        )


def frame_column(frame: FrameType) -> Optional[int]:
    """1-based column of the frame's current instruction, if known."""
    code = frame.f_code
    if not hasattr(code, "co_positions") or frame.f_lasti < 0:
        return None
    for index, position in enumerate(code.co_positions()):
        if index == frame.f_lasti // 2:
            col_offset = position[2]
            return col_offset + 1 if col_offset is not None else None
    return None
