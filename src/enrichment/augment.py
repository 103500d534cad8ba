"""On-demand context capture: source snippets and stack traces.

Both captures are opt-in per log call. Neither raises: a file that cannot
be read (wrong working directory, deleted, not UTF-8) simply yields no
snippet.
"""

import sys
import traceback
from pathlib import Path
from typing import Optional

DEFAULT_CONTEXT_LINES = 3


def format_snippet_line(lineno: int, text: str, marked: bool) -> str:
    mark = ">" if marked else " "
    return f"{mark} {lineno:>4} | {text}"


def capture_snippet(
    file: Optional[str],
    line: Optional[int],
    context: int = DEFAULT_CONTEXT_LINES,
) -> Optional[str]:
    """Return source lines around ``line``, numbered, target line marked.

    The window is clamped to the file: line 1 with context 3 gives lines
    1-4.

    Args:
        file: Path of the source file
        line: 1-based target line
        context: Lines to include on each side

    Returns:
        Newline-joined snippet, or None if unavailable
    """
    if not file or not line or line < 1:
        return None

    try:
        source = Path(file).read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        return None

    if line > len(source):
        return None

    context = max(0, context)
    start = max(1, line - context)
    end = min(len(source), line + context)
    return "\n".join(
        format_snippet_line(i, source[i - 1], i == line) for i in range(start, end + 1)
    )


def capture_stack(skip: int = 1) -> Optional[str]:
    """Format the current call stack, innermost frame last.

    Args:
        skip: Frames to drop from the top; 0 includes capture_stack itself,
              1 starts at its caller

    Returns:
        Formatted stack text, or None if the stack is shallower than skip
    """
    try:
        frame = sys._getframe(skip)
    except ValueError:
        return None
    return "".join(traceback.format_stack(frame))
