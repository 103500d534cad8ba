"""Nesting resolution for declaration spans.

Python functions nest (closures, methods inside classes inside functions,
lambdas inside bodies). A log call must resolve to the innermost enclosing
declaration, so each file's spans are flattened into sorted,
non-overlapping segments: an outer span is split around the inner spans it
contains, and every segment keeps the name and docstring of the declaration
that owns those lines.

    outer  10..30           outer  10..14
      inner  15..20   ==>   inner  15..20
                            outer  21..30
"""

from dataclasses import replace

from .models import DeclarationSpan


def flatten_spans(spans: list[DeclarationSpan]) -> list[DeclarationSpan]:
    """Return sorted non-overlapping segments, innermost declaration wins.

    Already-flat input (sorted, non-overlapping) comes back unchanged.
    Partially overlapping spans, which well-formed Python never produces,
    are treated as if the later one were nested.
    """
    ordered = sorted(spans, key=lambda s: (s.start_line, -s.end_line))
    segments: list[DeclarationSpan] = []
    stack: list[DeclarationSpan] = []
    cursor = 0

    def emit(span: DeclarationSpan, start: int, end: int) -> None:
        if start <= end:
            segments.append(replace(span, start_line=start, end_line=end))

    def close_until(line: int) -> None:
        nonlocal cursor
        while stack and stack[-1].end_line < line:
            top = stack.pop()
            emit(top, cursor, top.end_line)
            cursor = max(cursor, top.end_line + 1)

    for span in ordered:
        close_until(span.start_line)
        if stack:
            emit(stack[-1], cursor, span.start_line - 1)
        stack.append(span)
        cursor = max(cursor, span.start_line)

    while stack:
        top = stack.pop()
        emit(top, cursor, top.end_line)
        cursor = max(cursor, top.end_line + 1)

    return segments
