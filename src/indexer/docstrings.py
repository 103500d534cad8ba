"""Docstring parsing for the declaration index.

Extracts the first prose paragraph and the logdoc tags from a docstring.
Tags are lines of the form ``:name: value`` or ``@name value``:

    def sync_orders():
        \"\"\"Pull new orders from the shop API.

        :logdoc: Syncing orders from the storefront
        \"\"\"

Recognized tags:
    logdoc - explicit description; an empty value suppresses the span
    nolog  - always suppresses the span, whatever other tags say

Parsing never fails: anything it does not understand is treated as prose
or ignored.
"""

import inspect
import re
from dataclasses import dataclass
from typing import Optional

from .models import SUPPRESSED

OVERRIDE_TAG = "logdoc"
SUPPRESS_TAG = "nolog"

_TAG_LINE = re.compile(
    r"^\s*(?::(?P<rst>[A-Za-z][\w-]*):|@(?P<at>[A-Za-z][\w-]*)\b)(?P<value>.*)$"
)
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


@dataclass(frozen=True)
class DocInfo:
    """Parsed docstring content relevant to log enrichment."""
    first_paragraph: str = ""
    override: Optional[str] = None


def parse_tag(line: str) -> Optional[tuple[str, str]]:
    """Return (tag_name, value) if the line is a tag line."""
    match = _TAG_LINE.match(line)
    if match is None:
        return None
    name = match.group("rst") or match.group("at")
    return name.lower(), match.group("value").strip()


def parse_docstring(docstring: Optional[str]) -> DocInfo:
    """Parse a raw or cleaned docstring into a DocInfo.

    Args:
        docstring: Docstring text, or None for undocumented declarations

    Returns:
        DocInfo with first_paragraph and override (None if no tag set it)
    """
    if not docstring:
        return DocInfo()

    text = inspect.cleandoc(docstring)
    prose: list[str] = []
    override: Optional[str] = None
    suppressed = False

    for line in text.splitlines():
        tag = parse_tag(line)
        if tag is None:
            prose.append(line)
            continue
        name, value = tag
        if name == OVERRIDE_TAG:
            override = value
        elif name == SUPPRESS_TAG:
            suppressed = True

    if suppressed:
        override = SUPPRESSED

    body = "\n".join(prose).strip()
    first_paragraph = _PARAGRAPH_BREAK.split(body, maxsplit=1)[0].strip() if body else ""
    return DocInfo(first_paragraph=first_paragraph, override=override)
