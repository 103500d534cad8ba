"""Runtime enrichment: from a log call site to its documentation."""

from .augment import DEFAULT_CONTEXT_LINES, capture_snippet, capture_stack
from .callsite import CallerResolver, CallSite, FrameCallerResolver
from .enricher import Enricher, Enrichment, LogOptions, SnippetOptions
from .lookup import SpanIndex
from .paths import CompiledPathRule, PathNormalizer

__all__ = [
    "DEFAULT_CONTEXT_LINES",
    "CallSite",
    "CallerResolver",
    "CompiledPathRule",
    "Enricher",
    "Enrichment",
    "FrameCallerResolver",
    "LogOptions",
    "PathNormalizer",
    "SnippetOptions",
    "SpanIndex",
    "capture_snippet",
    "capture_stack",
]
