"""Composes call-site resolution, span lookup and context capture.

The Enricher is what the emitter calls once per log event. It returns the
enrichment fields for a record and never raises: every failure inside it
degrades to the field being absent.
"""

import contextlib
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from src.core.config import AppConfig

from .augment import DEFAULT_CONTEXT_LINES, capture_snippet, capture_stack
from .callsite import CallerResolver, CallSite, FrameCallerResolver
from .lookup import SpanIndex
from .paths import PathNormalizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnippetOptions:
    """Snippet capture settings for one log call."""
    context: Optional[int] = None


@dataclass(frozen=True)
class LogOptions:
    """Per-call enrichment options.

    Attributes:
        stack: Capture the full call stack
        snippet: True for the default window, an int or SnippetOptions
                 for a custom one, False to skip
    """
    stack: bool = False
    snippet: Union[bool, int, SnippetOptions] = False

    @property
    def wants_snippet(self) -> bool:
        if isinstance(self.snippet, bool):
            return self.snippet
        return True

    def snippet_context(self, default: int = DEFAULT_CONTEXT_LINES) -> int:
        if isinstance(self.snippet, SnippetOptions) and self.snippet.context is not None:
            return self.snippet.context
        if isinstance(self.snippet, int) and not isinstance(self.snippet, bool):
            return self.snippet
        return default

    @classmethod
    def coerce(cls, options: Union["LogOptions", dict[str, Any], None]) -> "LogOptions":
        """Accept LogOptions, a plain dict such as {"snippet": {"context": 5}}, or None."""
        if options is None:
            return cls()
        if isinstance(options, LogOptions):
            return options
        snippet = options.get("snippet")
        if snippet is None:
            snippet = False
        elif isinstance(snippet, dict):
            snippet = SnippetOptions(context=snippet.get("context"))
        return cls(stack=bool(options.get("stack", False)), snippet=snippet)


@dataclass(frozen=True)
class Enrichment:
    """Result of enriching one call site."""
    call_site: CallSite
    description: Optional[str] = None
    code_snippet: Optional[str] = None
    stack: Optional[str] = None


class Enricher:
    """Resolves the caller of a log call and gathers its documentation.

    Usage:
        enricher = Enricher(index=SpanIndex.load(path), normalizer=PathNormalizer())
        result = enricher.enrich(LogOptions(snippet=True), skip=1)
    """

    def __init__(
        self,
        index: Optional[SpanIndex] = None,
        normalizer: Optional[PathNormalizer] = None,
        resolver: Optional[CallerResolver] = None,
        default_context: int = DEFAULT_CONTEXT_LINES,
    ):
        self.index = index or SpanIndex()
        self.normalizer = normalizer or PathNormalizer()
        self.resolver = resolver or FrameCallerResolver()
        self.default_context = default_context

    @classmethod
    def from_config(cls, config: AppConfig, default_context: int = DEFAULT_CONTEXT_LINES) -> "Enricher":
        return cls(
            index=SpanIndex.load(config.index.index_path),
            normalizer=PathNormalizer.from_config(config.paths),
            default_context=default_context,
        )

    def describe(self, file: Optional[str], line: Optional[int]) -> Optional[str]:
        """Description for a raw runtime location, None on any miss."""
        if not file or not line:
            return None
        try:
            return self.index.describe(self.normalizer.normalize(file), line)
        except Exception as e:
            logger.debug(f"Description lookup failed for {file}:{line}: {e}")
            return None

    def enrich(self, options: Optional[LogOptions] = None, skip: int = 1) -> Enrichment:
        """Enrich the call site ``skip`` frames above this method.

        Args:
            options: What to capture besides the description
            skip: 1 is the direct caller of enrich, 2 its caller, and so on
        """
        options = options or LogOptions()

        call_site = CallSite()
        with contextlib.suppress(Exception):
            call_site = self.resolver.resolve_caller(skip + 1)

        description = self.describe(call_site.file, call_site.line)

        code_snippet = None
        if options.wants_snippet:
            with contextlib.suppress(Exception):
                code_snippet = capture_snippet(
                    call_site.file,
                    call_site.line,
                    options.snippet_context(self.default_context),
                )

        stack = None
        if options.stack:
            with contextlib.suppress(Exception):
                stack = capture_stack(skip + 1)

        return Enrichment(
            call_site=call_site,
            description=description,
            code_snippet=code_snippet,
            stack=stack,
        )
