"""Exception hierarchy for logdoc.

Only the build-time and configuration paths raise. The runtime enrichment
path degrades silently instead (see src.enrichment).
"""


class LogDocError(Exception):
    """Base exception for all logdoc errors.

    All custom exceptions inherit from this, allowing:
        try:
            ...
        except LogDocError as e:
            # Handle any logdoc-specific error
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class IndexBuildError(LogDocError):
    """Error while building or writing the declaration index.

    Raised for whole-run failures such as an unreadable source root.
    Single-file parse errors are logged and skipped, never raised.

    Attributes:
        root: Source root (or output path) the failure relates to
    """

    def __init__(self, root: str, message: str, details: dict | None = None):
        super().__init__(f"Index build failed for '{root}': {message}", details)
        self.root = root


class ConfigError(LogDocError):
    """Configuration file could not be read or parsed.

    Attributes:
        path: Path of the offending config file, if any
    """

    def __init__(self, message: str, path: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.path = path
