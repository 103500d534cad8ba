"""Configuration and process state for the observability system.

Architecture:
    - ObservabilityConfig is just data, loaded from the environment
    - The backend handler is injected via initialize_observability()
      (or built from config: OTel when enabled, NullHandler otherwise)
    - Local outputs (console, JSON Lines) are built from config
    - The Enricher is built from AppConfig: it loads the declaration index
      once, here, so log calls never touch the index file
"""

import contextlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from src.core.config import AppConfig
from src.enrichment.augment import DEFAULT_CONTEXT_LINES

if TYPE_CHECKING:
    from src.enrichment.enricher import Enricher

    from .handlers import LogHandler
    from .outputs import LogOutput


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


@dataclass
class ObservabilityConfig:
    """Configuration for the observability system.

    Attributes:
        service_name: Fixed service tag written into every record
        log_level: Minimum level the local outputs write
        console_enabled: Whether to write human-readable lines to stdout
        console_color: Whether to use colored console output
        jsonl_path: JSON Lines file, None to disable
        otel_enabled: Whether to export records to an OTel Collector
        otel_endpoint: OTel Collector endpoint (host:port)
        otel_insecure: Whether to use insecure connection to collector
        snippet_context: Default snippet window (lines on each side)
    """
    service_name: str = "logdoc"
    log_level: str = "INFO"

    console_enabled: bool = True
    console_color: bool = True

    jsonl_path: Optional[Path] = None

    otel_enabled: bool = False
    otel_endpoint: str = "localhost:4317"
    otel_insecure: bool = True

    snippet_context: int = DEFAULT_CONTEXT_LINES

    def create_outputs(self) -> list["LogOutput"]:
        """Create the local outputs this config enables."""
        from .outputs import ConsoleOutput, JSONLinesOutput

        outputs: list[LogOutput] = []
        if self.console_enabled:
            outputs.append(ConsoleOutput(color=self.console_color, min_level=self.log_level))
        if self.jsonl_path is not None:
            outputs.append(JSONLinesOutput(file_path=self.jsonl_path, min_level=self.log_level))
        return outputs

    def create_handler(self) -> "LogHandler":
        """Create the backend handler: OTel if enabled, else NullHandler."""
        from .handlers import NullHandler, OTelConfig, OTelGrpcHandler

        if not self.otel_enabled:
            return NullHandler()
        return OTelGrpcHandler(OTelConfig(
            endpoint=self.otel_endpoint,
            insecure=self.otel_insecure,
            service_name=self.service_name,
        ))

    @classmethod
    def from_env(cls) -> "ObservabilityConfig":
        """Load from environment variables.

        Environment Variables:
            LOGDOC_SERVICE_NAME: Service tag (default: logdoc)
            LOGDOC_LOG_LEVEL: Minimum output level (default: INFO)
            LOG_CONSOLE: Enable console output (default: true)
            LOG_COLOR: Enable colored console (default: true)
            LOG_JSONL_PATH: JSON Lines file path (default: disabled)
            LOG_OTEL: Enable OTel export (default: false)
            OTEL_ENDPOINT: OTel Collector endpoint (default: localhost:4317)
            OTEL_INSECURE: Use insecure connection (default: true)
            LOGDOC_SNIPPET_CONTEXT: Snippet window (default: 3)

        Returns:
            ObservabilityConfig loaded from environment.
        """
        jsonl_path = os.environ.get("LOG_JSONL_PATH")
        return cls(
            service_name=os.environ.get("LOGDOC_SERVICE_NAME", "logdoc"),
            log_level=os.environ.get("LOGDOC_LOG_LEVEL", "INFO").upper(),
            console_enabled=_env_flag("LOG_CONSOLE", "true"),
            console_color=_env_flag("LOG_COLOR", "true"),
            jsonl_path=Path(jsonl_path) if jsonl_path else None,
            otel_enabled=_env_flag("LOG_OTEL", "false"),
            otel_endpoint=os.environ.get("OTEL_ENDPOINT", "localhost:4317"),
            otel_insecure=_env_flag("OTEL_INSECURE", "true"),
            snippet_context=int(os.environ.get("LOGDOC_SNIPPET_CONTEXT", str(DEFAULT_CONTEXT_LINES))),
        )


# Global state
_handler: Optional["LogHandler"] = None
_outputs: list["LogOutput"] = []
_enricher: Optional["Enricher"] = None
_initialized: bool = False
_config: Optional[ObservabilityConfig] = None


def initialize_observability(
    handler: Optional["LogHandler"] = None,
    config: Optional[ObservabilityConfig] = None,
    app_config: Optional[AppConfig] = None,
    enricher: Optional["Enricher"] = None,
    outputs: Optional[list["LogOutput"]] = None,
) -> None:
    """Initialize the observability system.

    Args:
        handler: Backend handler. Built from config if None.
        config: Observability settings. Loads from env if None.
        app_config: Index and path settings used to build the Enricher.
            Loads from env if None and no enricher is given.
        enricher: Ready-made Enricher (tests inject one with a fake resolver).
        outputs: Local outputs. Built from config if None.
    """
    global _handler, _outputs, _enricher, _initialized, _config

    if config is None:
        config = ObservabilityConfig.from_env()

    if enricher is None:
        from src.enrichment.enricher import Enricher

        enricher = Enricher.from_config(
            app_config or AppConfig.from_env(),
            default_context=config.snippet_context,
        )

    _config = config
    _enricher = enricher
    _handler = handler if handler is not None else config.create_handler()
    _outputs = list(outputs) if outputs is not None else config.create_outputs()
    _initialized = True


def get_handler() -> Optional["LogHandler"]:
    """Get the configured handler."""
    return _handler


def get_outputs() -> list["LogOutput"]:
    """Get the configured local outputs."""
    return _outputs


def get_enricher() -> Optional["Enricher"]:
    """Get the configured enricher."""
    return _enricher


def get_config() -> Optional[ObservabilityConfig]:
    """Get current configuration."""
    return _config


def is_initialized() -> bool:
    """Check if observability is initialized."""
    return _initialized


def shutdown() -> None:
    """Flush and close the handler and outputs, then reset all state."""
    global _handler, _outputs, _enricher, _initialized, _config

    if _handler:
        with contextlib.suppress(Exception):
            _handler.flush()
            _handler.close()

    for output in _outputs:
        with contextlib.suppress(Exception):
            output.flush()
            output.close()

    _handler = None
    _outputs = []
    _enricher = None
    _initialized = False
    _config = None
