"""Abstract handler interface and implementations for log backends.

This module provides:
- Abstract LogHandler interface for sending records to backends
- OTelGrpcHandler for OpenTelemetry Collector via gRPC
- NullHandler and CompositeHandler helpers

The handler is injected into the observability system, making the rest
of the code unaware of the specific backend. Records are flat dicts (see
schema.F for the field names).
"""

import contextlib
import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .schema import EMIT_LEVEL, F, EventRecord

logger = logging.getLogger(__name__)

MAX_ATTRIBUTE_CHARS = 65000


class LogHandler(ABC):
    """Abstract interface for log backends."""

    @abstractmethod
    def send_log(self, record: EventRecord) -> None:
        """Send one composed record to the backend.

        Args:
            record: Flat mapping of field name to value.
        """
        pass

    @abstractmethod
    def flush(self) -> None:
        """Flush any buffered data."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the handler and release resources."""
        pass


@dataclass
class OTelConfig:
    """Configuration for OTel gRPC handler."""

    endpoint: str = "localhost:4317"
    insecure: bool = True
    service_name: str = "logdoc"


def to_otel_attributes(record: EventRecord) -> dict[str, Any]:
    """Flatten a record into OTel-compatible attribute values.

    Primitives pass through, string lists stay lists, everything else is
    JSON encoded (and truncated past MAX_ATTRIBUTE_CHARS).
    """
    attributes: dict[str, Any] = {}
    for key, value in record.items():
        if value is None:
            continue
        if isinstance(value, (str, int, float, bool)):
            attributes[key] = value
        elif isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            attributes[key] = list(value)
        else:
            try:
                json_str = json.dumps(value, default=str)
            except (TypeError, ValueError):
                json_str = "<serialization error>"
            if len(json_str) > MAX_ATTRIBUTE_CHARS:
                json_str = json_str[:MAX_ATTRIBUTE_CHARS] + "...[TRUNCATED]"
            attributes[key] = json_str
    return attributes


class OTelGrpcHandler(LogHandler):
    """OpenTelemetry Collector handler via gRPC.

    Sends records to an OTel Collector using the OTLP gRPC log exporter.
    If the OTel packages are missing or the exporter cannot be created the
    handler stays inert and send_log() does nothing.
    """

    def __init__(self, config: OTelConfig):
        """Initialize OTel gRPC handler.

        Args:
            config: OTel configuration.
        """
        self.config = config
        self._lock = threading.Lock()
        self._initialized = False
        self._logger_provider: Any = None  # Type: LoggerProvider when initialized
        self._initialize()

    def _initialize(self) -> None:
        try:
            from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
            from opentelemetry.sdk._logs import LoggerProvider
            from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
            from opentelemetry.sdk.resources import SERVICE_NAME, Resource

            resource = Resource.create({SERVICE_NAME: self.config.service_name})
            log_exporter = OTLPLogExporter(
                endpoint=self.config.endpoint, insecure=self.config.insecure
            )
            self._logger_provider = LoggerProvider(resource=resource)
            self._logger_provider.add_log_record_processor(BatchLogRecordProcessor(log_exporter))

            self._initialized = True
        except ImportError as e:
            logger.warning(f"OTel packages not installed: {e}")
        except Exception as e:
            logger.warning(f"Failed to initialize OTel: {e}")

    @property
    def is_available(self) -> bool:
        return self._initialized

    def send_log(self, record: EventRecord) -> None:
        """Send a record via OTLP using Logger.emit()."""
        if not self._initialized:
            return

        try:
            from opentelemetry._logs import SeverityNumber

            severity_map = {
                "DEBUG": (SeverityNumber.DEBUG, "DEBUG"),
                "INFO": (SeverityNumber.INFO, "INFO"),
                "WARNING": (SeverityNumber.WARN, "WARN"),
                "ERROR": (SeverityNumber.ERROR, "ERROR"),
            }
            severity_number, severity_text = severity_map.get(
                str(record.get(F.LEVEL, EMIT_LEVEL)), (SeverityNumber.INFO, "INFO")
            )

            timestamp = record.get(F.TIMESTAMP)
            if isinstance(timestamp, str):
                timestamp_ns = int(datetime.fromisoformat(timestamp).timestamp() * 1e9)
            else:
                timestamp_ns = time.time_ns()

            body = str(record.get(F.EVENT, ""))
            if record.get(F.DESC):
                body += f" - {record[F.DESC]}"

            with self._lock:
                self._logger_provider.get_logger(self.config.service_name).emit(
                    timestamp=timestamp_ns,
                    observed_timestamp=time.time_ns(),
                    severity_number=severity_number,
                    severity_text=severity_text,
                    body=body,
                    attributes=to_otel_attributes(record),
                )
        except Exception as e:
            logger.debug(f"OTel emit failed: {e}")

    def flush(self) -> None:
        """Force flush log exporter."""
        if self._initialized and self._logger_provider:
            with contextlib.suppress(Exception):
                self._logger_provider.force_flush()

    def close(self) -> None:
        """Shutdown log exporter."""
        if self._initialized and self._logger_provider:
            with contextlib.suppress(Exception):
                self._logger_provider.shutdown()
            self._initialized = False


class NullHandler(LogHandler):
    """Null handler that discards all data.

    Useful for testing or when no backend is configured.
    """

    def send_log(self, record: EventRecord) -> None:
        pass

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


class CompositeHandler(LogHandler):
    """Combines multiple handlers into one.

    Sends to all handlers. Errors in one don't affect others.
    """

    def __init__(self, handlers: list[LogHandler]):
        self.handlers = handlers

    def send_log(self, record: EventRecord) -> None:
        for handler in self.handlers:
            with contextlib.suppress(Exception):
                handler.send_log(record)

    def flush(self) -> None:
        for handler in self.handlers:
            with contextlib.suppress(Exception):
                handler.flush()

    def close(self) -> None:
        for handler in self.handlers:
            with contextlib.suppress(Exception):
                handler.close()
