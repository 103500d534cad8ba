"""Local output targets for enriched records.

- ConsoleOutput: human-readable lines for development
- JSONLinesOutput: one JSON object per line, for files and log shippers
- NullOutput: discards everything

Outputs own the verbosity setting: each has a min_level and drops records
below it. For backend integration, see handlers.py.
"""

import contextlib
import json
import sys
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import ClassVar, TextIO

from .schema import EMIT_LEVEL, F, EventRecord, level_value


class LogOutput(ABC):
    """Abstract base for local log outputs (console, files)."""

    min_level: str = "DEBUG"

    def accepts(self, record: EventRecord) -> bool:
        """Whether the record's level passes this output's min_level."""
        level = str(record.get(F.LEVEL, EMIT_LEVEL))
        return level_value(level) >= level_value(self.min_level)

    @abstractmethod
    def write_log(self, record: EventRecord) -> None:
        """Write a record (callers check accepts() first)."""
        pass

    def flush(self) -> None:  # noqa: B027
        """Flush buffered data (optional default implementation)."""
        pass

    def close(self) -> None:  # noqa: B027
        """Close the output (optional default implementation)."""
        pass


class ConsoleOutput(LogOutput):
    """Human-readable console output with optional colors.

    Format:
        12:04:05.123 INFO     job.start                      - Run all pending jobs. (run @ src/jobs.py:42)
          > 42 | log_event("job.start")

    Thread-safe for concurrent writes.
    """

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",    # Cyan
        "INFO": "\033[32m",     # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",    # Red
        "CRITICAL": "\033[35m", # Magenta
    }
    RESET: ClassVar[str] = "\033[0m"
    DIM: ClassVar[str] = "\033[2m"
    BOLD: ClassVar[str] = "\033[1m"

    def __init__(self, stream: TextIO | None = None, color: bool = True, min_level: str = "INFO"):
        """Initialize console output.

        Args:
            stream: Output stream (default: sys.stdout).
            color: Whether to use ANSI colors (only applied on a TTY).
            min_level: Lowest level written.
        """
        self.stream = stream or sys.stdout
        self.color = color and hasattr(self.stream, "isatty") and self.stream.isatty()
        self.min_level = min_level.upper()
        self._lock = threading.Lock()

    def format_record(self, record: EventRecord) -> str:
        level = str(record.get(F.LEVEL, EMIT_LEVEL))
        color = self.LEVEL_COLORS.get(level, "") if self.color else ""
        reset = self.RESET if self.color else ""
        dim = self.DIM if self.color else ""
        bold = self.BOLD if self.color else ""

        raw_ts = record.get(F.TIMESTAMP)
        try:
            timestamp = datetime.fromisoformat(str(raw_ts)).strftime("%H:%M:%S.%f")[:-3]
        except ValueError:
            timestamp = str(raw_ts)[:12]

        line = (
            f"{dim}{timestamp}{reset} "
            f"{color}{level:8}{reset} "
            f"{bold}{str(record.get(F.EVENT, '')):30}{reset}"
        )

        if record.get(F.DESC):
            line += f" - {record[F.DESC]}"

        if record.get(F.FILE):
            where = f"{record[F.FILE]}:{record.get(F.LINE, '?')}"
            if record.get(F.FUNCTION_NAME):
                where = f"{record[F.FUNCTION_NAME]} @ {where}"
            line += f" {dim}({where}){reset}"

        for block in (record.get(F.CODE_SNIPPET), record.get(F.STACK)):
            if block:
                line += "\n" + "\n".join(f"  {row}" for row in str(block).rstrip().splitlines())

        return line

    def write_log(self, record: EventRecord) -> None:
        """Write record to console."""
        line = self.format_record(record)
        with self._lock, contextlib.suppress(Exception):
            self.stream.write(line + "\n")

    def flush(self) -> None:
        """Flush the output stream."""
        with self._lock, contextlib.suppress(Exception):
            self.stream.flush()


class JSONLinesOutput(LogOutput):
    """JSON Lines output for log aggregators and analysis.

    Writes each record as a single JSON line to a file, a stream, or both.
    """

    def __init__(
        self,
        file_path: Path | str | None = None,
        stream: TextIO | None = None,
        min_level: str = "INFO",
    ):
        """Initialize JSON Lines output.

        Args:
            file_path: Path to output file (parent directories are created)
            stream: Optional stream to write to (e.g., sys.stdout)
            min_level: Lowest level written
        """
        self.file_path = Path(file_path) if file_path else None
        self.stream = stream
        self.min_level = min_level.upper()
        self._file: TextIO | None = None
        self._lock = threading.Lock()

        if self.file_path:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.file_path, "a", encoding="utf-8")

    def write_log(self, record: EventRecord) -> None:
        """Write a record as one JSON line."""
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"
        with self._lock:
            if self._file:
                self._file.write(line)
            if self.stream:
                self.stream.write(line)

    def flush(self) -> None:
        with self._lock:
            if self._file:
                self._file.flush()
            if self.stream:
                self.stream.flush()

    def close(self) -> None:
        """Close the output file."""
        with self._lock:
            if self._file:
                self._file.close()
                self._file = None


class NullOutput(LogOutput):
    """Null output that discards all data."""

    def write_log(self, record: EventRecord) -> None:
        pass
