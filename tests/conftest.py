"""Shared test fixtures for all tests."""

import importlib.util
import textwrap
from pathlib import Path

import pytest

from src.enrichment.callsite import CallerResolver, CallSite
from src.observability.config import shutdown
from src.observability.context import reset_run
from src.observability.handlers import LogHandler


class CaptureHandler(LogHandler):
    """Handler that keeps every record it receives."""

    def __init__(self):
        self.records: list[dict] = []
        self.flushed = False
        self.closed = False

    def send_log(self, record: dict) -> None:
        self.records.append(record)

    def flush(self) -> None:
        self.flushed = True

    def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> dict:
        return self.records[-1]


class FixedResolver(CallerResolver):
    """Resolver that always reports the same call site."""

    def __init__(self, call_site: CallSite):
        self.call_site = call_site
        self.skips: list[int] = []

    def resolve_caller(self, skip: int = 2) -> CallSite:
        self.skips.append(skip)
        return self.call_site


@pytest.fixture(autouse=True)
def clean_state():
    """Start and end every test with no run and no observability state."""
    reset_run()
    shutdown()
    yield
    reset_run()
    shutdown()


@pytest.fixture
def capture_handler():
    """Fresh CaptureHandler."""
    return CaptureHandler()


@pytest.fixture
def project(tmp_path):
    """Project root directory with symlinks resolved."""
    return tmp_path.resolve()


@pytest.fixture
def write_source(project):
    """Write dedented source to a project-relative path and return it."""

    def _write(rel_path: str, source: str) -> Path:
        path = project / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source).lstrip("\n"), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def load_module():
    """Import a module from a file path without touching sys.modules."""

    def _load(path: Path):
        spec = importlib.util.spec_from_file_location(path.stem, path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    return _load


@pytest.fixture
def fixed_resolver():
    """Factory for a FixedResolver reporting the given location."""

    def _make(file: str | None, line: int | None, function: str | None = "job") -> FixedResolver:
        return FixedResolver(CallSite(file=file, line=line, column=5, function=function))

    return _make
