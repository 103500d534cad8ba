"""End-to-end tests for log_event with real frames and a built index."""

import io
import json

import pytest

from src.enrichment.callsite import CallSite
from src.enrichment.enricher import Enricher, Enrichment
from src.enrichment.lookup import SpanIndex
from src.enrichment.paths import PathNormalizer
from src.indexer.builder import build_index
from src.observability.config import ObservabilityConfig, initialize_observability, shutdown
from src.observability.context import start_run
from src.observability.emitters import compose_record, dispatch, log_event
from src.observability.outputs import JSONLinesOutput, LogOutput

ORDERS_MODULE = '''
from src.observability import log_event


def process_order(order_id):
    """Process a single customer order.

    Charges the card and ships.
    """
    log_event("order.process", {"order_id": order_id})


def quiet():
    """Internal helper.

    :nolog:
    """
    log_event("order.quiet")


def outer():
    """Outer function."""
    def inner():
        """Inner function."""
        log_event("order.inner")
    inner()
    log_event("order.outer")


def overridden():
    """Docstring text.

    :logdoc: Custom override text
    """
    log_event("order.override")


def with_context():
    """Calls with snippet and stack."""
    log_event("order.context", options={"snippet": {"context": 1}, "stack": True})


def emit_for_caller(event):
    """Wrapper that reports its own caller."""
    log_event(event, stacklevel=2)


def wrapped():
    """Calls through the wrapper."""
    emit_for_caller("order.wrapped")


def rank(items):
    """Rank the items by score."""
    log_event("rank.done", {"top": max(items, key=lambda i: i)})
'''


@pytest.fixture
def orders(project, write_source, load_module, capture_handler):
    """Index a module, initialize observability and import the module."""
    path = write_source("src/shop/orders.py", ORDERS_MODULE)
    index_path = project / ".logdoc" / "logdoc-map.json"
    build_index(project / "src", index_path, base=project)

    initialize_observability(
        handler=capture_handler,
        config=ObservabilityConfig(service_name="shop", console_enabled=False),
        enricher=Enricher(index=SpanIndex.load(index_path), normalizer=PathNormalizer(project)),
        outputs=[],
    )
    return load_module(path)


def line_of(module, text: str) -> int:
    """1-based line number of the first line containing text."""
    with open(module.__file__, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if text in line:
                return lineno
    raise AssertionError(f"{text!r} not found")


class TestLogEventEndToEnd:
    """Tests for log_event against a real indexed module."""

    def test_documented_call(self, orders, capture_handler):
        """Test run context, description and call site on a documented function."""
        start_run({"run_id": "r1"})
        orders.process_order(1)

        record = capture_handler.last
        assert record["event"] == "order.process"
        assert record["level"] == "INFO"
        assert record["service"] == "shop"
        assert record["run_id"] == "r1"
        assert record["desc"] == "Process a single customer order."
        assert record["order_id"] == 1
        assert record["function_name"] == "process_order"
        assert record["file"] == orders.__file__
        assert record["line"] == line_of(orders, 'log_event("order.process"')
        assert record["column"] == 5
        assert "stack" not in record
        assert "code_snippet" not in record
        assert "model" not in record

    def test_no_run(self, orders, capture_handler):
        """Test records without a run carry no run fields."""
        orders.process_order(2)
        assert "run_id" not in capture_handler.last

    def test_suppressed(self, orders, capture_handler):
        """Test :nolog: functions get no description."""
        orders.quiet()
        record = capture_handler.last
        assert record["event"] == "order.quiet"
        assert "desc" not in record

    def test_override(self, orders, capture_handler):
        """Test :logdoc: replaces the docstring."""
        orders.overridden()
        assert capture_handler.last["desc"] == "Custom override text"

    def test_nested(self, orders, capture_handler):
        """Test the innermost declaration describes the call."""
        orders.outer()
        inner_record, outer_record = capture_handler.records
        assert inner_record["desc"] == "Inner function."
        assert inner_record["function_name"] == "outer.<locals>.inner"
        assert outer_record["desc"] == "Outer function."

    def test_snippet_and_stack(self, orders, capture_handler):
        """Test opt-in snippet and stack capture."""
        orders.with_context()
        record = capture_handler.last
        line = line_of(orders, 'log_event("order.context"')
        rows = record["code_snippet"].splitlines()
        assert len(rows) == 3
        assert rows[1].startswith(f"> {line:>4} |")
        frames = [row.strip() for row in record["stack"].splitlines() if row.strip().startswith("File ")]
        assert frames[-1].endswith("in with_context")

    def test_stacklevel(self, orders, capture_handler):
        """Test a wrapper can attribute the event to its caller."""
        orders.wrapped()
        record = capture_handler.last
        assert record["event"] == "order.wrapped"
        assert record["desc"] == "Calls through the wrapper."
        assert record["line"] == line_of(orders, 'emit_for_caller("order.wrapped")')

    def test_inline_lambda_on_call_line(self, orders, capture_handler):
        """Test a lambda in the payload keeps the enclosing description."""
        orders.rank([3, 9, 4])
        record = capture_handler.last
        assert record["event"] == "rank.done"
        assert record["top"] == 9
        assert record["desc"] == "Rank the items by score."
        assert record["function_name"] == "rank"

    def test_file_not_indexed(self, orders, capture_handler):
        """Test a caller outside the index gets no description and no error."""
        log_event("test.direct", {"n": 1})
        record = capture_handler.last
        assert record["event"] == "test.direct"
        assert record["file"] == __file__
        assert "desc" not in record

    def test_payload_overrides(self, orders, capture_handler):
        """Test payload keys win over internal fields."""
        start_run({"run_id": "r1"})
        log_event("x.y", {"event": "override", "run_id": "mine", "desc": None})
        record = capture_handler.last
        assert record["event"] == "override"
        assert record["run_id"] == "mine"
        assert record["desc"] is None

    def test_run_tags(self, orders, capture_handler):
        """Test all run fields are merged."""
        start_run({"run_id": "r1", "model": "gpt-4o", "session_id": "s", "user_id": "u", "tags": ["a"]})
        orders.process_order(3)
        record = capture_handler.last
        assert (record["model"], record["session_id"], record["user_id"]) == ("gpt-4o", "s", "u")
        assert record["tags"] == ["a"]


class TestLogEventLifecycle:
    """Tests for emission around initialization."""

    def test_not_initialized(self, capture_handler):
        """Test log_event is a no-op before initialization."""
        log_event("ignored")
        assert capture_handler.records == []

    def test_after_shutdown(self, capture_handler):
        """Test nothing is sent after shutdown."""
        initialize_observability(
            handler=capture_handler,
            config=ObservabilityConfig(console_enabled=False),
            enricher=Enricher(),
            outputs=[],
        )
        shutdown()
        log_event("ignored")
        assert capture_handler.records == []
        assert capture_handler.closed

    def test_fixed_resolver(self, project, write_source, capture_handler, fixed_resolver):
        """Test a fake resolver drives file and line without real frames."""
        path = write_source("src/app.py", '''
            def job():
                """does X"""
                pass
        ''')
        index_path = project / "map.json"
        build_index(project / "src", index_path, base=project)
        initialize_observability(
            handler=capture_handler,
            config=ObservabilityConfig(console_enabled=False),
            enricher=Enricher(
                index=SpanIndex.load(index_path),
                normalizer=PathNormalizer(project),
                resolver=fixed_resolver(str(path), 3),
            ),
            outputs=[],
        )
        start_run({"run_id": "r1"})
        log_event("x.y", {"a": 1})

        record = capture_handler.last
        assert record["run_id"] == "r1"
        assert record["event"] == "x.y"
        assert record["desc"] == "does X"
        assert record["a"] == 1
        assert "stack" not in record
        assert "code_snippet" not in record

    def test_enricher_failure_drops_fields_not_event(self, capture_handler):
        """Test a broken index still emits the event."""

        class ExplodingIndex(SpanIndex):
            def describe(self, rel_path, line):
                raise RuntimeError("boom")

        initialize_observability(
            handler=capture_handler,
            config=ObservabilityConfig(console_enabled=False),
            enricher=Enricher(index=ExplodingIndex()),
            outputs=[],
        )
        log_event("still.here")
        assert capture_handler.last["event"] == "still.here"
        assert "desc" not in capture_handler.last

    def test_outputs_receive_records(self, capture_handler):
        """Test JSON Lines output gets the same record."""
        stream = io.StringIO()
        initialize_observability(
            handler=capture_handler,
            config=ObservabilityConfig(console_enabled=False),
            enricher=Enricher(),
            outputs=[JSONLinesOutput(stream=stream)],
        )
        log_event("to.output", {"k": "v"})
        written = json.loads(stream.getvalue())
        assert written["event"] == "to.output"
        assert written["k"] == "v"

    def test_min_level_filters_outputs(self, capture_handler):
        """Test an output above INFO drops events; the handler still gets them."""
        stream = io.StringIO()
        initialize_observability(
            handler=capture_handler,
            config=ObservabilityConfig(console_enabled=False),
            enricher=Enricher(),
            outputs=[JSONLinesOutput(stream=stream, min_level="WARNING")],
        )
        log_event("quiet.event")
        assert stream.getvalue() == ""
        assert capture_handler.last["event"] == "quiet.event"


class TestComposeRecord:
    """Tests for compose_record and dispatch."""

    def test_merge_order(self):
        """Test base, run, call site and payload order."""
        start_run({"run_id": "r1"})
        enrichment = Enrichment(
            call_site=CallSite(file="a.py", line=3, column=1, function="f"),
            description="Doc.",
        )
        record = compose_record("e", "svc", enrichment, {"line": 99})
        assert list(record)[:4] == ["timestamp", "level", "service", "event"]
        assert record["run_id"] == "r1"
        assert record["desc"] == "Doc."
        assert record["line"] == 99
        assert "stack" not in record

    def test_empty_description_kept(self):
        """Test an undocumented function yields an empty desc, not a missing one."""
        enrichment = Enrichment(call_site=CallSite(file="a.py", line=3), description="")
        record = compose_record("e", "svc", enrichment)
        assert record["desc"] == ""

    def test_no_enrichment(self):
        """Test records without enrichment have only base fields."""
        record = compose_record("e", "svc", None)
        assert set(record) == {"timestamp", "level", "service", "event"}

    def test_dispatch_survives_failures(self, capture_handler):
        """Test a failing output does not stop the others."""

        class FailingOutput(LogOutput):
            def write_log(self, record):
                raise OSError("disk full")

        stream = io.StringIO()
        initialize_observability(
            handler=capture_handler,
            config=ObservabilityConfig(console_enabled=False),
            enricher=Enricher(),
            outputs=[FailingOutput(), JSONLinesOutput(stream=stream)],
        )
        dispatch({"level": "INFO", "event": "e"})
        assert capture_handler.last == {"level": "INFO", "event": "e"}
        assert json.loads(stream.getvalue())["event"] == "e"
