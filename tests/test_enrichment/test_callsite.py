"""Tests for call-site resolution."""

from src.enrichment.callsite import CallSite, FrameCallerResolver


def where_am_i(resolver):
    return resolver.resolve_caller(1)


class TestCallSite:
    """Tests for CallSite."""

    def test_empty(self):
        """Test an unresolved call site."""
        site = CallSite()
        assert not site.is_resolved
        assert site.to_dict() == {"file": None, "line": None, "column": None, "function": None}

    def test_resolved(self):
        """Test file and line make a call site resolved."""
        assert CallSite(file="a.py", line=3).is_resolved


class TestFrameCallerResolver:
    """Tests for FrameCallerResolver."""

    def test_direct_caller(self):
        """Test skip=1 reports the function calling resolve_caller."""
        site = where_am_i(FrameCallerResolver())
        assert site.file == __file__
        assert site.function == "where_am_i"
        assert site.line == where_am_i.__code__.co_firstlineno + 1

    def test_caller_of_caller(self):
        """Test skip=2 reports one frame further out."""

        def helper(resolver):
            return resolver.resolve_caller(2)

        expected_line = self.test_caller_of_caller.__code__.co_firstlineno + 7
        site = helper(FrameCallerResolver())
        assert site.line == expected_line
        assert site.function.endswith("test_caller_of_caller")

    def test_qualified_name(self):
        """Test methods report their qualified name."""
        site = FrameCallerResolver().resolve_caller(1)
        assert site.function == "TestFrameCallerResolver.test_qualified_name"

    def test_column(self):
        """Test a 1-based column is reported."""
        site = where_am_i(FrameCallerResolver())
        # "    return resolver.resolve_caller(1)"
        assert site.column is not None
        assert site.column >= 5

    def test_too_deep(self):
        """Test a skip beyond the stack yields an empty CallSite."""
        site = FrameCallerResolver().resolve_caller(10_000)
        assert site == CallSite()
