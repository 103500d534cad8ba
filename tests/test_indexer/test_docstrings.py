"""Tests for docstring parsing."""

from src.indexer.docstrings import DocInfo, parse_docstring, parse_tag


class TestParseTag:
    """Tests for tag line recognition."""

    def test_rst_style(self):
        """Test :name: value lines."""
        assert parse_tag(":logdoc: Custom text") == ("logdoc", "Custom text")

    def test_at_style(self):
        """Test @name value lines."""
        assert parse_tag("@nolog") == ("nolog", "")

    def test_case_insensitive_name(self):
        """Test tag names are lowercased."""
        assert parse_tag("@LogDoc Shout") == ("logdoc", "Shout")

    def test_prose_is_not_a_tag(self):
        """Test regular prose lines."""
        assert parse_tag("Sends the email to user@example.com") is None
        assert parse_tag("Ratio is 3:1") is None


class TestParseDocstring:
    """Tests for parse_docstring."""

    def test_none(self):
        """Test undocumented declarations."""
        assert parse_docstring(None) == DocInfo()
        assert parse_docstring("") == DocInfo()

    def test_single_line(self):
        """Test a one-line docstring."""
        info = parse_docstring("Pull new orders.")
        assert info.first_paragraph == "Pull new orders."
        assert info.override is None

    def test_first_paragraph_only(self):
        """Test that later paragraphs are dropped."""
        doc = """Pull new orders
        from the shop API.

        Args:
            since: Cutoff timestamp
        """
        info = parse_docstring(doc)
        assert info.first_paragraph == "Pull new orders\nfrom the shop API."

    def test_override_tag(self):
        """Test :logdoc: sets the override and is removed from prose."""
        doc = """Pull new orders.

        :logdoc: Syncing orders
        """
        info = parse_docstring(doc)
        assert info.first_paragraph == "Pull new orders."
        assert info.override == "Syncing orders"

    def test_empty_override_suppresses(self):
        """Test an empty :logdoc: value."""
        info = parse_docstring("Helper.\n\n:logdoc:\n")
        assert info.override == ""

    def test_nolog_suppresses(self):
        """Test @nolog."""
        info = parse_docstring("Helper.\n\n@nolog\n")
        assert info.override == ""
        assert info.first_paragraph == "Helper."

    def test_nolog_wins_over_override(self):
        """Test suppression beats an explicit description."""
        info = parse_docstring("Helper.\n\n:logdoc: Visible\n:nolog:\n")
        assert info.override == ""

    def test_tag_before_prose(self):
        """Test a leading tag line does not become the first paragraph."""
        info = parse_docstring(":logdoc: Custom\n\nActual prose.")
        assert info.first_paragraph == "Actual prose."
        assert info.override == "Custom"

    def test_unknown_tags_ignored(self):
        """Test field lists neither describe nor suppress."""
        info = parse_docstring("Do work.\n\n:param x: value\n")
        assert info.first_paragraph == "Do work."
        assert info.override is None
