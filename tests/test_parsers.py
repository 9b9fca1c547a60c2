"""
Tests for line classification and parsing.
"""

import pytest

from k8s_log_viewer.models import LogRecord
from k8s_log_viewer.parsers import LineKind, LineParser, ParsedLine


class TestLineParser:
    """Test cases for LineParser class."""

    @pytest.mark.parametrize("line", ["", "   ", "\t", " \t  "])
    def test_blank_lines_are_discarded(self, line):
        """Test blank lines produce no disposition."""
        parser = LineParser()

        assert parser.is_blank(line) is True
        assert parser.parse_line(line) is None

    def test_parse_structured_line(self):
        """Test a JSON object line decodes into a record."""
        parser = LineParser()

        parsed = parser.parse_line('{"level":"info","message":"started"}')

        assert isinstance(parsed, ParsedLine)
        assert parsed.kind is LineKind.STRUCTURED
        assert parsed.structured is True
        assert isinstance(parsed.record, LogRecord)
        assert parsed.record.message == "started"
        assert parsed.error is None

    def test_parse_invalid_line(self):
        """Test a non-JSON line is kept as unparsed."""
        parser = LineParser()

        parsed = parser.parse_line("not json at all")

        assert parsed.kind is LineKind.UNPARSED
        assert parsed.structured is False
        assert parsed.raw == "not json at all"
        assert parsed.record is None
        assert parsed.error

    def test_schema_mismatch_is_unparsed(self):
        """Test a JSON object with a bad field type is unparsed."""
        parser = LineParser()

        parsed = parser.parse_line('{"timestamp": "soon", "message": "x"}')

        assert parsed.kind is LineKind.UNPARSED
        assert "timestamp" in parsed.error

    def test_truncated_json_is_unparsed(self):
        """Test a cut-off JSON line does not raise."""
        parser = LineParser()

        parsed = parser.parse_line('{"level":"error","message":"bo')

        assert parsed.kind is LineKind.UNPARSED

    def test_escaped_bytes_stay_in_raw(self):
        """Test a line carrying undecodable bytes is unparsed with its raw text intact."""
        parser = LineParser()
        line = b"caf\xe9 is down".decode("utf-8", errors="surrogateescape")

        parsed = parser.parse_line(line)

        assert parsed.kind is LineKind.UNPARSED
        assert parsed.raw == line

    def test_structured_line_with_unicode(self):
        """Test non-ASCII text in a record decodes normally."""
        parser = LineParser()

        parsed = parser.parse_line('{"message":"caf\u00e9 grüße"}')

        assert parsed.structured is True
        assert parsed.record.message == "caf\u00e9 grüße"
