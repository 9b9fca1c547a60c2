"""
Line classification and parsing functionality.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from k8s_log_viewer.models.log_record import LogRecord


class LineKind(str, Enum):
    """How a non-blank line was classified."""
    STRUCTURED = "structured"
    UNPARSED = "unparsed"


@dataclass(frozen=True)
class ParsedLine:
    """A raw line together with the record decoded from it, if any."""

    kind: LineKind
    raw: str
    record: Optional[LogRecord] = None
    error: Optional[str] = None

    @property
    def structured(self) -> bool:
        return self.kind is LineKind.STRUCTURED


class LineParser:
    """
    Classifies raw log lines and decodes JSON ones into log records.
    """

    @staticmethod
    def is_blank(line: str) -> bool:
        """Blank and whitespace-only lines carry nothing to show."""
        return not line.strip()

    def parse_line(self, line: str) -> Optional[ParsedLine]:
        """
        Parse a single log line.

        Args:
            line: Raw line without its trailing newline

        Returns:
            None for blank lines, otherwise a ParsedLine that is either
            structured or unparsed. Decode failures are never raised.
        """
        if self.is_blank(line):
            return None

        try:
            record = LogRecord.from_json(line.encode("utf-8", errors="surrogateescape"))
        except ValidationError as e:
            return ParsedLine(LineKind.UNPARSED, line, error=_describe(e))
        except UnicodeEncodeError as e:
            return ParsedLine(LineKind.UNPARSED, line, error=e.reason)

        return ParsedLine(LineKind.STRUCTURED, line, record=record)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"{location}: {first['msg']}"
    return first["msg"]
