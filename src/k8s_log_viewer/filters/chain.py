"""
Filter chain deciding which log lines reach the renderer.

Stages run in a fixed order:

1. noise suppression on the raw line (health-check traffic),
2. substring pattern on the raw line,
3. raw-mode short-circuit,
4. level match on the parsed record.

Stages 1-3 run before the line is parsed so that suppressed traffic never
pays the decode cost. Every stage is a pure function of the line and the
configuration.
"""

from enum import Enum
from typing import Iterable, Optional, Tuple

from k8s_log_viewer.parsers.line_parser import ParsedLine

DEFAULT_NOISE_MARKERS: Tuple[str, ...] = ("readiness", "liveness")


class Verdict(str, Enum):
    """Outcome of the pre-parse stages."""
    DROP = "drop"
    RAW = "raw"
    PARSE = "parse"


def is_noise(line: str, markers: Iterable[str]) -> bool:
    """True if the line contains any of the markers (case-sensitive)."""
    return any(marker in line for marker in markers)


def matches_pattern(line: str, pattern: str) -> bool:
    """True if no pattern is set or the line contains it."""
    return not pattern or pattern in line


def matches_level(parsed: ParsedLine, level: str) -> bool:
    """True if no level is set, the line is unparsed, or the levels match."""
    if not level or parsed.record is None:
        return True
    return parsed.record.level.lower() == level.lower()


class FilterChain:
    """
    Applies the configured filters to a line in order.
    """

    def __init__(
        self,
        noise_markers: Iterable[str] = DEFAULT_NOISE_MARKERS,
        pattern: str = "",
        raw: bool = False,
        level: str = "",
    ):
        """
        Initialize the filter chain.

        Args:
            noise_markers: Substrings marking lines to suppress
            pattern: Substring a line must contain (empty disables)
            raw: Emit surviving lines verbatim without parsing
            level: Level a record must have (empty disables)
        """
        self.noise_markers = tuple(m for m in noise_markers if m)
        self.pattern = pattern or ""
        self.raw = raw
        self.level = (level or "").strip()

    def screen(self, line: str) -> Verdict:
        """
        Run the stages that only need the raw line.

        Args:
            line: Raw line

        Returns:
            DROP if suppressed, RAW if it should be emitted verbatim,
            PARSE if it continues to the parser
        """
        if is_noise(line, self.noise_markers):
            return Verdict.DROP
        if not matches_pattern(line, self.pattern):
            return Verdict.DROP
        if self.raw:
            return Verdict.RAW
        return Verdict.PARSE

    def admits(self, parsed: ParsedLine) -> bool:
        """Run the level stage on a parsed line."""
        return matches_level(parsed, self.level)
