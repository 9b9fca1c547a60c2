"""
Parsers turning raw log lines into structured records.
"""

from k8s_log_viewer.parsers.line_parser import LineKind, LineParser, ParsedLine

__all__ = ["LineKind", "LineParser", "ParsedLine"]
