"""
Rendering of parsed log lines into terminal text.
"""

import logging
from typing import Optional

from pydantic_core import PydanticSerializationError

from k8s_log_viewer.models.log_record import LogRecord
from k8s_log_viewer.parsers.line_parser import ParsedLine
from k8s_log_viewer.render.colors import colorize_level, colorize_status

logger = logging.getLogger(__name__)

UNPARSED_PREFIX = "[unparsed] "


def non_empty(value: str, fallback: str) -> str:
    """Return value unless it is blank."""
    if not value.strip():
        return fallback
    return value


class Renderer:
    """
    Produces exactly one piece of text for each line that passed the filters.

    Precedence: unparsed fallback, full struct dump, message line,
    access-log summary.
    """

    def __init__(self, full: bool = False, color: bool = True):
        """
        Initialize the renderer.

        Args:
            full: Dump the whole record as indented JSON
            color: Decorate levels and status codes with ANSI colors
        """
        self.full = full
        self.color = color

    def render(self, parsed: ParsedLine) -> Optional[str]:
        """
        Render a parsed line.

        Args:
            parsed: Line returned by the parser

        Returns:
            Text to print (possibly several lines), or None when the record
            has neither a message nor any request metadata
        """
        record = parsed.record
        if record is None:
            return UNPARSED_PREFIX + parsed.raw

        if self.full:
            return self.render_full(record, parsed.raw)

        if record.has_message:
            return self.render_message(record)

        return self.render_access(record)

    def render_full(self, record: LogRecord, raw: str) -> str:
        try:
            return record.to_pretty_json()
        except (PydanticSerializationError, ValueError, TypeError) as e:
            logger.debug("Could not re-encode record, printing raw line: %s", e)
            return raw

    def render_message(self, record: LogRecord) -> str:
        """Render '[level] [url] [user] message' plus the stack for errors."""
        parts = [f"[{self._level(record.level)}]"]
        if record.request_url:
            parts.append(f"[{record.request_url}]")
        if record.user_name:
            parts.append(f"[{record.user_name}]")
        parts.append(record.message)

        text = " ".join(parts)
        if record.has_stack:
            text = f"{text}\n{record.stack.rstrip()}"
        return text

    def render_access(self, record: LogRecord) -> Optional[str]:
        """Render a one-line curl-like summary of the request metadata."""
        md = record.metadata
        if md.is_empty():
            return None

        method = non_empty(md.method, "GET")
        status = self._status(non_empty(md.status, "-"))
        url = non_empty(md.url, "/")
        rt = non_empty(md.response_time_ms, "?") + "ms"
        ip = non_empty(md.client_ip, md.remote_addr)

        return f"{method} {status} {url} | {md.domain} {rt} | {ip} | {md.request_id}"

    def _level(self, level: str) -> str:
        return colorize_level(level) if self.color else level

    def _status(self, status: str) -> str:
        return colorize_status(status) if self.color else status
