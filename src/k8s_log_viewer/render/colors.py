"""
ANSI color mapping for levels and HTTP status codes.
"""

from typing import Optional

import click

LEVEL_COLORS = {
    "error": "red",
    "warn": "yellow",
    "warning": "yellow",
    "info": "cyan",
    "debug": "magenta",
}


def level_color(level: str) -> Optional[str]:
    """Color name for a level, None if it has none."""
    return LEVEL_COLORS.get(level.strip().lower())


def status_color(status: str) -> Optional[str]:
    """Color name for an HTTP status code, None if it has none."""
    try:
        code = int(status.strip())
    except ValueError:
        return None

    if 200 <= code < 300:
        return "green"
    if 300 <= code < 400:
        return "cyan"
    if 400 <= code < 500:
        return "yellow"
    if 500 <= code < 600:
        return "red"
    return None


def colorize_level(level: str) -> str:
    """Wrap a level in its color, leaving unknown levels untouched."""
    color = level_color(level)
    if color is None:
        return level
    return click.style(level, fg=color)


def colorize_status(status: str) -> str:
    """Wrap a status code in its color, leaving other values untouched."""
    color = status_color(status)
    if color is None:
        return status
    return click.style(status, fg=color)
