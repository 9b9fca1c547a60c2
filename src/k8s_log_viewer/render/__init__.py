"""
Terminal rendering of log records.
"""

from k8s_log_viewer.render.colors import colorize_level, colorize_status
from k8s_log_viewer.render.renderer import UNPARSED_PREFIX, Renderer

__all__ = ["Renderer", "UNPARSED_PREFIX", "colorize_level", "colorize_status"]
