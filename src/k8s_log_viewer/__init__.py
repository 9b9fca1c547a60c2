"""
Kubernetes Log Viewer

Tails the JSON logs of a Kubernetes workload through kubectl and renders
them for humans.
"""

__version__ = "0.1.0"

from k8s_log_viewer.filters.chain import FilterChain
from k8s_log_viewer.models.log_record import LogRecord
from k8s_log_viewer.parsers.line_parser import LineParser
from k8s_log_viewer.render.renderer import Renderer
from k8s_log_viewer.stream.pump import StreamPump
from k8s_log_viewer.stream.source import ProcessLineSource

__all__ = [
    "FilterChain",
    "LineParser",
    "LogRecord",
    "ProcessLineSource",
    "Renderer",
    "StreamPump",
]
