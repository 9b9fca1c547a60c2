"""
Log line acquisition from a live process and the pump driving it.
"""

from k8s_log_viewer.stream.pump import CancelToken, PumpState, StreamPump, read_lines, watch_signals
from k8s_log_viewer.stream.source import LineSource, ProcessLineSource, kubectl_logs_command

__all__ = [
    "CancelToken",
    "LineSource",
    "ProcessLineSource",
    "PumpState",
    "StreamPump",
    "kubectl_logs_command",
    "read_lines",
    "watch_signals",
]
