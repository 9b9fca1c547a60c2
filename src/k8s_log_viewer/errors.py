"""
Exceptions raised by the log viewer.
"""


class KubeLogsError(Exception):
    """Base exception for kube-logs errors."""

    pass


class SourceStartError(KubeLogsError):
    """Raised when the log source process cannot be started."""

    pass


class SelectionError(KubeLogsError):
    """Raised when an interactive target selection cannot be made."""

    pass
