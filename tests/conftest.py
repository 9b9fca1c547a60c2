"""
Shared fixtures for the log viewer tests.
"""

import io
from typing import List, Optional

import pytest

from k8s_log_viewer.errors import SourceStartError


class FakeSource:
    """In-memory line source standing in for kubectl."""

    def __init__(self, data: bytes = b"", exit_code: int = 0, start_error: Optional[str] = None):
        self.stream = io.BytesIO(data)
        self.exit_code = exit_code
        self.start_error = start_error
        self.argv: List[str] = []
        self.started = False
        self.terminated = 0
        self.killed = 0
        self.waited = 0

    def start(self):
        if self.start_error:
            raise SourceStartError(self.start_error)
        self.started = True
        return self.stream

    def terminate(self):
        self.terminated += 1

    def kill(self):
        self.killed += 1

    def wait(self, timeout=None):
        self.waited += 1
        return self.exit_code


@pytest.fixture
def fake_source():
    """Factory for in-memory sources."""
    return FakeSource


@pytest.fixture
def clean_env(monkeypatch):
    """Remove environment variables read by the command."""
    for name in ("APP", "CONTAINER_NAME", "NAMESPACE", "KUBE_CONTEXT", "KUBECTL"):
        monkeypatch.delenv(name, raising=False)
