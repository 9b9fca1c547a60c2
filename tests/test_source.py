"""
Tests for the kubectl line source.
"""

import io
import subprocess
import sys

import pytest

from k8s_log_viewer.config import TailConfig
from k8s_log_viewer.errors import SourceStartError
from k8s_log_viewer.render import Renderer
from k8s_log_viewer.stream import ProcessLineSource, StreamPump, kubectl_logs_command, read_lines

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX signals")


def python_source(code, **kwargs):
    return ProcessLineSource([sys.executable, "-c", code], **kwargs)


class TestKubectlCommand:
    """Test cases for building the kubectl invocation."""

    def test_label_selector_all_containers(self):
        """Test the default invocation selects by app label."""
        config = TailConfig(app="checkout")

        assert kubectl_logs_command(config) == [
            "kubectl", "logs", "-f", "--ignore-errors",
            "--max-log-requests", "20",
            "-l", "app=checkout",
            "--all-containers",
        ]

    def test_pod_with_container_and_scope(self):
        """Test pod, container, namespace and context are passed on."""
        config = TailConfig(
            pod="checkout-7d9f-abcde",
            app="ignored",
            container="web",
            namespace="prod",
            context="eu-1",
            max_sources=5,
            tail=100,
            kubectl="/usr/local/bin/kubectl",
        )

        assert kubectl_logs_command(config) == [
            "/usr/local/bin/kubectl", "logs", "-f", "--ignore-errors",
            "--max-log-requests", "5",
            "-n", "prod",
            "--context", "eu-1",
            "--tail", "100",
            "checkout-7d9f-abcde",
            "-c", "web",
        ]


class TestProcessLineSource:
    """Test cases for ProcessLineSource class."""

    def test_source_initialization(self):
        """Test source can be initialized without starting."""
        source = ProcessLineSource(["kubectl", "logs"])

        assert source.argv == ["kubectl", "logs"]
        assert source.process is None

    def test_missing_program_fails_to_start(self):
        """Test a missing executable raises SourceStartError."""
        source = ProcessLineSource(["kube-logs-no-such-program-xyz"])

        with pytest.raises(SourceStartError):
            source.start()

    def test_reads_stdout_and_copies_stderr(self):
        """Test stdout lines are streamed and stderr is passed through."""
        sink = io.StringIO()
        source = python_source(
            "import sys\n"
            "print('one')\n"
            "print('two')\n"
            "sys.stderr.write('warning from kubectl\\n')\n"
            "sys.exit(3)\n",
            stderr_sink=sink,
        )

        stream = source.start()
        lines = list(read_lines(stream))
        code = source.wait(timeout=10)

        assert lines == ["one", "two"]
        assert code == 3
        assert "warning from kubectl" in sink.getvalue()

    def test_start_twice_fails(self):
        """Test a source can only be started once."""
        source = python_source("pass", stderr_sink=io.StringIO())
        source.start()

        with pytest.raises(SourceStartError):
            source.start()
        source.wait(timeout=10)

    @posix_only
    def test_terminate_running_process(self):
        """Test terminate stops a process and is safe to repeat."""
        source = python_source("import time; time.sleep(30)", stderr_sink=io.StringIO())
        source.start()

        source.terminate()
        code = source.wait(timeout=10)
        source.terminate()
        source.kill()

        assert code < 0

    def test_terminate_before_start_is_noop(self):
        """Test terminate without a process does nothing."""
        source = ProcessLineSource(["kubectl"])

        source.terminate()
        source.kill()

    def test_wait_timeout(self):
        """Test wait honours its timeout."""
        source = python_source("import time; time.sleep(30)", stderr_sink=io.StringIO())
        source.start()

        with pytest.raises(subprocess.TimeoutExpired):
            source.wait(timeout=0.1)
        source.kill()
        source.wait(timeout=10)


class TestPumpWithProcess:
    """Test cases running the pump against a real child process."""

    def test_pump_renders_child_output(self):
        """Test a child process's JSON lines are rendered in order."""
        source = python_source(
            "import json\n"
            "print(json.dumps({'level': 'info', 'message': 'started'}))\n"
            "print('')\n"
            "print(json.dumps({'level': 'info', 'message': 'GET /liveness'}))\n"
            "print(json.dumps({'message': '', 'metadata': {'method': 'POST', 'status': 500, 'url': '/pay'}}))\n",
            stderr_sink=io.StringIO(),
        )
        output = []

        code = StreamPump(source, renderer=Renderer(color=False), emit=output.append).run()

        assert code == 0
        assert output == ["[info] started", "POST 500 /pay |  ?ms |  | "]
