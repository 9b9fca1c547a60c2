"""
Line sources feeding the stream pump.

A line source is a spawned process whose stdout carries newline-delimited
log lines and whose stderr is passed straight through to the operator.
"""

import logging
import subprocess
import sys
from threading import Thread
from typing import IO, TYPE_CHECKING, BinaryIO, List, Optional, Protocol

from k8s_log_viewer.errors import SourceStartError

if TYPE_CHECKING:
    from k8s_log_viewer.config import TailConfig

logger = logging.getLogger(__name__)

STDERR_CHUNK_SIZE = 4096


class LineSource(Protocol):
    """Capability the pump needs from whatever produces log lines."""

    def start(self) -> BinaryIO:
        """Start producing and return the binary stream of lines."""
        ...

    def terminate(self) -> None:
        """Ask the producer to stop. Safe to call after it exited."""
        ...

    def kill(self) -> None:
        """Stop the producer without waiting for it to cooperate."""
        ...

    def wait(self, timeout: Optional[float] = None) -> int:
        """Wait for the producer to exit and return its exit status."""
        ...


def kubectl_logs_command(config: "TailConfig") -> List[str]:
    """
    Build the kubectl invocation tailing the configured workload.

    Args:
        config: Tail configuration

    Returns:
        Argument vector, program first
    """
    args = [
        config.kubectl, "logs", "-f",
        "--ignore-errors",
        "--max-log-requests", str(config.max_sources),
    ]
    if config.namespace:
        args += ["-n", config.namespace]
    if config.context:
        args += ["--context", config.context]
    if config.tail >= 0:
        args += ["--tail", str(config.tail)]

    if config.pod:
        args.append(config.pod)
    else:
        args += ["-l", f"app={config.app}"]

    if config.container:
        args += ["-c", config.container]
    else:
        args.append("--all-containers")

    return args


def _copy_stream(source: IO[bytes], sink: IO) -> None:
    """Copy chunks from a pipe to a text or binary sink until EOF."""
    target = getattr(sink, "buffer", None)
    read = getattr(source, "read1", source.read)
    try:
        for chunk in iter(lambda: read(STDERR_CHUNK_SIZE), b""):
            if target is not None:
                target.write(chunk)
                target.flush()
            else:
                sink.write(chunk.decode("utf-8", errors="replace"))
                sink.flush()
    except (OSError, ValueError) as e:
        logger.debug("Stopped copying stderr: %s", e)


class ProcessLineSource:
    """
    Runs a command and exposes its stdout as a line stream.
    """

    def __init__(self, argv: List[str], stderr_sink: Optional[IO] = None):
        """
        Initialize the process source.

        Args:
            argv: Command to run, program first
            stderr_sink: Where the process's stderr is copied
                (defaults to sys.stderr at start time)
        """
        self.argv = list(argv)
        self.stderr_sink = stderr_sink
        self.process: Optional[subprocess.Popen] = None
        self._stderr_thread: Optional[Thread] = None

    def start(self) -> BinaryIO:
        """
        Spawn the process.

        Returns:
            The process's stdout

        Raises:
            SourceStartError: If the process cannot be spawned
        """
        if self.process is not None:
            raise SourceStartError(f"{self.argv[0]} already started")

        logger.debug("Starting %s", subprocess.list2cmdline(self.argv))
        try:
            self.process = subprocess.Popen(
                self.argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            raise SourceStartError(f"failed to start {self.argv[0]}: {e}") from e

        sink = self.stderr_sink if self.stderr_sink is not None else sys.stderr
        self._stderr_thread = Thread(
            target=_copy_stream,
            args=(self.process.stderr, sink),
            name="stderr-copy",
            daemon=True,
        )
        self._stderr_thread.start()

        return self.process.stdout

    def terminate(self) -> None:
        if self.process is None or self.process.poll() is not None:
            return
        try:
            self.process.terminate()
        except ProcessLookupError:
            pass

    def kill(self) -> None:
        if self.process is None or self.process.poll() is not None:
            return
        try:
            self.process.kill()
        except ProcessLookupError:
            pass

    def wait(self, timeout: Optional[float] = None) -> int:
        """
        Wait for the process to exit.

        Args:
            timeout: Seconds to wait, None waits forever

        Returns:
            Exit status (negative signal number if killed by a signal)

        Raises:
            subprocess.TimeoutExpired: If the timeout elapses first
        """
        if self.process is None:
            raise SourceStartError("process was never started")

        code = self.process.wait(timeout=timeout)
        if self._stderr_thread is not None:
            self._stderr_thread.join(timeout=1)
        if self.process.stdout is not None:
            self.process.stdout.close()
        return code
