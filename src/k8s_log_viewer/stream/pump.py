"""
Stream pump driving log lines from a source through parse, filter and render.
"""

import logging
import signal
import subprocess
import time
from contextlib import contextmanager
from enum import Enum
from threading import Event, Thread
from typing import BinaryIO, Callable, Iterator, Optional, Sequence, Union

import click

from k8s_log_viewer.filters.chain import FilterChain, Verdict
from k8s_log_viewer.parsers.line_parser import LineParser
from k8s_log_viewer.render.renderer import Renderer
from k8s_log_viewer.stream.source import LineSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINE_BYTES = 2 * 1024 * 1024
DEFAULT_GRACE_PERIOD = 0.1
WATCH_INTERVAL = 0.05


class PumpState(str, Enum):
    """Lifecycle of a StreamPump."""
    STARTING = "starting"
    RUNNING = "running"
    DRAINING = "draining"
    TERMINATED = "terminated"


class CancelToken:
    """
    Single-shot cancellation flag shared between a signal handler, the
    cancellation watcher and the pump loop.
    """

    def __init__(self):
        self._event = Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


@contextmanager
def watch_signals(
    token: CancelToken,
    signals: Sequence[int] = (signal.SIGINT, signal.SIGTERM),
) -> Iterator[CancelToken]:
    """
    Cancel the token when one of the signals arrives.

    Must be entered from the main thread. Previous handlers are restored on
    exit.
    """
    def _handler(signum, frame):
        if not token.cancelled:
            logger.debug("Received signal %s, shutting down", signum)
        token.cancel()

    previous = {sig: signal.signal(sig, _handler) for sig in signals}
    try:
        yield token
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def read_lines(stream: BinaryIO, max_line_bytes: int = DEFAULT_MAX_LINE_BYTES) -> Iterator[str]:
    """
    Split a binary stream into decoded lines.

    Lines longer than max_line_bytes are logged and skipped up to their
    newline; reading then continues. Invalid UTF-8 is decoded with
    ``surrogateescape`` so the original bytes can be written back.

    Args:
        stream: Binary stream supporting readline(limit)
        max_line_bytes: Largest accepted line, newline excluded

    Yields:
        Lines without their line terminator
    """
    while True:
        chunk = stream.readline(max_line_bytes + 1)
        if not chunk:
            return

        if len(chunk) > max_line_bytes and not chunk.endswith(b"\n"):
            _discard_rest_of_line(stream, max_line_bytes)
            logger.warning("Skipping line longer than %d bytes", max_line_bytes)
            continue

        yield chunk.decode("utf-8", errors="surrogateescape").rstrip("\r\n")


def _discard_rest_of_line(stream: BinaryIO, chunk_size: int) -> None:
    while True:
        chunk = stream.readline(chunk_size)
        if not chunk or chunk.endswith(b"\n"):
            return


def encode_output(text: str) -> Union[str, bytes]:
    """Text holding escaped input bytes goes out as those exact bytes."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return text.encode("utf-8", errors="surrogateescape")
    return text


class StreamPump:
    """
    Owns a line source for its whole life and processes its lines in order.

    Every line is classified, filtered and rendered before the next one is
    read. Cancellation is cooperative: a watcher thread asks the source to
    terminate, which ends the stream and unwinds the loop.
    """

    def __init__(
        self,
        source: LineSource,
        filters: Optional[FilterChain] = None,
        renderer: Optional[Renderer] = None,
        parser: Optional[LineParser] = None,
        emit: Optional[Callable[[Union[str, bytes]], None]] = None,
        token: Optional[CancelToken] = None,
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
        grace_period: float = DEFAULT_GRACE_PERIOD,
    ):
        """
        Initialize the stream pump.

        Args:
            source: Producer of log lines
            filters: Filter chain (defaults to noise suppression only)
            renderer: Renderer for surviving lines
            parser: Line parser
            emit: Called with each piece of output (defaults to click.echo)
            token: Cancellation token observed by the pump
            max_line_bytes: Largest line accepted from the source
            grace_period: Seconds the source gets to exit after termination
        """
        self.source = source
        self.filters = filters or FilterChain()
        self.renderer = renderer or Renderer()
        self.parser = parser or LineParser()
        self.emit = emit or click.echo
        self.token = token or CancelToken()
        self.max_line_bytes = max_line_bytes
        self.grace_period = grace_period
        self.state = PumpState.STARTING
        self.lines_read = 0
        self.abandoned = False
        self.output_closed = False
        self._done = Event()
        self._watcher: Optional[Thread] = None

    def process_line(self, line: str) -> Optional[str]:
        """
        Run one line through classifier, filters and renderer.

        Args:
            line: Raw line without terminator

        Returns:
            Text to emit, or None if the line is dropped
        """
        if self.parser.is_blank(line):
            return None

        verdict = self.filters.screen(line)
        if verdict is Verdict.DROP:
            return None
        if verdict is Verdict.RAW:
            return line

        parsed = self.parser.parse_line(line)
        if parsed is None or not self.filters.admits(parsed):
            return None

        return self.renderer.render(parsed)

    def run(self) -> int:
        """
        Start the source and pump its lines until it ends or is cancelled.

        Returns:
            Exit status of the source

        Raises:
            SourceStartError: If the source cannot be started
        """
        self.state = PumpState.STARTING
        stream = self.source.start()
        self.state = PumpState.RUNNING

        self._watcher = Thread(target=self._watch_cancel, name="cancel-watcher", daemon=True)
        self._watcher.start()

        try:
            self._pump(stream)
        finally:
            self._done.set()
            self._watcher.join()

        return self._finish()

    def _pump(self, stream: BinaryIO) -> None:
        lines = read_lines(stream, self.max_line_bytes)
        while True:
            try:
                line = next(lines, None)
            except (OSError, ValueError) as e:
                self.abandoned = True
                if not self.token.cancelled:
                    logger.error("Error reading log stream: %s", e)
                return
            if line is None:
                return

            self.lines_read += 1
            output = self.process_line(line)
            if output is None:
                continue
            try:
                self.emit(encode_output(output))
            except BrokenPipeError:
                logger.debug("Output closed after %d lines, stopping", self.lines_read)
                self.abandoned = True
                self.output_closed = True
                return

    def _watch_cancel(self) -> None:
        while not self._done.is_set():
            if self.token.wait(WATCH_INTERVAL):
                self._drain()
                return

    def _drain(self) -> None:
        self.state = PumpState.DRAINING
        logger.debug("Cancellation requested, terminating source")
        self.source.terminate()
        time.sleep(self.grace_period)
        if not self._done.is_set():
            self.source.kill()

    def _finish(self) -> int:
        if self.token.cancelled:
            self.state = PumpState.DRAINING
            code = self._wait_or_kill()
        elif self.abandoned:
            self.state = PumpState.DRAINING
            logger.debug("Stream abandoned, terminating source")
            self.source.terminate()
            code = self._wait_or_kill()
        else:
            try:
                code = self.source.wait(timeout=self.grace_period)
            except subprocess.TimeoutExpired:
                self.state = PumpState.DRAINING
                logger.debug("Stream ended but source is still running, terminating it")
                self.source.terminate()
                code = self._wait_or_kill()

        self.state = PumpState.TERMINATED
        logger.debug("Source exited with status %s after %d lines", code, self.lines_read)
        return code

    def _wait_or_kill(self) -> int:
        try:
            return self.source.wait(timeout=self.grace_period)
        except subprocess.TimeoutExpired:
            logger.debug("Source still running after %.1fs, killing it", self.grace_period)
            self.source.kill()
            return self.source.wait()
