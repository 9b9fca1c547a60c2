"""
Command-line interface for the Kubernetes log viewer.
"""

import functools
import logging
import os
import signal
import subprocess
import sys
from typing import Tuple

import click
from pydantic import ValidationError

from k8s_log_viewer import __version__
from k8s_log_viewer.config import DEFAULT_MAX_SOURCES, TailConfig, configure_logging
from k8s_log_viewer.errors import SelectionError, SourceStartError
from k8s_log_viewer.filters.chain import DEFAULT_NOISE_MARKERS
from k8s_log_viewer.selection.selector import select_target
from k8s_log_viewer.stream.pump import CancelToken, StreamPump, watch_signals
from k8s_log_viewer.stream.source import ProcessLineSource, kubectl_logs_command

logger = logging.getLogger(__name__)

COLOR_MODES = {"auto": None, "always": True, "never": False}


def exit_status(code: int) -> int:
    """Map a child's exit status to ours; death by signal N becomes 128+N."""
    if code < 0:
        return 128 - code
    return code


def run_tail(config: TailConfig) -> int:
    """
    Tail the configured workload until the stream ends or Ctrl+C.

    Args:
        config: Resolved configuration

    Returns:
        Exit status of kubectl

    Raises:
        SourceStartError: If kubectl cannot be started
    """
    argv = kubectl_logs_command(config)
    click.echo(click.style(f"> {subprocess.list2cmdline(argv)}", dim=True), err=True)

    token = CancelToken()
    pump = StreamPump(
        ProcessLineSource(argv),
        filters=config.build_filters(),
        renderer=config.build_renderer(),
        emit=functools.partial(click.echo, color=config.use_color()),
        token=token,
    )
    with watch_signals(token, (signal.SIGINT, signal.SIGTERM)):
        code = pump.run()

    if pump.output_closed:
        # Anything still buffered for stdout can no longer be written.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())

    if token.cancelled:
        click.echo("\nStopped by user", err=True)
    return code


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--log-level", "level", default="", help="Only print records with this level (case-insensitive)")
@click.option("--pattern", "-p", default="", help="Only print lines containing this text")
@click.option("--full", is_flag=True, help="Print the full log record as JSON")
@click.option("--raw", is_flag=True, help="Print raw log lines without any formatting")
@click.option("--interactive", "-i", is_flag=True, help="Pick namespace, deployment and container interactively")
@click.option("--pod", default="", help="Tail this pod instead of selecting by app label")
@click.option("--app", default="", envvar="APP", show_envvar=True, help="Value of the app label selecting pods")
@click.option("--container", "-c", default="", envvar="CONTAINER_NAME", show_envvar=True,
              help="Container to tail (default: all containers)")
@click.option("--namespace", "-n", default="", envvar="NAMESPACE", show_envvar=True,
              help="Namespace (default: kubectl's current namespace)")
@click.option("--context", "kube_context", default="", envvar="KUBE_CONTEXT", show_envvar=True,
              help="kubeconfig context to use")
@click.option("--max-log-requests", "max_sources", type=int, default=DEFAULT_MAX_SOURCES, show_default=True,
              help="Maximum number of concurrent log streams")
@click.option("--tail", type=int, default=-1, help="Lines of history per container (default: kubectl's)")
@click.option("--noise", multiple=True, default=DEFAULT_NOISE_MARKERS, show_default=True,
              help="Drop lines containing this text (repeatable)")
@click.option("--color", type=click.Choice(["auto", "always", "never"]), default="auto", show_default=True,
              help="Color output mode")
@click.option("--kubectl", default="kubectl", envvar="KUBECTL", show_envvar=True, help="kubectl executable")
@click.option("--verbose", "-v", is_flag=True, help="Print debug diagnostics to stderr")
@click.version_option(version=__version__)
def main(
    level: str,
    pattern: str,
    full: bool,
    raw: bool,
    interactive: bool,
    pod: str,
    app: str,
    container: str,
    namespace: str,
    kube_context: str,
    max_sources: int,
    tail: int,
    noise: Tuple[str, ...],
    color: str,
    kubectl: str,
    verbose: bool,
) -> None:
    """
    Tail and pretty-print JSON logs of a Kubernetes workload.

    Runs `kubectl logs -f` against the pods of an app label (or a single pod),
    parses each line as a structured log record and prints a readable view.
    Lines that are not JSON are printed as they are.

    Examples:
        kube-logs --app checkout
        kube-logs --app checkout --log-level error
        kube-logs -i --pattern /pay
        kube-logs --pod checkout-7d9f-abcde --raw
    """
    configure_logging(verbose)

    try:
        config = TailConfig(
            level=level,
            pattern=pattern,
            full=full,
            raw=raw,
            interactive=interactive,
            pod=pod,
            app=app,
            container=container,
            namespace=namespace,
            context=kube_context,
            max_sources=max_sources,
            verbose=verbose,
            noise_markers=noise,
            color=COLOR_MODES[color],
            tail=tail,
            kubectl=kubectl,
        )
    except ValidationError as e:
        raise click.UsageError(str(e))

    if config.interactive:
        try:
            selection = select_target(config)
        except SelectionError as e:
            raise click.ClickException(str(e))
        logger.debug("Selected %s", selection)
        config = config.with_selection(selection)

    if not config.has_target:
        raise click.UsageError("no target: pass --pod, --app (or APP) or use -i")

    try:
        code = run_tail(config)
    except SourceStartError as e:
        raise click.ClickException(str(e))

    sys.exit(exit_status(code))


if __name__ == "__main__":
    main()
