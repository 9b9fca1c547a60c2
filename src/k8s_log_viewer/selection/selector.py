"""
Interactive choice of the workload to tail.
"""

import json
import logging
import subprocess
from typing import TYPE_CHECKING, Any, Dict, List, NamedTuple, Sequence

import click
from pydantic import BaseModel, Field, ValidationError

from k8s_log_viewer.errors import SelectionError

if TYPE_CHECKING:
    from k8s_log_viewer.config import TailConfig

logger = logging.getLogger(__name__)

KUBECTL_TIMEOUT = 30
PAGE_SIZE = 20


class TargetSelection(NamedTuple):
    """What the operator picked."""
    namespace: str
    deployment: str
    app: str
    container: str


class Deployment(BaseModel):
    """The parts of a Deployment object needed to pick a log target."""

    name: str
    labels: Dict[str, str] = Field(default_factory=dict)
    replicas: int = 1
    containers: List[str] = Field(default_factory=list)

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "Deployment":
        metadata = item.get("metadata") or {}
        spec = item.get("spec") or {}
        pod_spec = (spec.get("template") or {}).get("spec") or {}
        replicas = spec.get("replicas")
        return cls(
            name=metadata.get("name", ""),
            labels=metadata.get("labels") or {},
            replicas=1 if replicas is None else replicas,
            containers=[c.get("name", "") for c in pod_spec.get("containers") or []],
        )

    @property
    def selectable(self) -> bool:
        """Running deployments labelled with both app and component."""
        return (
            self.replicas != 0
            and bool(self.labels.get("app"))
            and bool(self.labels.get("component"))
        )


def _kubectl_json(kubectl: str, args: List[str]) -> Dict[str, Any]:
    cmd = [kubectl] + args + ["-o", "json"]
    logger.debug("Running %s", subprocess.list2cmdline(cmd))
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=KUBECTL_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise SelectionError(f"failed to run {kubectl}: {e}") from e

    if result.returncode != 0:
        raise SelectionError(
            f"{' '.join(args)} failed: {result.stderr.strip() or result.returncode}"
        )

    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise SelectionError(f"unexpected output from {kubectl}: {e}") from e


def _context_args(context: str) -> List[str]:
    return ["--context", context] if context else []


def list_namespaces(kubectl: str = "kubectl", context: str = "") -> List[str]:
    """
    List namespace names, sorted.

    Raises:
        SelectionError: If kubectl fails or returns unexpected data
    """
    data = _kubectl_json(kubectl, ["get", "namespaces"] + _context_args(context))
    try:
        names = [(item.get("metadata") or {}).get("name", "") for item in data.get("items", [])]
    except (AttributeError, TypeError) as e:
        raise SelectionError(f"unexpected namespace data: {e}") from e
    return sorted(n for n in names if n)


def list_deployments(
    namespace: str,
    kubectl: str = "kubectl",
    context: str = "",
) -> List[Deployment]:
    """
    List the deployments of a namespace that can be tailed.

    Args:
        namespace: Namespace to list, empty for kubectl's default
        kubectl: kubectl executable
        context: kubeconfig context

    Returns:
        Selectable deployments sorted by name

    Raises:
        SelectionError: If kubectl fails or returns unexpected data
    """
    args = ["get", "deployments"]
    if namespace:
        args += ["-n", namespace]
    data = _kubectl_json(kubectl, args + _context_args(context))

    try:
        deployments = [Deployment.from_item(item) for item in data.get("items", [])]
    except (ValidationError, AttributeError, TypeError) as e:
        raise SelectionError(f"unexpected deployment data: {e}") from e

    return sorted((d for d in deployments if d.selectable), key=lambda d: d.name)


def choose(label: str, items: Sequence[str]) -> str:
    """
    Prompt the operator to pick one item from a numbered list.

    A single item is returned without prompting.

    Raises:
        SelectionError: If there is nothing to choose from
    """
    if not items:
        raise SelectionError(f"nothing to choose for {label.lower()}")
    if len(items) == 1:
        click.echo(f"{label}: {items[0]}", err=True)
        return items[0]

    click.echo(f"\n{label}:", err=True)
    for index, item in enumerate(items[:PAGE_SIZE], start=1):
        click.echo(f"  {index:>2}. {item}", err=True)
    if len(items) > PAGE_SIZE:
        click.echo(f"  ... {len(items) - PAGE_SIZE} more (type a number up to {len(items)})", err=True)

    index = click.prompt(label, type=click.IntRange(1, len(items)), err=True)
    return items[index - 1]


def select_target(config: "TailConfig") -> TargetSelection:
    """
    Walk the operator through namespace, deployment and container prompts.

    Args:
        config: Current configuration; a configured namespace is not asked

    Returns:
        The chosen target

    Raises:
        SelectionError: If kubectl fails or a list is empty
    """
    namespace = config.namespace
    if not namespace:
        namespace = choose("Select Namespace", list_namespaces(config.kubectl, config.context))

    deployments = list_deployments(namespace, config.kubectl, config.context)
    if not deployments:
        raise SelectionError(f"no deployments with app and component labels in {namespace}")

    by_name = {d.name: d for d in deployments}
    chosen = by_name[choose("Select Deployment", [d.name for d in deployments])]
    container = choose("Select Container", chosen.containers)

    return TargetSelection(
        namespace=namespace,
        deployment=chosen.name,
        app=chosen.labels["app"],
        container=container,
    )
