"""
Interactive selection of the workload to tail.
"""

from k8s_log_viewer.selection.selector import (
    Deployment,
    TargetSelection,
    list_deployments,
    list_namespaces,
    select_target,
)

__all__ = [
    "Deployment",
    "TargetSelection",
    "list_deployments",
    "list_namespaces",
    "select_target",
]
