"""
Configuration of a tail session.
"""

import logging
import sys
from typing import TYPE_CHECKING, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from k8s_log_viewer.filters.chain import DEFAULT_NOISE_MARKERS, FilterChain
from k8s_log_viewer.render.renderer import Renderer

if TYPE_CHECKING:
    from k8s_log_viewer.selection.selector import TargetSelection

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_MAX_SOURCES = 20


class TailConfig(BaseModel):
    """Everything needed to tail and render one workload's logs."""

    model_config = ConfigDict(frozen=True)

    level: str = Field("", description="Only show records with this level")
    pattern: str = Field("", description="Only show lines containing this text")
    full: bool = Field(False, description="Dump whole records as JSON")
    raw: bool = Field(False, description="Print lines verbatim")
    interactive: bool = Field(False, description="Pick the target with prompts")
    pod: str = Field("", description="Tail this pod instead of a label selector")
    app: str = Field("", description="Value of the app label to select pods")
    container: str = Field("", description="Container name, empty for all")
    namespace: str = Field("", description="Namespace, empty for kubectl's default")
    context: str = Field("", description="kubeconfig context")
    max_sources: int = Field(DEFAULT_MAX_SOURCES, description="Max concurrent log streams")
    verbose: bool = Field(False, description="Debug diagnostics on stderr")
    noise_markers: Tuple[str, ...] = Field(DEFAULT_NOISE_MARKERS)
    color: Optional[bool] = Field(None, description="Force colors on or off, None for auto")
    tail: int = Field(-1, description="Lines of history per container, -1 for kubectl's default")
    kubectl: str = Field("kubectl", description="kubectl executable")

    @field_validator("max_sources")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @property
    def has_target(self) -> bool:
        return bool(self.pod or self.app)

    def with_selection(self, selection: "TargetSelection") -> "TailConfig":
        """Apply an interactive selection on top of this configuration."""
        return self.model_copy(update={
            "namespace": selection.namespace or self.namespace,
            "app": selection.app or self.app,
            "container": selection.container,
            "pod": "",
        })

    def use_color(self) -> bool:
        """Colors are on when forced, or when stdout is a terminal."""
        if self.color is not None:
            return self.color
        return sys.stdout.isatty()

    def build_filters(self) -> FilterChain:
        return FilterChain(
            noise_markers=self.noise_markers,
            pattern=self.pattern,
            raw=self.raw,
            level=self.level,
        )

    def build_renderer(self) -> Renderer:
        return Renderer(full=self.full, color=self.use_color())


def configure_logging(verbose: bool = False) -> None:
    """
    Send diagnostics to stderr.

    Args:
        verbose: Log at DEBUG instead of WARNING
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
