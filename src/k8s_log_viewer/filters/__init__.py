"""
Filters applied to log lines before rendering.
"""

from k8s_log_viewer.filters.chain import DEFAULT_NOISE_MARKERS, FilterChain, Verdict

__all__ = ["DEFAULT_NOISE_MARKERS", "FilterChain", "Verdict"]
