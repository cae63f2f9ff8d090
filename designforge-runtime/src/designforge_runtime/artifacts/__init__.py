"""
Artifact extraction from model output, sandboxed writing and run summaries.
"""
from .extractor import contains_fence, parse_artifacts
from .summary import summarize_run
from .writer import resolve_under_root, write_artifacts

__all__ = [
    "contains_fence",
    "parse_artifacts",
    "resolve_under_root",
    "summarize_run",
    "write_artifacts",
]
