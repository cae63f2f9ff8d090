"""
Workflow progress tracking and completion detection.

Completion is a phrase heuristic: any of a handful of case-insensitive
phrases in the turn's text ends the run. When the job asks for it, a claim of
completion is only honoured once at least one file has been written; an
earlier claim is treated like any other stalled turn.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Set

from .prompts.guidance import build_phase_guidance

COMPLETION_PHRASES = (
    "workflow complete",
    "implementation finished",
    "all phases completed",
    "designforge complete",
    "execution complete",
)

DESIGN_PROVIDER = "figma"
CATALOG_PROVIDER = "naos"


def has_completion_phrase(text: str) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in COMPLETION_PHRASES)


@dataclass
class WorkflowProgress:
    """What the run has accomplished so far: providers used and files written."""

    called_providers: Set[str] = field(default_factory=set)
    written_files: List[Path] = field(default_factory=list)

    def record_provider(self, provider: str | None) -> None:
        if provider:
            self.called_providers.add(provider)

    def record_files(self, paths: List[Path]) -> None:
        self.written_files.extend(paths)

    def is_complete(self, text: str, *, require_artifacts: bool = False) -> bool:
        if not has_completion_phrase(text):
            return False
        return bool(self.written_files) or not require_artifacts

    def guidance(self) -> str:
        return build_phase_guidance(
            design_done=DESIGN_PROVIDER in self.called_providers,
            catalog_done=CATALOG_PROVIDER in self.called_providers,
            files_written=len(self.written_files),
        )
