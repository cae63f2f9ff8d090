"""
Contracts for generated artifacts, run summaries and progress events.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ParsedArtifact(BaseModel):
    """One path-labelled file extracted from a fenced block of model output."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str
    language: str = ""


class RunStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    ERROR = "error"


class RunSummary(BaseModel):
    """
    Result handed back to the caller when a run finishes.

    Coverage and design parity are placeholders that always read zero; test
    execution and visual comparison are not performed.
    """

    status: RunStatus
    files_generated: int = 0
    components: int = 0
    tests: int = 0
    stories: int = 0
    coverage: int = 0
    design_parity: int = 0
    gaps: List[str] = Field(default_factory=list)
    output_path: str
    files: List[str] = Field(default_factory=list)


class ProgressStatus(str, Enum):
    RUNNING = "running"
    COMPLETE = "complete"
    ERROR = "error"


class ToolCallRecord(BaseModel):
    tool: str
    input: Dict[str, Any] = Field(default_factory=dict)


class AgentProgress(BaseModel):
    """A progress event emitted to the optional caller callback once or more per turn."""

    turn: int
    status: ProgressStatus
    message: str = ""
    tool_calls: List[ToolCallRecord] = Field(default_factory=list)
    result: Optional[RunSummary] = None
