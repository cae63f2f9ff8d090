"""
This module defines the job descriptor handed to the DesignForge controller.

A job is immutable for the lifetime of one run: the caller decides the design
locator, the sandbox root that generated files must stay under, the numeric
limits that bound the conversation, and which chat backend to talk to. The
controller only ever reads it.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from .providers import ProviderConfig

DEFAULT_MODEL = "qwen/qwen3-coder-30b"
DEFAULT_MODEL_PROVIDER = "anthropic"
DEFAULT_BASE_URL = "http://127.0.0.1:1234"
DEFAULT_MAX_TOKENS = 8000


class JobLimits(BaseModel):
    """
    Numeric bounds applied to one conversation.

    Attributes:
        max_turns: Number of backend calls allowed before the run fails.
        max_tool_result_chars: Per-result cap applied before a tool result enters history.
        max_history_chars: Global cap applied to the conversation before each backend call.
        duplicate_threshold: Consecutive repeats after which a tool is blocked.
        require_artifacts_for_completion: Ignore completion phrases until a file was written.
    """

    model_config = ConfigDict(frozen=True)

    max_turns: int = Field(default=30, gt=0)
    max_tool_result_chars: int = Field(default=6000, gt=0)
    max_history_chars: int = Field(default=100_000, gt=0)
    duplicate_threshold: int = Field(default=2, gt=0)
    require_artifacts_for_completion: bool = False


class BackendSelection(BaseModel):
    """Which chat model to talk to and where it lives."""

    model_config = ConfigDict(frozen=True)

    model: str = DEFAULT_MODEL
    model_provider: str = DEFAULT_MODEL_PROVIDER
    base_url: Optional[str] = DEFAULT_BASE_URL
    api_key: Optional[SecretStr] = None
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)


class JobDescriptor(BaseModel):
    """
    Everything the controller needs to run one design-to-code job.

    The descriptor is frozen once created. ``output_path`` is resolved to an
    absolute path so the sandbox boundary is fixed before the first turn.
    """

    model_config = ConfigDict(frozen=True)

    task_ref: str = Field(..., description="Opaque design locator, usually a Figma URL.")
    output_path: Path = Field(..., description="Sandbox root for generated artifacts.")
    limits: JobLimits = Field(default_factory=JobLimits)
    backend: BackendSelection = Field(default_factory=BackendSelection)
    providers: List[ProviderConfig] = Field(default_factory=list)
    min_coverage: int = Field(default=80, ge=0, le=100)
    verbose: bool = False

    @field_validator("task_ref")
    @classmethod
    def _require_task_ref(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("task_ref must be a non-empty string")
        return value.strip()

    @field_validator("output_path")
    @classmethod
    def _resolve_output(cls, value: Path) -> Path:
        return Path(value).expanduser().resolve()
