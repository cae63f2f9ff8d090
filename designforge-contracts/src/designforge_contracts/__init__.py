"""
This package defines the shared data contracts used throughout DesignForge.

It is the single source of truth for the structures exchanged between the
command line, the conversation controller and library callers: provider
configuration for the external MCP tool servers, the immutable job descriptor,
parsed artifacts and the run summary. The models are Pydantic-based so that
configuration coming from files, environment variables or code is validated
the same way.
"""
from .artifacts import (
    AgentProgress,
    ParsedArtifact,
    ProgressStatus,
    RunStatus,
    RunSummary,
    ToolCallRecord,
)
from .job import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_MODEL_PROVIDER,
    BackendSelection,
    JobDescriptor,
    JobLimits,
)
from .providers import (
    HttpProviderConfig,
    ProviderConfig,
    StdioProviderConfig,
    ToolDescriptor,
    parse_provider_config,
    parse_provider_configs,
)

__all__ = [
    "AgentProgress",
    "ParsedArtifact",
    "ProgressStatus",
    "RunStatus",
    "RunSummary",
    "ToolCallRecord",
    "DEFAULT_BASE_URL",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_MODEL",
    "DEFAULT_MODEL_PROVIDER",
    "BackendSelection",
    "JobDescriptor",
    "JobLimits",
    "HttpProviderConfig",
    "ProviderConfig",
    "StdioProviderConfig",
    "ToolDescriptor",
    "parse_provider_config",
    "parse_provider_configs",
]
