"""
This module defines the runtime settings for DesignForge.

``RuntimeSettings`` is a plain dataclass holding every tunable the command line
and library callers may want to override: the chat backend selection, the
conversation limits and the MCP providers to connect. Values come from three
layers, applied in order: built-in defaults, a configuration file (see
``loader.py``) and environment variables. ``build_job`` then freezes the
result into a ``JobDescriptor`` for one run.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from designforge_contracts import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_MODEL_PROVIDER,
    BackendSelection,
    JobDescriptor,
    JobLimits,
    parse_provider_configs,
)

LOGGER = logging.getLogger(__name__)

FIGMA_MCP_PACKAGE = "figma-developer-mcp"


def _int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


def _bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def _str(name: str, default: Optional[str]) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _figma_provider() -> Dict[str, Any] | None:
    """Builds the Figma stdio provider when an API key is available."""
    api_key = os.environ.get("FIGMA_API_KEY")
    if not api_key or not api_key.strip():
        return None
    return {
        "transport": "stdio",
        "command": "npx",
        "args": ["-y", FIGMA_MCP_PACKAGE, "--stdio"],
        "env": {"FIGMA_API_KEY": api_key.strip(), "PATH": os.environ.get("PATH", "")},
    }


def _naos_provider() -> Dict[str, Any] | None:
    """Builds the Naos component catalog provider from ``NAOS_MCP_URL``."""
    url = os.environ.get("NAOS_MCP_URL")
    if not url or not url.strip():
        return None
    return {"transport": "http", "url": url.strip()}


_PROVIDER_BUILDERS: Dict[str, Callable[[], Dict[str, Any] | None]] = {
    "figma": _figma_provider,
    "naos": _naos_provider,
}


def providers_from_environment() -> Dict[str, Dict[str, Any]]:
    """Collect provider mappings for every builder whose environment is present."""
    providers: Dict[str, Dict[str, Any]] = {}
    for name, builder in _PROVIDER_BUILDERS.items():
        spec = builder()
        if spec is not None:
            providers[name] = spec
    return providers


@dataclass(slots=True)
class RuntimeSettings:
    """
    Tunable settings for a DesignForge run.

    Attributes:
        model: Chat model identifier passed to ``init_chat_model``.
        model_provider: LangChain provider name for the model.
        base_url: Endpoint of the chat backend (a local server by default).
        api_key: Backend API key; required to start a run.
        max_tokens: Maximum tokens the model may produce per turn.
        temperature: Optional sampling temperature.
        max_turns: Turn budget before the run fails.
        max_tool_result_chars: Per tool result cap.
        max_history_chars: Conversation size cap.
        duplicate_threshold: Repeats before a tool is blocked.
        require_artifacts_for_completion: Ignore completion phrases until a file is written.
        min_coverage: Coverage target stated in the prompts.
        providers: Provider mappings keyed by provider name.
        mock_mode: Use the built-in mock design tools instead of real providers.
    """

    model: str = DEFAULT_MODEL
    model_provider: str = DEFAULT_MODEL_PROVIDER
    base_url: Optional[str] = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: Optional[float] = None
    max_turns: int = 30
    max_tool_result_chars: int = 6000
    max_history_chars: int = 100_000
    duplicate_threshold: int = 2
    require_artifacts_for_completion: bool = False
    min_coverage: int = 80
    providers: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    mock_mode: bool = False

    @classmethod
    def from_environment(cls, base: "RuntimeSettings | None" = None) -> "RuntimeSettings":
        """
        Creates settings with values overridden by environment variables.

        Args:
            base: Settings to start from (for example the result of a config
                file merge). Defaults are used when omitted.
        """
        settings = replace(base) if base is not None else cls()

        settings.model = _str("DESIGNFORGE_MODEL", _str("CLAUDE_MODEL", settings.model)) or settings.model
        settings.model_provider = _str("DESIGNFORGE_MODEL_PROVIDER", settings.model_provider) or settings.model_provider
        settings.base_url = _str("ANTHROPIC_BASE_URL", settings.base_url)
        settings.api_key = _str("ANTHROPIC_API_KEY", settings.api_key)
        settings.max_tokens = _int("DESIGNFORGE_MAX_TOKENS", settings.max_tokens)
        settings.temperature = _float("DESIGNFORGE_TEMPERATURE", settings.temperature)
        settings.max_turns = _int("DESIGNFORGE_MAX_TURNS", settings.max_turns)
        settings.max_tool_result_chars = _int("DESIGNFORGE_MAX_TOOL_RESULT_CHARS", settings.max_tool_result_chars)
        settings.max_history_chars = _int("DESIGNFORGE_MAX_HISTORY_CHARS", settings.max_history_chars)
        settings.duplicate_threshold = _int("DESIGNFORGE_DUPLICATE_THRESHOLD", settings.duplicate_threshold)
        settings.require_artifacts_for_completion = _bool(
            "DESIGNFORGE_REQUIRE_ARTIFACTS", settings.require_artifacts_for_completion
        )
        settings.min_coverage = _int("DESIGNFORGE_MIN_COVERAGE", settings.min_coverage)
        settings.mock_mode = _bool("DESIGNFORGE_MOCK_MODE", settings.mock_mode)

        env_providers = providers_from_environment()
        if env_providers:
            merged = dict(settings.providers)
            merged.update(env_providers)
            settings.providers = merged
        return settings

    def merge_file(self, config: Mapping[str, Any]) -> "RuntimeSettings":
        """
        Returns a copy updated with values from a normalized configuration file.

        Recognised keys: ``agent.model``, ``agent.maxTurns``/``agent.max_turns``,
        ``agent.temperature``, ``agent.baseUrl``/``agent.base_url``,
        ``codegen.minCoverage``/``codegen.min_coverage`` and ``providers``.
        """
        merged = replace(self)
        agent = config.get("agent") or {}
        codegen = config.get("codegen") or {}

        merged.model = agent.get("model", merged.model)
        merged.base_url = agent.get("baseUrl", agent.get("base_url", merged.base_url))
        merged.temperature = agent.get("temperature", merged.temperature)
        merged.max_turns = int(agent.get("maxTurns", agent.get("max_turns", merged.max_turns)))
        merged.max_tokens = int(agent.get("maxTokens", agent.get("max_tokens", merged.max_tokens)))
        merged.min_coverage = int(codegen.get("minCoverage", codegen.get("min_coverage", merged.min_coverage)))

        providers = config.get("providers") or {}
        if isinstance(providers, Mapping):
            merged.providers = {**merged.providers, **{name: dict(spec) for name, spec in providers.items()}}
        else:
            named = {}
            for spec in providers:
                entry = dict(spec)
                named[str(entry.get("name"))] = entry
            merged.providers = {**merged.providers, **named}
        return merged

    def with_overrides(self, **overrides: Any) -> "RuntimeSettings":
        """Returns a copy with every non-None override applied."""
        merged = replace(self)
        for key, value in overrides.items():
            if value is None:
                continue
            if not hasattr(merged, key):
                raise AttributeError(f"RuntimeSettings has no field {key!r}")
            setattr(merged, key, value)
        return merged


def build_job(
    settings: RuntimeSettings,
    *,
    task_ref: str,
    output_path: Path | str,
    verbose: bool = False,
) -> JobDescriptor:
    """
    Freezes settings into the immutable descriptor for one run.

    Providers are omitted entirely in mock mode so the controller falls back
    to the built-in mock design tools.
    """
    providers = [] if settings.mock_mode else parse_provider_configs(settings.providers)
    backend = BackendSelection(
        model=settings.model,
        model_provider=settings.model_provider,
        base_url=settings.base_url,
        api_key=settings.api_key,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
    )
    limits = JobLimits(
        max_turns=settings.max_turns,
        max_tool_result_chars=settings.max_tool_result_chars,
        max_history_chars=settings.max_history_chars,
        duplicate_threshold=settings.duplicate_threshold,
        require_artifacts_for_completion=settings.require_artifacts_for_completion,
    )
    return JobDescriptor(
        task_ref=task_ref,
        output_path=Path(output_path),
        limits=limits,
        backend=backend,
        providers=providers,
        min_coverage=settings.min_coverage,
        verbose=verbose,
    )


def provider_names(settings: RuntimeSettings) -> List[str]:
    return sorted(settings.providers)
