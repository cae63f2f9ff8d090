"""
This module defines the configuration contracts for the external tool providers
that DesignForge talks to over the Model Context Protocol (MCP).

Two transport shapes are supported: a local process speaking MCP over stdio
(for example the Figma developer server launched through ``npx``) and a remote
server reachable over streamable HTTP (for example the Naos component catalog).
Both are expressed as Pydantic models sharing a ``transport`` tag, and the
``ProviderConfig`` annotated union resolves the variant once, at parse time.
Downstream code never branches on the transport again: each variant knows how
to render the connection mapping consumed by ``langchain_mcp_adapters`` and how
to describe itself for logs with secrets masked.
"""
from __future__ import annotations

from typing import Annotated, Any, Dict, Iterable, List, Literal, Mapping, Optional, Union
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def _sanitize_url(value: str) -> str:
    try:
        result = urlsplit(value)
    except ValueError:
        return value
    if result.username or result.password:
        hostname = result.hostname or ""
        netloc = hostname
        if result.port:
            netloc = f"{hostname}:{result.port}"
        return urlunsplit((result.scheme, netloc, result.path, result.query, result.fragment))
    return value


def _mask_values(values: Optional[Mapping[str, str]]) -> Optional[Dict[str, str]]:
    if values is None:
        return None
    return {key: ("***" if value else value) for key, value in values.items()}


class _ProviderBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., description="Provider identity used to group its tools.")
    enabled: bool = Field(default=True, description="Disabled providers are dropped at parse time.")

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("provider name must be a non-empty string")
        return value.strip()


class StdioProviderConfig(_ProviderBase):
    """A provider launched as a child process that speaks MCP over stdin/stdout."""

    transport: Literal["stdio"] = "stdio"
    command: str
    args: List[str] = Field(default_factory=list)
    env: Optional[Dict[str, str]] = None
    cwd: Optional[str] = None

    def to_connection(self) -> Dict[str, Any]:
        connection: Dict[str, Any] = {
            "transport": "stdio",
            "command": self.command,
            "args": list(self.args),
        }
        if self.env is not None:
            connection["env"] = dict(self.env)
        if self.cwd is not None:
            connection["cwd"] = self.cwd
        return connection

    def describe(self) -> Dict[str, Any]:
        summary: Dict[str, Any] = {"transport": self.transport, "command": self.command}
        if self.args:
            summary["args"] = list(self.args)
        if self.env is not None:
            summary["env"] = _mask_values(self.env)
        return summary


class HttpProviderConfig(_ProviderBase):
    """A remote provider reachable over MCP streamable HTTP."""

    transport: Literal["http"] = "http"
    url: str
    headers: Optional[Dict[str, str]] = None

    @field_validator("url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            raise ValueError(f"provider url must be an http(s) URL, got {value!r}")
        return value

    def to_connection(self) -> Dict[str, Any]:
        connection: Dict[str, Any] = {"transport": "streamable_http", "url": self.url}
        if self.headers:
            connection["headers"] = dict(self.headers)
        return connection

    def describe(self) -> Dict[str, Any]:
        summary: Dict[str, Any] = {"transport": self.transport, "url": _sanitize_url(self.url)}
        if self.headers:
            summary["headers"] = _mask_values(self.headers)
        return summary


ProviderConfig = Annotated[
    Union[StdioProviderConfig, HttpProviderConfig],
    Field(discriminator="transport"),
]

LEGACY_SERVER_RUNTIME = "node"

_PROVIDER_ADAPTER: TypeAdapter[Any] = TypeAdapter(ProviderConfig)


def parse_provider_config(payload: Mapping[str, Any]) -> StdioProviderConfig | HttpProviderConfig:
    """
    Validate one provider mapping, inferring the transport tag when omitted.

    A legacy ``path`` entry (a local server script) becomes a stdio provider
    running ``node <path>``.
    """

    data = dict(payload)
    path = data.pop("path", None)
    if path is not None and "command" not in data and "url" not in data:
        data["command"] = LEGACY_SERVER_RUNTIME
        data["args"] = [str(path), *data.get("args", [])]
    elif path is not None:
        raise ValueError(f"provider {data.get('name')!r} sets path together with command or url")
    if "transport" not in data:
        data["transport"] = "http" if "url" in data else "stdio"
    elif data["transport"] in {"streamable_http", "streamable-http"}:
        data["transport"] = "http"
    return _PROVIDER_ADAPTER.validate_python(data)


def parse_provider_configs(
    payload: Iterable[Mapping[str, Any]] | Mapping[str, Mapping[str, Any]] | None,
) -> List[StdioProviderConfig | HttpProviderConfig]:
    """
    Validate a collection of provider mappings.

    Accepts either a list of mappings (each carrying its own ``name``) or a
    mapping of name to provider settings. Providers marked ``enabled: false``
    are dropped from the result.
    """

    if not payload:
        return []
    items: List[Dict[str, Any]] = []
    if isinstance(payload, Mapping):
        for name, settings in payload.items():
            entry = dict(settings)
            entry.setdefault("name", name)
            items.append(entry)
    else:
        items = [dict(entry) for entry in payload]

    configs = [parse_provider_config(item) for item in items]
    return [config for config in configs if config.enabled]


class ToolDescriptor(BaseModel):
    """
    An immutable description of one tool discovered from a provider.

    Attributes:
        name: Tool name, unique within a bridge session.
        description: Human-readable description shown to the model.
        input_schema: JSON schema object describing the tool arguments.
        provider: Name of the provider that owns the tool.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    input_schema: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})
    provider: str

    @field_validator("input_schema", mode="before")
    @classmethod
    def _normalize_schema(cls, value: Any) -> Dict[str, Any]:
        schema = dict(value or {})
        normalized: Dict[str, Any] = {
            "type": "object",
            "properties": dict(schema.get("properties") or {}),
        }
        required = schema.get("required")
        if required:
            normalized["required"] = list(required)
        return normalized

    def to_tool_schema(self) -> Dict[str, Any]:
        """Render the function schema offered to the chat model."""

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description or f"Tool from {self.provider}",
                "parameters": dict(self.input_schema),
            },
        }
