"""
This module provides the tool bridge: one uniform surface over every
configured tool provider.

At session start the bridge connects each provider in turn and asks it for its
tools, building a single name-to-provider index. Any provider that cannot be
reached aborts the run; there is no partial bridge. Afterwards, invocations are
routed by tool name. Unknown tools, provider-reported errors and exceptions
raised by a provider are all turned into a JSON error payload instead of
propagating, so the controller can feed the failure back to the model as
corrective context. There is no retry.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Sequence

import httpx

from designforge_contracts import HttpProviderConfig, StdioProviderConfig, ToolDescriptor

from ..errors import ProviderConnectionError
from .mcp_provider import McpToolProvider
from .provider import ToolProvider

LOGGER = logging.getLogger(__name__)


def error_payload(message: str) -> str:
    return json.dumps({"error": True, "message": message})


def is_error_payload(text: str) -> bool:
    """Return True when ``text`` is the JSON error payload produced by the bridge."""
    stripped = text.lstrip()
    if not stripped.startswith("{"):
        return False
    try:
        data = json.loads(stripped)
    except ValueError:
        return False
    return isinstance(data, dict) and data.get("error") is True


def _describe_exception(exc: BaseException) -> str:
    if isinstance(exc, BaseExceptionGroup):
        parts = [_describe_exception(inner) for inner in exc.exceptions[:3]]
        extra = ""
        if len(exc.exceptions) > 3:
            extra = f" (+{len(exc.exceptions) - 3} more)"
        return f"{exc.__class__.__name__}: [{'; '.join(parts)}]{extra}"
    if isinstance(exc, httpx.HTTPError):
        try:
            url = exc.request.url
        except RuntimeError:
            url = None
        if url:
            return f"{exc.__class__.__name__} while calling {url}"
    message = str(exc)
    return message or exc.__class__.__name__


class ToolBridge:
    """
    Routes tool invocations to the provider that owns each tool.

    Args:
        providers: Providers in priority order. When two providers expose a
            tool with the same name, the first one wins.
    """

    def __init__(self, providers: Sequence[ToolProvider]) -> None:
        self._providers: List[ToolProvider] = list(providers)
        self._tools: List[ToolDescriptor] = []
        self._owners: Dict[str, ToolProvider] = {}
        self._connected = False

    @classmethod
    def from_configs(cls, configs: Iterable[StdioProviderConfig | HttpProviderConfig]) -> "ToolBridge":
        return cls([McpToolProvider(config) for config in configs])

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def provider_names(self) -> List[str]:
        return [provider.name for provider in self._providers]

    async def connect(self) -> None:
        """
        Connect every provider and index its tools.

        Raises:
            ProviderConnectionError: If any provider fails to connect or list
                its tools. Providers already connected are closed first.
        """
        for provider in self._providers:
            try:
                await provider.connect()
                descriptors = await provider.discover()
            except Exception as exc:
                await self.disconnect()
                raise ProviderConnectionError(provider.name, _describe_exception(exc)) from exc

            for descriptor in descriptors:
                if descriptor.name in self._owners:
                    LOGGER.warning(
                        "Tool %s from %s shadowed by provider %s; keeping the first.",
                        descriptor.name,
                        provider.name,
                        self._owners[descriptor.name].name,
                    )
                    continue
                self._owners[descriptor.name] = provider
                self._tools.append(descriptor)
            LOGGER.info("Connected to %s: %d tool(s)", provider.name, len(descriptors))
        self._connected = True

    def list_tools(self) -> List[ToolDescriptor]:
        return list(self._tools)

    def has_tool(self, name: str) -> bool:
        return name in self._owners

    def provider_for(self, name: str) -> str | None:
        owner = self._owners.get(name)
        return owner.name if owner is not None else None

    async def invoke(self, name: str, arguments: Mapping[str, Any] | None = None) -> str:
        """
        Invoke a tool by name and return its text result.

        Returns a JSON error payload instead of raising when the tool is
        unknown, when the provider reports an error, or when the call fails.
        """
        provider = self._owners.get(name)
        if provider is None:
            available = ", ".join(descriptor.name for descriptor in self._tools)
            return error_payload(f'Unknown tool: "{name}". Available: {available}')

        try:
            outcome = await provider.invoke(name, dict(arguments or {}))
        except Exception as exc:
            LOGGER.warning("Tool %s on %s failed: %s", name, provider.name, _describe_exception(exc))
            return error_payload(_describe_exception(exc))

        if outcome.is_error:
            return error_payload(outcome.text)
        return outcome.text

    async def disconnect(self) -> None:
        """Close every provider concurrently, ignoring individual close failures."""
        results = await asyncio.gather(
            *(provider.close() for provider in self._providers),
            return_exceptions=True,
        )
        for provider, result in zip(self._providers, results):
            if isinstance(result, BaseException):
                LOGGER.debug("Ignoring close failure for %s: %s", provider.name, _describe_exception(result))
        self._owners.clear()
        self._tools.clear()
        self._connected = False
