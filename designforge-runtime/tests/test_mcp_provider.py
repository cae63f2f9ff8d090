from __future__ import annotations

from contextlib import asynccontextmanager
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from designforge_contracts import HttpProviderConfig, StdioProviderConfig
from designforge_runtime.tools import McpToolProvider, ToolBridge, join_text_content
from designforge_runtime.errors import ProviderConnectionError


def _text(value: str) -> SimpleNamespace:
    return SimpleNamespace(type="text", text=value)


class _FakeSession:
    def __init__(self) -> None:
        self.calls: List[tuple[str, Dict[str, Any]]] = []

    async def list_tools(self) -> SimpleNamespace:
        return SimpleNamespace(
            tools=[
                SimpleNamespace(
                    name="get_figma_data",
                    description="Fetch layout data",
                    inputSchema={"type": "object", "properties": {"fileKey": {"type": "string"}}, "required": ["fileKey"]},
                ),
                SimpleNamespace(name="download_figma_images", description=None, inputSchema=None),
            ]
        )

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> SimpleNamespace:
        self.calls.append((name, arguments))
        if name == "download_figma_images":
            return SimpleNamespace(content=[_text("quota exceeded")], isError=True)
        return SimpleNamespace(content=[_text("part one"), SimpleNamespace(type="image", data="..."), _text("part two")], isError=False)


class _FakeClient:
    def __init__(self, *, fail: Exception | None = None) -> None:
        self.session_obj = _FakeSession()
        self.fail = fail
        self.opened: List[str] = []
        self.exited = False

    @asynccontextmanager
    async def session(self, name: str):
        self.opened.append(name)
        if self.fail is not None:
            raise self.fail
        try:
            yield self.session_obj
        finally:
            self.exited = True


def _stdio_config() -> StdioProviderConfig:
    return StdioProviderConfig(name="figma", command="npx", args=["-y", "figma-developer-mcp", "--stdio"])


def test_join_text_content_skips_non_text_items() -> None:
    content = [_text("a"), SimpleNamespace(type="resource", text="ignored"), _text("b")]

    assert join_text_content(content) == "a\nb"
    assert join_text_content(None) == ""


@pytest.mark.anyio
async def test_discover_and_invoke_through_session() -> None:
    client = _FakeClient()
    provider = McpToolProvider(_stdio_config(), client=client)

    await provider.connect()
    tools = await provider.discover()
    outcome = await provider.invoke("get_figma_data", {"fileKey": "AbC"})
    failed = await provider.invoke("download_figma_images", {})
    await provider.close()

    assert client.opened == ["figma"]
    assert [tool.name for tool in tools] == ["get_figma_data", "download_figma_images"]
    assert tools[0].input_schema["required"] == ["fileKey"]
    assert tools[1].input_schema == {"type": "object", "properties": {}}
    assert all(tool.provider == "figma" for tool in tools)
    assert outcome.text == "part one\npart two"
    assert outcome.is_error is False
    assert failed.is_error is True
    assert client.exited


@pytest.mark.anyio
async def test_invoke_before_connect_fails() -> None:
    provider = McpToolProvider(_stdio_config(), client=_FakeClient())

    with pytest.raises(RuntimeError, match="not connected"):
        await provider.invoke("get_figma_data", {})


@pytest.mark.anyio
async def test_session_failure_surfaces_through_bridge() -> None:
    config = HttpProviderConfig(name="naos", url="https://naos.example/mcp")
    provider = McpToolProvider(config, client=_FakeClient(fail=ConnectionRefusedError("refused")))
    bridge = ToolBridge([provider])

    with pytest.raises(ProviderConnectionError, match="MCP server naos connection failed: refused"):
        await bridge.connect()


@pytest.mark.anyio
async def test_close_without_connect_is_noop() -> None:
    provider = McpToolProvider(_stdio_config(), client=_FakeClient())

    await provider.close()


@pytest.mark.anyio
async def test_provider_reconnects_after_close() -> None:
    client = _FakeClient()
    provider = McpToolProvider(_stdio_config(), client=client)

    await provider.connect()
    await provider.close()
    await provider.connect()
    tools = await provider.discover()
    await provider.close()

    assert client.opened == ["figma", "figma"]
    assert [tool.name for tool in tools] == ["get_figma_data", "download_figma_images"]
