"""
This module implements the MCP-backed tool provider.

Each ``McpToolProvider`` wraps exactly one MCP server session opened through
``langchain_mcp_adapters``. The session is entered and exited by a dedicated
owner task: the transports used underneath (stdio child processes, streamable
HTTP streams) hold anyio task groups that must be closed from the task that
opened them, while the bridge closes providers concurrently from other tasks.
The owner task therefore parks on a ``closing`` event until ``close()`` is
called, and ``connect()`` waits for either the session to be ready or the
owner task to fail.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Mapping, Optional

from langchain_mcp_adapters.client import MultiServerMCPClient
from mcp import ClientSession

from designforge_contracts import HttpProviderConfig, StdioProviderConfig, ToolDescriptor

from .provider import ToolOutcome

LOGGER = logging.getLogger(__name__)


def join_text_content(content: Any) -> str:
    """Concatenate every text segment of an MCP result with newlines."""
    parts: List[str] = []
    for item in content or []:
        text = getattr(item, "text", None)
        if getattr(item, "type", None) == "text" and isinstance(text, str):
            parts.append(text)
    return "\n".join(parts)


class McpToolProvider:
    """A tool provider speaking MCP to one configured server."""

    def __init__(
        self,
        config: StdioProviderConfig | HttpProviderConfig,
        *,
        client: Optional[MultiServerMCPClient] = None,
    ) -> None:
        self.name = config.name
        self.config = config
        self._client = client or MultiServerMCPClient({config.name: config.to_connection()})
        self._session: Optional[ClientSession] = None
        self._owner: Optional[asyncio.Task[None]] = None
        self._ready = asyncio.Event()
        self._closing = asyncio.Event()

    async def _hold_session(self) -> None:
        async with self._client.session(self.name) as session:
            self._session = session
            self._ready.set()
            try:
                await self._closing.wait()
            finally:
                self._session = None

    async def connect(self) -> None:
        if self._owner is not None:
            return
        LOGGER.info("Connecting to MCP server %s: %s", self.name, self.config.describe())
        self._ready = asyncio.Event()
        self._closing = asyncio.Event()
        self._owner = asyncio.create_task(self._hold_session(), name=f"mcp-session-{self.name}")
        ready = asyncio.create_task(self._ready.wait())
        done, _ = await asyncio.wait({self._owner, ready}, return_when=asyncio.FIRST_COMPLETED)
        if self._owner in done:
            ready.cancel()
            owner = self._owner
            self._owner = None
            owner.result()
            raise RuntimeError(f"session for {self.name} closed before it became ready")

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError(f"MCP server {self.name} is not connected")
        return self._session

    async def discover(self) -> List[ToolDescriptor]:
        session = self._require_session()
        result = await session.list_tools()
        return [
            ToolDescriptor(
                name=tool.name,
                description=tool.description or "",
                input_schema=tool.inputSchema or {},
                provider=self.name,
            )
            for tool in result.tools
        ]

    async def invoke(self, tool_name: str, arguments: Mapping[str, Any]) -> ToolOutcome:
        session = self._require_session()
        result = await session.call_tool(tool_name, dict(arguments))
        return ToolOutcome(text=join_text_content(result.content), is_error=bool(result.isError))

    async def close(self) -> None:
        owner = self._owner
        if owner is None:
            return
        self._closing.set()
        self._owner = None
        await owner
