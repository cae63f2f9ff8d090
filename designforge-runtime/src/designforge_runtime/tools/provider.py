"""
The capability interface every tool provider implements.

The bridge, the loop-breaker and the controller only ever speak to providers
through this protocol, so they stay agnostic of the transport underneath.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Protocol

from designforge_contracts import ToolDescriptor


@dataclass(frozen=True, slots=True)
class ToolOutcome:
    """Normalized result of one provider call: joined text plus the provider's error flag."""

    text: str
    is_error: bool = False


class ToolProvider(Protocol):
    name: str

    async def connect(self) -> None:
        ...

    async def discover(self) -> List[ToolDescriptor]:
        ...

    async def invoke(self, tool_name: str, arguments: Mapping[str, Any]) -> ToolOutcome:
        ...

    async def close(self) -> None:
        ...
