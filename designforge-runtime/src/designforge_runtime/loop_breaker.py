"""
This module detects and breaks tool-call repetition loops.

Small models frequently re-issue a tool call they already made, echoing the
pattern from their own history rather than reading the result. The
``LoopBreaker`` keeps a per-run cache keyed by tool name plus canonical JSON
of the arguments (object keys sorted, so reordered arguments still match).

Per tool name the state machine is ``fresh -> (duplicate)* -> blocked``:

- a new key is invoked, capped and cached, and resets that tool's counter;
- a repeated key is not invoked again: the counter goes up and the model gets
  a directive plus a short excerpt of the cached result instead;
- when the counter reaches the threshold the tool is blocked for the rest of
  the run and disappears from every tool schema offered afterwards.

If a model still requests nothing but blocked tools, the controller asks for
``escalation_turns``: a synthetic reply declaring the phase done and a
synthetic instruction naming the tools to use next.
"""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from designforge_contracts import ToolDescriptor

from .backend import ToolRequest
from .budget import cap_tool_result
from .conversation import Turn
from .prompts.guidance import build_duplicate_directive, build_escalation_redirect, build_escalation_reply

LOGGER = logging.getLogger(__name__)

Invoker = Callable[[str, Dict[str, Any]], Awaitable[str]]


def call_key(name: str, arguments: Mapping[str, Any]) -> str:
    """Cache key for one call: the tool name plus canonical JSON arguments."""
    canonical = json.dumps(arguments, sort_keys=True, separators=(",", ":"), default=str)
    return f"{name}:{canonical}"


@dataclass(frozen=True, slots=True)
class ResolvedCall:
    request: ToolRequest
    content: str
    duplicate: bool


class LoopBreaker:
    def __init__(self, threshold: int = 2) -> None:
        self.threshold = threshold
        self._cache: Dict[str, str] = {}
        self._consecutive: Dict[str, int] = {}
        self._blocked: Set[str] = set()
        self._called: Set[str] = set()
        self.invocations = 0

    @property
    def blocked(self) -> FrozenSet[str]:
        return frozenset(self._blocked)

    @property
    def called_tools(self) -> FrozenSet[str]:
        return frozenset(self._called)

    def is_blocked(self, name: str) -> bool:
        return name in self._blocked

    def all_blocked(self, requests: Sequence[ToolRequest]) -> bool:
        return bool(requests) and all(request.name in self._blocked for request in requests)

    def filter_tools(self, tools: Iterable[ToolDescriptor]) -> List[ToolDescriptor]:
        return [tool for tool in tools if tool.name not in self._blocked]

    def consecutive_duplicates(self, name: str) -> int:
        return self._consecutive.get(name, 0)

    def first_cached_result(self) -> Optional[str]:
        return next(iter(self._cache.values()), None)

    async def resolve(self, requests: Sequence[ToolRequest], invoke: Invoker, cap: int) -> List[ResolvedCall]:
        """
        Resolve one turn of tool requests, in request order.

        Fresh calls are invoked concurrently and every result is collected
        before this returns. A request repeating an earlier key, including an
        earlier request of the same turn, is answered from the cache.
        """
        keys = [call_key(request.name, request.args) for request in requests]
        fresh: Dict[str, ToolRequest] = {}
        for key, request in zip(keys, requests):
            if key not in self._cache and key not in fresh:
                fresh[key] = request

        async def _run(request: ToolRequest) -> str:
            self.invocations += 1
            LOGGER.debug("Invoking %s with %s", request.name, request.args)
            return cap_tool_result(await invoke(request.name, dict(request.args)), cap)

        outcomes = await asyncio.gather(*(_run(request) for request in fresh.values()))
        fresh_results = dict(zip(fresh.keys(), outcomes))

        resolved: List[ResolvedCall] = []
        for key, request in zip(keys, requests):
            self._called.add(request.name)
            if key in fresh_results:
                self._cache[key] = fresh_results.pop(key)
                self._consecutive[request.name] = 0
                resolved.append(ResolvedCall(request, self._cache[key], duplicate=False))
                continue
            resolved.append(ResolvedCall(request, self._duplicate(request, key, cap), duplicate=True))
        return resolved

    def _duplicate(self, request: ToolRequest, key: str, cap: int) -> str:
        count = self._consecutive.get(request.name, 0) + 1
        self._consecutive[request.name] = count
        LOGGER.info("Duplicate tool call detected: %s (%dx, returning cached)", request.name, count)
        if count >= self.threshold and request.name not in self._blocked:
            self._blocked.add(request.name)
            LOGGER.warning(
                "Blocking %s after %d consecutive duplicate calls", request.name, count
            )
        return cap_tool_result(build_duplicate_directive(request.name, self._cache[key]), cap)

    def escalation_turns(
        self,
        requests: Sequence[ToolRequest],
        available: Sequence[ToolDescriptor],
    ) -> Tuple[Turn, Turn]:
        """
        Build the synthetic reply and redirect used when every request is blocked.

        Alternates are unblocked tools not called yet, falling back to any
        unblocked tool.
        """
        blocked_requested = sorted({request.name for request in requests})
        unblocked = [tool.name for tool in self.filter_tools(available)]
        alternates = [name for name in unblocked if name not in self._called] or unblocked
        LOGGER.warning(
            "Model stuck requesting blocked tools %s; rewriting conversation toward %s",
            blocked_requested,
            alternates or "code generation",
        )
        reply = Turn.reply(build_escalation_reply(blocked_requested))
        redirect = Turn.task(build_escalation_redirect(blocked_requested, alternates, self.first_cached_result()))
        return reply, redirect
