"""
This module models the conversation as an invariant-checked, append-only log.

Each ``Turn`` belongs to one role (the task originator or the responding model)
and carries one kind of payload: free text, a batch of tool-call requests, or
the batch of tool results answering them. ``Conversation`` enforces the
structure every chat backend expects:

- the first turn comes from the originator;
- roles strictly alternate after it;
- a tool-results turn immediately follows the tool-requests turn it answers
  and covers exactly the same call ids;
- the only removal is ``drop_after_first``, which removes an even number of
  turns right after the first one, so request/result pairs leave together.

Violations raise ``ConversationInvariantError`` instead of producing a
history the backend would reject mid-run.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Sequence, Tuple

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage

from .errors import ConversationInvariantError


class Role(str, Enum):
    ORIGINATOR = "originator"
    RESPONDER = "responder"


class TurnKind(str, Enum):
    TEXT = "text"
    TOOL_REQUESTS = "tool_requests"
    TOOL_RESULTS = "tool_results"


def _content_size(content: Any) -> int:
    if isinstance(content, str):
        return len(content)
    if isinstance(content, list):
        total = 0
        for block in content:
            if isinstance(block, str):
                total += len(block)
            elif isinstance(block, dict) and isinstance(block.get("text"), str):
                total += len(block["text"])
            else:
                total += len(json.dumps(block, default=str))
        return total
    return len(json.dumps(content, default=str))


def _has_tool_use_blocks(content: Any) -> bool:
    return isinstance(content, list) and any(
        isinstance(block, dict) and block.get("type") == "tool_use" for block in content
    )


def message_size(message: BaseMessage) -> int:
    """
    Approximate size of one message in characters.

    Tool calls are counted once: from the content blocks when the provider
    mirrors them there as ``tool_use`` blocks, otherwise from ``tool_calls``.
    """
    size = _content_size(message.content)
    if isinstance(message, AIMessage) and message.tool_calls and not _has_tool_use_blocks(message.content):
        size += len(json.dumps(message.tool_calls, default=str))
    return size


@dataclass(frozen=True)
class Turn:
    role: Role
    kind: TurnKind
    messages: Tuple[BaseMessage, ...]

    @classmethod
    def task(cls, text: str) -> "Turn":
        return cls(Role.ORIGINATOR, TurnKind.TEXT, (HumanMessage(content=text),))

    @classmethod
    def reply(cls, message: AIMessage | str) -> "Turn":
        if isinstance(message, str):
            message = AIMessage(content=message)
        return cls(Role.RESPONDER, TurnKind.TEXT, (message,))

    @classmethod
    def tool_requests(cls, message: AIMessage) -> "Turn":
        if not message.tool_calls:
            raise ConversationInvariantError("tool-requests turn needs at least one tool call")
        return cls(Role.RESPONDER, TurnKind.TOOL_REQUESTS, (message,))

    @classmethod
    def tool_results(cls, results: Sequence[ToolMessage]) -> "Turn":
        if not results:
            raise ConversationInvariantError("tool-results turn needs at least one result")
        return cls(Role.ORIGINATOR, TurnKind.TOOL_RESULTS, tuple(results))

    @property
    def call_ids(self) -> List[str]:
        if self.kind is TurnKind.TOOL_REQUESTS:
            message = self.messages[0]
            return [str(call["id"]) for call in getattr(message, "tool_calls", [])]
        if self.kind is TurnKind.TOOL_RESULTS:
            return [str(getattr(message, "tool_call_id", "")) for message in self.messages]
        return []

    @property
    def size(self) -> int:
        return sum(message_size(message) for message in self.messages)


class Conversation:
    """An append-only turn log that checks alternation and tool-call pairing."""

    def __init__(self, first: Turn) -> None:
        if first.role is not Role.ORIGINATOR or first.kind is not TurnKind.TEXT:
            raise ConversationInvariantError("the first turn must be the originator's task text")
        self._turns: List[Turn] = [first]

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self):
        return iter(self._turns)

    @property
    def turns(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def first(self) -> Turn:
        return self._turns[0]

    @property
    def last(self) -> Turn:
        return self._turns[-1]

    def append(self, turn: Turn) -> None:
        previous = self._turns[-1]
        if turn.role is previous.role:
            raise ConversationInvariantError(
                f"roles must alternate; got two consecutive {turn.role.value} turns"
            )
        if previous.kind is TurnKind.TOOL_REQUESTS:
            if turn.kind is not TurnKind.TOOL_RESULTS:
                raise ConversationInvariantError("tool requests must be answered by a tool-results turn")
            if sorted(turn.call_ids) != sorted(previous.call_ids):
                raise ConversationInvariantError(
                    f"tool results {turn.call_ids} do not answer requests {previous.call_ids}"
                )
        elif turn.kind is TurnKind.TOOL_RESULTS:
            raise ConversationInvariantError("tool results must immediately follow a tool-requests turn")
        self._turns.append(turn)

    def extend(self, turns: Iterable[Turn]) -> None:
        for turn in turns:
            self.append(turn)

    def drop_after_first(self, count: int) -> None:
        """Remove ``count`` turns immediately after the first one."""
        if count == 0:
            return
        if count < 0 or count % 2:
            raise ConversationInvariantError(f"can only drop an even, positive number of turns, got {count}")
        if count >= len(self._turns) - 1:
            raise ConversationInvariantError("cannot drop every turn after the first")
        following = self._turns[count + 1]
        if following.kind is TurnKind.TOOL_RESULTS:
            raise ConversationInvariantError("drop would orphan a tool-results turn")
        del self._turns[1:count + 1]

    def total_size(self) -> int:
        return sum(turn.size for turn in self._turns)

    def to_messages(self) -> List[BaseMessage]:
        messages: List[BaseMessage] = []
        for turn in self._turns:
            messages.extend(turn.messages)
        return messages
