"""
This module adapts a LangChain chat model to the controller's backend contract.

The controller only needs one operation per turn: send the system prompt and
the conversation, optionally with a tool schema, and get back the assistant
message split into its text segments and tool-call requests. Whether a tool
schema is passed at all is decided by the session mode; in prefetched mode
nothing is bound and the model has no tool-calling mechanism available.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from langchain.chat_models import init_chat_model
from langchain_core.messages import AIMessage, BaseMessage, SystemMessage

from designforge_contracts import BackendSelection

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolRequest:
    """One tool call requested by the model."""

    id: str
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class BackendReply:
    message: AIMessage
    text_segments: List[str]
    tool_requests: List[ToolRequest]

    @property
    def text(self) -> str:
        return "\n".join(self.text_segments)


class ChatBackend(Protocol):
    async def send(
        self,
        system_prompt: str,
        messages: Sequence[BaseMessage],
        tools: Optional[Sequence[Dict[str, Any]]] = None,
    ) -> BackendReply:
        ...


def text_segments_of(message: AIMessage) -> List[str]:
    """Return the text blocks of an assistant message in order."""
    content = message.content
    if isinstance(content, str):
        return [content] if content else []
    segments: List[str] = []
    for block in content:
        if isinstance(block, str):
            if block:
                segments.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            text = block.get("text") or ""
            if text:
                segments.append(text)
    return segments


def split_reply(message: AIMessage) -> BackendReply:
    calls = list(message.tool_calls or [])
    if any(not call.get("id") for call in calls):
        # Some local servers omit call ids; results must still be matched to requests.
        calls = [{**call, "id": call.get("id") or f"call_{index}"} for index, call in enumerate(calls)]
        message = message.model_copy(update={"tool_calls": calls})
    requests = [
        ToolRequest(id=str(call["id"]), name=call["name"], args=dict(call.get("args") or {}))
        for call in calls
    ]
    return BackendReply(message=message, text_segments=text_segments_of(message), tool_requests=requests)


class LangChainBackend:
    """
    A ``ChatBackend`` over any model ``init_chat_model`` can build.

    The default selection talks to an Anthropic-compatible endpoint at a local
    base URL, which is how LM Studio and similar servers expose local models.
    """

    def __init__(self, selection: BackendSelection) -> None:
        if selection.api_key is None or not selection.api_key.get_secret_value():
            raise ValueError("API key is required")
        self.selection = selection
        kwargs: Dict[str, Any] = {
            "model_provider": selection.model_provider,
            "api_key": selection.api_key.get_secret_value(),
            "max_tokens": selection.max_tokens,
        }
        if selection.base_url:
            kwargs["base_url"] = selection.base_url
        if selection.temperature is not None:
            kwargs["temperature"] = selection.temperature
        self._llm = init_chat_model(selection.model, **kwargs)

    async def send(
        self,
        system_prompt: str,
        messages: Sequence[BaseMessage],
        tools: Optional[Sequence[Dict[str, Any]]] = None,
    ) -> BackendReply:
        llm = self._llm.bind_tools(list(tools)) if tools else self._llm
        payload: List[BaseMessage] = [SystemMessage(content=system_prompt), *messages]
        response = await llm.ainvoke(payload)
        if not isinstance(response, AIMessage):
            response = AIMessage(content=getattr(response, "content", str(response)))
        return split_reply(response)
