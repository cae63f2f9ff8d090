"""Pytest configuration for shared fixtures."""

from __future__ import annotations

import itertools
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pytest
from dotenv import load_dotenv
from langchain_core.messages import AIMessage, BaseMessage

from designforge_contracts import JobDescriptor, JobLimits, ToolDescriptor
from designforge_runtime.backend import BackendReply, split_reply
from designforge_runtime.tools.provider import ToolOutcome


def _load_env_files(paths: Iterable[Path]) -> None:
    """Load local dotenv files without overriding any pre-set environment vars."""
    for env_path in paths:
        if env_path.exists():
            load_dotenv(env_path, override=False)


_REPO_ROOT = Path(__file__).resolve().parent.parent
_load_env_files((_REPO_ROOT / ".env",))

_CALL_IDS = itertools.count(1)

ToolCallSpec = Tuple[str, Dict[str, Any]]
ReplySpec = Union[AIMessage, str, Tuple[str, Sequence[ToolCallSpec]]]


def make_ai_message(text: str = "", calls: Sequence[ToolCallSpec] = ()) -> AIMessage:
    """Build an assistant message with optional tool calls carrying unique ids."""
    tool_calls = [
        {"name": name, "args": dict(args), "id": f"toolu_{next(_CALL_IDS)}", "type": "tool_call"}
        for name, args in calls
    ]
    return AIMessage(content=text, tool_calls=tool_calls)


class _StubChatModel:
    """Minimal chat model stub that mirrors LangChain's async invoke contract."""

    def __init__(self, model_name: str, **kwargs: Any):
        self.model_name = model_name
        self.kwargs = kwargs
        self.bound_tools: Optional[List[Dict[str, Any]]] = None

    def bind_tools(self, tools: Sequence[Dict[str, Any]], **_: Any) -> "_StubChatModel":
        bound = _StubChatModel(self.model_name, **self.kwargs)
        bound.bound_tools = list(tools)
        return bound

    async def ainvoke(self, messages: Sequence[BaseMessage], *_: Any, **__: Any) -> AIMessage:
        return AIMessage(content=f"[stub:{self.model_name}] {len(messages)} messages")


@pytest.fixture(autouse=True)
def stub_langchain_chat_models(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Prevent external LLM calls during tests by stubbing LangChain's chat model factory.
    """

    def _factory(model_name: str, *_: Any, **kwargs: Any) -> _StubChatModel:
        return _StubChatModel(model_name, **kwargs)

    monkeypatch.setattr("designforge_runtime.backend.init_chat_model", _factory, raising=True)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class ScriptedBackend:
    """A chat backend replaying canned replies; the last reply repeats once the script runs out."""

    def __init__(self, replies: Sequence[ReplySpec]):
        self._replies = [self._to_message(reply) for reply in replies]
        self.calls: List[Dict[str, Any]] = []

    @staticmethod
    def _to_message(reply: ReplySpec) -> AIMessage:
        if isinstance(reply, AIMessage):
            return reply
        if isinstance(reply, str):
            return make_ai_message(reply)
        text, calls = reply
        return make_ai_message(text, calls)

    async def send(
        self,
        system_prompt: str,
        messages: Sequence[BaseMessage],
        tools: Optional[Sequence[Dict[str, Any]]] = None,
    ) -> BackendReply:
        index = min(len(self.calls), len(self._replies) - 1)
        self.calls.append(
            {"system_prompt": system_prompt, "messages": list(messages), "tools": None if tools is None else list(tools)}
        )
        message = self._replies[index]
        if message.tool_calls:
            # Fresh ids per turn, as a real model would produce.
            message = make_ai_message(
                message.content if isinstance(message.content, str) else "",
                [(call["name"], call["args"]) for call in message.tool_calls],
            )
        return split_reply(message)

    def offered_tool_names(self, call_index: int) -> Optional[List[str]]:
        tools = self.calls[call_index]["tools"]
        if tools is None:
            return None
        return [tool["function"]["name"] for tool in tools]


ToolResponse = Union[str, ToolOutcome, Exception, Callable[[Dict[str, Any]], str]]


class FakeToolProvider:
    """An in-memory tool provider that records every invocation."""

    def __init__(
        self,
        name: str,
        responses: Mapping[str, ToolResponse],
        *,
        connect_error: Optional[Exception] = None,
        close_error: Optional[Exception] = None,
    ):
        self.name = name
        self._responses = dict(responses)
        self._connect_error = connect_error
        self._close_error = close_error
        self.invocations: List[Tuple[str, Dict[str, Any]]] = []
        self.connected = False
        self.closed = False

    async def connect(self) -> None:
        if self._connect_error is not None:
            raise self._connect_error
        self.connected = True

    async def discover(self) -> List[ToolDescriptor]:
        return [
            ToolDescriptor(name=tool, description=f"{tool} from {self.name}", provider=self.name)
            for tool in self._responses
        ]

    async def invoke(self, tool_name: str, arguments: Mapping[str, Any]) -> ToolOutcome:
        self.invocations.append((tool_name, dict(arguments)))
        response = self._responses[tool_name]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, ToolOutcome):
            return response
        if callable(response):
            return ToolOutcome(response(dict(arguments)))
        return ToolOutcome(response)

    async def close(self) -> None:
        self.closed = True
        if self._close_error is not None:
            raise self._close_error


@pytest.fixture
def scripted_backend() -> Callable[..., ScriptedBackend]:
    def _factory(*replies: ReplySpec) -> ScriptedBackend:
        return ScriptedBackend(replies)

    return _factory


@pytest.fixture
def fake_provider() -> Callable[..., FakeToolProvider]:
    def _factory(name: str, responses: Mapping[str, ToolResponse], **kwargs: Any) -> FakeToolProvider:
        return FakeToolProvider(name, responses, **kwargs)

    return _factory


@pytest.fixture
def ai_message() -> Callable[..., AIMessage]:
    return make_ai_message


@pytest.fixture
def make_job(tmp_path: Path) -> Callable[..., JobDescriptor]:
    def _factory(
        task_ref: str = "https://www.figma.com/design/AbC123/Settings?node-id=12-34&m=dev",
        **limits: Any,
    ) -> JobDescriptor:
        return JobDescriptor(task_ref=task_ref, output_path=tmp_path / "out", limits=JobLimits(**limits))

    return _factory
