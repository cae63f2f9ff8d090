"""
The DesignForge conversation controller.

The controller drives one run from start to finish:

1. connect the tool bridge (real MCP providers, or the mock design tools when
   none are configured) and pre-fetch the well-known design data;
2. fix the session mode once: ``PREFETCHED`` when design data was gathered,
   ``TOOL_DRIVEN`` otherwise;
3. loop over turns strictly in sequence. Each turn trims the history, calls
   the backend (with a tool schema only in tool-driven mode), writes any
   fenced artifacts from the reply, then either finishes on a completion
   phrase, resolves tool requests through the loop-breaker, or appends stall
   guidance;
4. disconnect the bridge, whatever happened.

Only two failures reach the caller: ``ProviderConnectionError`` while the
bridge connects and ``TurnBudgetExhaustedError`` when the turn budget runs
out. Files written by earlier turns stay on disk in both cases.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from langchain_core.messages import ToolMessage

from designforge_contracts import (
    AgentProgress,
    JobDescriptor,
    ParsedArtifact,
    ProgressStatus,
    RunSummary,
    ToolCallRecord,
)

from .artifacts import contains_fence, parse_artifacts, summarize_run, write_artifacts
from .backend import BackendReply, ChatBackend, LangChainBackend
from .budget import ContextBudget
from .conversation import Conversation, Turn
from .errors import TurnBudgetExhaustedError
from .loop_breaker import LoopBreaker
from .mock import mock_providers
from .phases import WorkflowProgress
from .prefetch import PrefetchedContext, SessionMode, prefetch
from .prompts import build_system_prompt, build_task_prompt
from .tools import ToolBridge

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[AgentProgress], None]
ArtifactWriter = Callable[[Sequence[ParsedArtifact], Path], List[Path]]


class DesignForgeController:
    """
    Runs one design-to-code conversation.

    Args:
        job: The immutable job descriptor.
        backend: Chat backend used for every turn.
        bridge: Tool bridge to use. When omitted, one is built from
            ``job.providers``, or over the mock design tools if the job
            configures no providers.
        writer: Artifact writer collaborator; defaults to the sandboxed
            filesystem writer.
    """

    def __init__(
        self,
        job: JobDescriptor,
        backend: ChatBackend,
        *,
        bridge: Optional[ToolBridge] = None,
        writer: ArtifactWriter = write_artifacts,
    ) -> None:
        self.job = job
        self.backend = backend
        self.bridge = bridge or self._default_bridge(job)
        self.writer = writer
        self.loop_breaker = LoopBreaker(threshold=job.limits.duplicate_threshold)
        self.budget = ContextBudget(job.limits.max_history_chars)
        self.progress = WorkflowProgress()
        self.conversation: Optional[Conversation] = None
        self.mode: Optional[SessionMode] = None
        self._on_progress: Optional[ProgressCallback] = None

    @staticmethod
    def _default_bridge(job: JobDescriptor) -> ToolBridge:
        if job.providers:
            return ToolBridge.from_configs(job.providers)
        return ToolBridge(mock_providers())

    def _emit(self, turn: int, status: ProgressStatus, message: str, **extra: Any) -> None:
        if self._on_progress is None:
            return
        self._on_progress(AgentProgress(turn=turn, status=status, message=message, **extra))

    def _log_model(self, message: str, *args: Any) -> None:
        LOGGER.log(logging.INFO if self.job.verbose else logging.DEBUG, message, *args)

    async def run(self, on_progress: Optional[ProgressCallback] = None) -> RunSummary:
        """
        Execute the run and return its summary.

        Raises:
            ProviderConnectionError: A configured provider could not be reached.
            TurnBudgetExhaustedError: No completion signal within ``max_turns``.
        """
        self._on_progress = on_progress
        await self.bridge.connect()
        LOGGER.info("Tool bridge connected. Tools: %s", ", ".join(t.name for t in self.bridge.list_tools()))
        try:
            context = await prefetch(self.bridge, self.job.task_ref)
            self.mode = context.mode
            LOGGER.info("Session mode: %s", self.mode.value)
            return await self._execute_loop(context)
        finally:
            await self.bridge.disconnect()

    def _tool_schema(self) -> Optional[List[Dict[str, Any]]]:
        if self.mode is SessionMode.PREFETCHED:
            return None
        if self.loop_breaker.blocked:
            LOGGER.info("Blocked tools: %s", ", ".join(sorted(self.loop_breaker.blocked)))
        tools = self.loop_breaker.filter_tools(self.bridge.list_tools())
        return [tool.to_tool_schema() for tool in tools]

    async def _execute_loop(self, context: PrefetchedContext) -> RunSummary:
        assert self.mode is not None
        limits = self.job.limits
        system_prompt = build_system_prompt(self.mode, self.job, self.bridge.list_tools())
        self.conversation = Conversation(Turn.task(build_task_prompt(self.job, self.mode, context)))

        for turn in range(1, limits.max_turns + 1):
            LOGGER.info("DesignForge turn %d/%d", turn, limits.max_turns)
            self._emit(turn, ProgressStatus.RUNNING, f"Processing turn {turn}...")

            self.budget.trim(self.conversation)
            reply = await self.backend.send(system_prompt, self.conversation.to_messages(), self._tool_schema())
            text = reply.text
            if text:
                self._log_model("Model: %s", text)
            for request in reply.tool_requests:
                self._log_model("Tool request %s: %s", request.name, request.args)

            if contains_fence(text):
                self._write_artifacts(text)

            self._emit(
                turn,
                ProgressStatus.RUNNING,
                text,
                tool_calls=[ToolCallRecord(tool=r.name, input=r.args) for r in reply.tool_requests],
            )

            if self.progress.is_complete(text, require_artifacts=limits.require_artifacts_for_completion):
                summary = summarize_run(self.progress.written_files, self.job.output_path)
                LOGGER.info("DesignForge completed on turn %d with %d file(s)", turn, summary.files_generated)
                self._emit(turn, ProgressStatus.COMPLETE, "Workflow completed successfully", result=summary)
                return summary

            if reply.tool_requests:
                await self._tool_phase(reply)
            else:
                self.conversation.append(Turn.reply(reply.message))
                self.conversation.append(Turn.task(self.progress.guidance()))

        error = TurnBudgetExhaustedError(limits.max_turns)
        self._emit(limits.max_turns, ProgressStatus.ERROR, str(error))
        raise error

    def _write_artifacts(self, text: str) -> None:
        artifacts = parse_artifacts(text)
        if not artifacts:
            return
        written = self.writer(artifacts, self.job.output_path)
        self.progress.record_files(written)
        for path in written:
            LOGGER.info("Wrote %s", path)

    async def _tool_phase(self, reply: BackendReply) -> None:
        assert self.conversation is not None
        requests = reply.tool_requests
        if self.loop_breaker.all_blocked(requests):
            self.conversation.extend(self.loop_breaker.escalation_turns(requests, self.bridge.list_tools()))
            return

        resolved = await self.loop_breaker.resolve(
            requests, self.bridge.invoke, self.job.limits.max_tool_result_chars
        )
        for call in resolved:
            self.progress.record_provider(self.bridge.provider_for(call.request.name))

        results = [
            ToolMessage(content=call.content, tool_call_id=call.request.id, name=call.request.name)
            for call in resolved
        ]
        self.conversation.append(Turn.tool_requests(reply.message))
        self.conversation.append(Turn.tool_results(results))


async def run_designforge(
    job: JobDescriptor,
    on_progress: Optional[ProgressCallback] = None,
    *,
    backend: Optional[ChatBackend] = None,
    bridge: Optional[ToolBridge] = None,
) -> RunSummary:
    """Build a controller for ``job`` and run it to completion."""
    controller = DesignForgeController(job, backend or LangChainBackend(job.backend), bridge=bridge)
    return await controller.run(on_progress)
