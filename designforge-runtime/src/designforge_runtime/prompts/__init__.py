"""
Prompt text for DesignForge sessions.

The system prompt and the first task message depend on the session mode; the
guidance helpers produce the corrective messages the controller injects when
the model stalls or loops.
"""
from .guidance import (
    build_duplicate_directive,
    build_escalation_redirect,
    build_escalation_reply,
    build_phase_guidance,
)
from .system import FENCE_EXAMPLE, build_system_prompt, build_tools_section
from .task import build_task_prompt

__all__ = [
    "FENCE_EXAMPLE",
    "build_duplicate_directive",
    "build_escalation_redirect",
    "build_escalation_reply",
    "build_phase_guidance",
    "build_system_prompt",
    "build_task_prompt",
    "build_tools_section",
]
