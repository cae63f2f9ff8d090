"""
Corrective messages injected by the controller.

Stall guidance tells a model that answered without tool calls or a completion
signal where it is in the workflow. The duplicate directive replaces a
repeated tool call's result. The escalation pair is the last resort when the
model keeps requesting tools that have been blocked.
"""
from __future__ import annotations

from typing import Iterable, Optional, Sequence

DUPLICATE_EXCERPT_CHARS = 500
ESCALATION_EXCERPT_CHARS = 1500


def build_phase_guidance(*, design_done: bool, catalog_done: bool, files_written: int) -> str:
    if design_done and not catalog_done:
        lines = [
            "You have already fetched the Figma design data. DO NOT call get_figma_data again.",
            "Now proceed to Phase 2: use the Naos design system tools (get_naos_component_docs, "
            "get_naos_design_tokens) to map Figma components to @dtsl/react components.",
        ]
    elif design_done and catalog_done and files_written == 0:
        lines = [
            "You have fetched both Figma data and Naos design system data.",
            "DO NOT call get_figma_data or get_naos_component_docs again.",
            "Now proceed to Phase 3: generate the React/TypeScript implementation files using @dtsl/react components.",
            "Output each file using the code fence format with the file path after the language tag.",
        ]
    elif files_written > 0:
        lines = [
            f"You have generated {files_written} files so far.",
            'Continue generating remaining files (tests, stories, documentation) or say "WORKFLOW COMPLETE" '
            "if all phases are done.",
        ]
    else:
        lines = ["Continue with the next step in the workflow."]
    return "\n".join(lines)


def build_duplicate_directive(tool_name: str, cached: str) -> str:
    return (
        f'[DUPLICATE CALL — you already called "{tool_name}" with these exact parameters '
        "on a previous turn and received the data. DO NOT call this tool again. "
        "Use the data you already have and proceed to the next phase of the workflow.]\n\n"
        f"Previous result summary (first {DUPLICATE_EXCERPT_CHARS} chars):\n"
        f"{cached[:DUPLICATE_EXCERPT_CHARS]}..."
    )


def build_escalation_reply(blocked: Iterable[str]) -> str:
    names = ", ".join(sorted(blocked))
    return (
        f"The previous phase is complete. I already have the data returned by {names}. "
        "Now I will proceed to the next phase of the workflow."
    )


def build_escalation_redirect(
    blocked: Sequence[str],
    alternates: Sequence[str],
    excerpt: Optional[str],
) -> str:
    if excerpt:
        summary = f"Here is a summary of the data already fetched:\n{excerpt[:ESCALATION_EXCERPT_CHARS]}"
    else:
        summary = "The data was fetched but no summary is available."

    lines = [f"Good. That phase is done. {summary}", ""]
    if alternates:
        lines.append("NOW PROCEED TO THE NEXT PHASE. You MUST call one of these tools:")
        lines.extend(f"- {name}" for name in alternates)
    else:
        lines.append("NOW PROCEED TO THE NEXT PHASE. Generate the implementation files directly.")
    lines.append("")
    forbidden = ", ".join(sorted(blocked))
    lines.append(f"DO NOT call {forbidden} again. Start the next phase now.")
    return "\n".join(lines)
