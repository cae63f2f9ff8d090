"""Builds the first task message of a run."""
from __future__ import annotations

from typing import List

from designforge_contracts import JobDescriptor

from ..prefetch import PrefetchedContext, SessionMode
from .system import FENCE_EXAMPLE


def build_task_prompt(job: JobDescriptor, mode: SessionMode, context: PrefetchedContext) -> str:
    """
    Compose the opening originator message.

    In prefetched mode the capped design, component and token blobs are
    embedded directly and the model is told to skip straight to generation.
    """
    parts: List[str] = [
        "New DesignForge job:\n\n"
        f"**Figma Design:** {job.task_ref}\n"
        f"**Output Path:** {job.output_path}\n"
        f"**Minimum Test Coverage:** {job.min_coverage}%"
    ]

    if mode is SessionMode.PREFETCHED:
        parts.append(
            "\n## Figma Design Data (pre-fetched)\n"
            f"Phase 1 is ALREADY DONE. Here is the extracted Figma design:\n\n{context.design}"
        )
        if context.components:
            parts.append(
                "\n## Naos Design System Components (pre-fetched)\n"
                "Phase 2 data is ALREADY AVAILABLE. Here are the available @dtsl/react components:\n\n"
                f"{context.components}"
            )
        if context.tokens:
            parts.append(f"\n## Naos Design Tokens (pre-fetched)\n{context.tokens}")
        parts.append(
            "\n## Your Task\n"
            "Phases 1 and 2 are COMPLETE; all data is above. DO NOT call any tools.\n"
            "Skip straight to Phase 3: generate the implementation files.\n\n"
            "For each component found in the Figma data:\n"
            "1. Map it to a @dtsl/react component from the list above\n"
            "2. Generate the .tsx component file\n"
            "3. Generate the .test.tsx test file\n"
            "4. Generate the .stories.tsx Storybook file\n\n"
            f"Output each file using this EXACT format:\n{FENCE_EXAMPLE}\n\n"
            'When all files are generated, say "WORKFLOW COMPLETE" with a summary.\n'
            "Begin generating code NOW."
        )
    else:
        parts.append(
            "\nExecute the complete Figma-to-Code workflow autonomously:\n\n"
            "1. Extract all design specifications from Figma\n"
            "2. Map components to our design system\n"
            "3. Generate production-ready TypeScript/React code\n"
            "4. Create comprehensive tests and documentation\n"
            "5. Validate and report results\n\n"
            "Begin execution now. Work through all phases systematically."
        )
    return "\n".join(parts)
