"""
Character-based context budgets.

Two independent caps keep the conversation within what a small local model can
hold. Tool results are capped individually before they enter history, and the
whole conversation is trimmed before every backend call. Characters stand in
for tokens; the estimate is deliberately coarse.
"""
from __future__ import annotations

import logging

from .conversation import Conversation

LOGGER = logging.getLogger(__name__)

PREFETCH_TRUNCATION_MARKER = "\n[TRUNCATED]"


def truncation_notice(original_length: int) -> str:
    return (
        f"\n\n[TRUNCATED — full response was {original_length} characters. "
        "The key information is above. Proceed to the next phase of the workflow.]"
    )


def cap_tool_result(text: str, cap: int) -> str:
    """
    Cap one tool result at ``cap`` characters, notice included.

    Results at or under the cap pass through unchanged. Longer results keep
    their beginning followed by a notice stating the original length.
    """
    if len(text) <= cap:
        return text
    notice = truncation_notice(len(text))
    keep = cap - len(notice)
    if keep <= 0:
        return text[:cap]
    return text[:keep] + notice


def cap_prefetch(text: str, cap: int) -> str:
    """Cap a pre-fetched blob, marking it when anything was cut."""
    if len(text) <= cap:
        return text
    return text[:cap] + PREFETCH_TRUNCATION_MARKER


class ContextBudget:
    """
    Trims a conversation to a global character budget.

    The first turn (the task) always survives. Older turns after it are
    dropped front to back until the estimate fits or only the last two turns
    remain, and the drop count is rounded up to an even number so tool
    requests and their results leave together.
    """

    def __init__(self, max_history_chars: int) -> None:
        self.max_history_chars = max_history_chars

    def trim(self, conversation: Conversation) -> int:
        total = conversation.total_size()
        if total <= self.max_history_chars:
            return 0

        rest = conversation.turns[1:]
        remaining = total
        drop = 0
        while remaining > self.max_history_chars and drop < len(rest) - 2:
            remaining -= rest[drop].size
            drop += 1

        if drop % 2:
            drop += 1
        if drop == 0:
            return 0

        conversation.drop_after_first(drop)
        LOGGER.info(
            "Trimmed %d old turns from context (%d -> %d chars)",
            drop,
            total,
            conversation.total_size(),
        )
        return drop
