"""
Run-level failures raised by the DesignForge runtime.

Only two conditions end a run early: a provider that cannot be reached while
the tool bridge connects, and a conversation that burns through its turn
budget without signalling completion. Everything else (tool errors, unknown
tools, unparseable blocks, escaping paths) is absorbed into the conversation
or skipped, so it never surfaces here.
"""
from __future__ import annotations


class DesignForgeError(RuntimeError):
    """Base class for failures that abort a DesignForge run."""


class ProviderConnectionError(DesignForgeError):
    """A configured tool provider could not be connected or listed."""

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(f"MCP server {provider} connection failed: {reason}")


class TurnBudgetExhaustedError(DesignForgeError):
    """The conversation used every allowed turn without completing."""

    def __init__(self, max_turns: int) -> None:
        self.max_turns = max_turns
        super().__init__(f"Agent did not complete within {max_turns} turns")


class ConversationInvariantError(DesignForgeError):
    """A conversation mutation would break role alternation or tool-call pairing."""
