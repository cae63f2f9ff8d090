"""
Tool providers and the bridge that routes tool calls between them.
"""
from .bridge import ToolBridge, error_payload, is_error_payload
from .mcp_provider import McpToolProvider, join_text_content
from .provider import ToolOutcome, ToolProvider

__all__ = [
    "McpToolProvider",
    "ToolBridge",
    "ToolOutcome",
    "ToolProvider",
    "error_payload",
    "is_error_payload",
    "join_text_content",
]
