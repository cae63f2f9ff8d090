"""
Mock design tools for running DesignForge without any MCP server.

When no provider is configured, or ``DESIGNFORGE_MOCK_MODE`` is set, the
controller connects a bridge over two ``MockDesignProvider`` instances. They expose a
``figma`` tool and a ``design-system`` tool returning canned design data and
component documentation, which is enough to exercise the whole conversation
loop against a real or fake chat model.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping

from designforge_contracts import ToolDescriptor

from .tools.provider import ToolOutcome

LOGGER = logging.getLogger(__name__)

MOCK_DESIGN_PROVIDER = "figma"
MOCK_CATALOG_PROVIDER = "naos"


_FIGMA_TOOL = ToolDescriptor(
    name="figma",
    description=(
        "Extract design specifications from Figma files including components, "
        "variants, design tokens, and interactions"
    ),
    input_schema={
        "properties": {
            "action": {
                "type": "string",
                "enum": ["get_file", "get_components", "get_styles"],
                "description": "The action to perform",
            },
            "file_url": {"type": "string", "description": "The Figma file URL"},
        },
        "required": ["action", "file_url"],
    },
    provider=MOCK_DESIGN_PROVIDER,
)

_DESIGN_SYSTEM_TOOL = ToolDescriptor(
    name="design-system",
    description="Query the design system for available components, their props, usage patterns, and examples",
    input_schema={
        "properties": {
            "action": {
                "type": "string",
                "enum": ["list_components", "get_component_details", "search_components"],
                "description": "The action to perform",
            },
            "component_name": {"type": "string", "description": "Optional component name to query"},
        },
        "required": ["action"],
    },
    provider=MOCK_CATALOG_PROVIDER,
)

_MOCK_DESIGN: Dict[str, Any] = {
    "success": True,
    "design": {
        "name": "User Settings Page",
        "components": [
            {"name": "SettingsHeader", "type": "Header", "children": ["Avatar", "UserName", "StatusBadge"]},
            {"name": "SettingsForm", "type": "Form", "fields": ["EmailInput", "PasswordInput", "PreferenceToggle"]},
        ],
        "tokens": {
            "colors": {"primary": "#6366f1", "secondary": "#8b5cf6", "error": "#ef4444"},
            "spacing": {"xs": "4px", "sm": "8px", "md": "16px", "lg": "24px"},
        },
        "variants": [{"component": "Button", "variants": ["primary", "secondary", "error"]}],
    },
}

_MOCK_COMPONENTS: Dict[str, Any] = {
    "success": True,
    "components": [
        {
            "name": "Button",
            "package": "@dtsl/react",
            "props": ["variant", "size", "disabled", "onClick", "children"],
            "variants": ["primary", "secondary", "ghost", "error"],
            "example": '<Button variant="primary" onClick={handleClick}>Click me</Button>',
        },
        {
            "name": "Input",
            "package": "@dtsl/react",
            "props": ["type", "value", "onChange", "placeholder", "error", "disabled"],
            "example": '<Input type="email" value={email} onChange={setEmail} />',
        },
        {
            "name": "Toggle",
            "package": "@dtsl/react",
            "props": ["checked", "onChange", "label", "disabled"],
            "example": '<Toggle checked={enabled} onChange={setEnabled} label="Enable feature" />',
        },
    ],
}


class MockDesignProvider:
    """An in-process tool provider returning one canned payload per tool."""

    def __init__(self, name: str, tools: List[ToolDescriptor], payloads: Dict[str, Dict[str, Any]]) -> None:
        self.name = name
        self._tools = list(tools)
        self._payloads = payloads
        self.calls: List[tuple[str, Dict[str, Any]]] = []

    async def connect(self) -> None:
        LOGGER.info("Using mock %s tools; no MCP server configured.", self.name)

    async def discover(self) -> List[ToolDescriptor]:
        return list(self._tools)

    async def invoke(self, tool_name: str, arguments: Mapping[str, Any]) -> ToolOutcome:
        self.calls.append((tool_name, dict(arguments)))
        payload = self._payloads.get(tool_name, {"success": True, "data": {}})
        return ToolOutcome(json.dumps(payload))

    async def close(self) -> None:
        return None


def mock_providers() -> List[MockDesignProvider]:
    """The mock design source and the mock component catalog."""
    return [
        MockDesignProvider(MOCK_DESIGN_PROVIDER, [_FIGMA_TOOL], {_FIGMA_TOOL.name: _MOCK_DESIGN}),
        MockDesignProvider(MOCK_CATALOG_PROVIDER, [_DESIGN_SYSTEM_TOOL], {_DESIGN_SYSTEM_TOOL.name: _MOCK_COMPONENTS}),
    ]
