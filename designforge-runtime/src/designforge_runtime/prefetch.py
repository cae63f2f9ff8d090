"""
This module gathers design data up front, before the conversation starts.

Small local models struggle to orchestrate several rounds of tool calls while
large tool results pile up in their context. The pre-fetch phase sidesteps
that: it calls a fixed set of well-known tools once, caps each result, and
hands the blobs to the prompt builder. When the primary category (the design
data itself) is available, the session runs in ``PREFETCHED`` mode: the data
is embedded in the first task message and no tool schema is ever offered to
the model. Otherwise the session falls back to ``TOOL_DRIVEN`` mode.

Every pre-fetch failure is logged and leaves its category empty; none of them
is fatal.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from .budget import cap_prefetch
from .tools.bridge import ToolBridge, is_error_payload

LOGGER = logging.getLogger(__name__)

_FILE_KEY_PATTERN = re.compile(r"/(?:design|file)/([A-Za-z0-9]+)")
_NODE_ID_PATTERN = re.compile(r"[?&]node-id=([^&]+)")


class SessionMode(str, Enum):
    TOOL_DRIVEN = "tool_driven"
    PREFETCHED = "prefetched"


@dataclass(frozen=True, slots=True)
class DesignLocator:
    file_key: str
    node_id: Optional[str] = None

    def to_arguments(self) -> Dict[str, Any]:
        args: Dict[str, Any] = {"fileKey": self.file_key}
        if self.node_id:
            args["nodeId"] = self.node_id
        return args


def parse_design_locator(url: str) -> DesignLocator:
    """
    Extract the file key and optional node id from a Figma URL.

    Handles ``https://www.figma.com/design/<key>/Name?node-id=1-2`` and the
    older ``/file/<key>/`` form.

    Raises:
        ValueError: If no file key can be found.
    """
    key_match = _FILE_KEY_PATTERN.search(url)
    if not key_match:
        raise ValueError(f"Could not extract Figma file key from URL: {url}")
    node_match = _NODE_ID_PATTERN.search(url)
    return DesignLocator(file_key=key_match.group(1), node_id=node_match.group(1) if node_match else None)


@dataclass(frozen=True, slots=True)
class PrefetchTarget:
    category: str
    tool: str
    cap: int
    arguments: Callable[[str], Dict[str, Any]]


def _no_arguments(_: str) -> Dict[str, Any]:
    return {}


def _design_arguments(task_ref: str) -> Dict[str, Any]:
    return parse_design_locator(task_ref).to_arguments()


DESIGN_CATEGORY = "design"

PREFETCH_TARGETS: Tuple[PrefetchTarget, ...] = (
    PrefetchTarget(DESIGN_CATEGORY, "get_figma_data", 8_000, _design_arguments),
    PrefetchTarget("components", "get_naos_component_docs", 6_000, _no_arguments),
    PrefetchTarget("tokens", "get_naos_design_tokens", 4_000, _no_arguments),
)


@dataclass(frozen=True, slots=True)
class PrefetchedContext:
    """
    Design data gathered before the loop. Each blob is optional and capped.

    ``icons`` is a declared category that is never fetched up front; the model
    can still request icons through the catalog tools in tool-driven mode.
    """

    design: Optional[str] = None
    components: Optional[str] = None
    tokens: Optional[str] = None
    icons: Optional[str] = None

    @property
    def mode(self) -> SessionMode:
        return SessionMode.PREFETCHED if self.design else SessionMode.TOOL_DRIVEN

    def categories(self) -> Dict[str, str]:
        values = {"design": self.design, "components": self.components, "tokens": self.tokens, "icons": self.icons}
        return {name: value for name, value in values.items() if value}


async def prefetch(bridge: ToolBridge, task_ref: str) -> PrefetchedContext:
    """Call each pre-fetch tool the bridge exposes and collect the capped results."""
    collected: Dict[str, Optional[str]] = {}
    for target in PREFETCH_TARGETS:
        if not bridge.has_tool(target.tool):
            continue
        LOGGER.info("Pre-fetching %s via %s", target.category, target.tool)
        try:
            arguments = target.arguments(task_ref)
            raw = await bridge.invoke(target.tool, arguments)
        except Exception as exc:
            LOGGER.warning("Pre-fetch of %s failed: %s", target.category, exc)
            continue
        if is_error_payload(raw):
            LOGGER.warning("Pre-fetch of %s returned an error: %s", target.category, raw[:200])
            continue
        if not raw.strip():
            continue
        capped = cap_prefetch(raw, target.cap)
        LOGGER.info("Pre-fetched %s: %d chars (%d after cap)", target.category, len(raw), len(capped))
        collected[target.category] = capped
    return PrefetchedContext(**collected)
