from __future__ import annotations

import pytest

from designforge_runtime.prefetch import PrefetchedContext, SessionMode, parse_design_locator, prefetch
from designforge_runtime.tools import ToolBridge, ToolOutcome

FIGMA_URL = "https://www.figma.com/design/AbC123/Settings?node-id=12-34&m=dev"


@pytest.mark.parametrize(
    "url, key, node",
    [
        (FIGMA_URL, "AbC123", "12-34"),
        ("https://www.figma.com/file/Xy9/Legacy", "Xy9", None),
        ("https://figma.com/design/K1/Name?m=dev&node-id=1-2", "K1", "1-2"),
    ],
)
def test_parse_design_locator(url: str, key: str, node: str | None) -> None:
    locator = parse_design_locator(url)

    assert locator.file_key == key
    assert locator.node_id == node


def test_parse_design_locator_rejects_unknown_urls() -> None:
    with pytest.raises(ValueError, match="Could not extract Figma file key"):
        parse_design_locator("https://example.com/not-figma")


def test_locator_arguments_omit_missing_node() -> None:
    assert parse_design_locator("https://www.figma.com/file/Xy9/L").to_arguments() == {"fileKey": "Xy9"}


def test_mode_depends_on_design_only() -> None:
    assert PrefetchedContext().mode is SessionMode.TOOL_DRIVEN
    assert PrefetchedContext(components="docs").mode is SessionMode.TOOL_DRIVEN
    assert PrefetchedContext(design="{}").mode is SessionMode.PREFETCHED


@pytest.mark.anyio
async def test_prefetch_collects_available_categories(fake_provider) -> None:
    figma = fake_provider("figma", {"get_figma_data": "d" * 9_000})
    naos = fake_provider(
        "naos",
        {"get_naos_component_docs": "Button docs", "get_naos_design_tokens": "t" * 10, "get_naos_icons": "icons"},
    )
    bridge = ToolBridge([figma, naos])
    await bridge.connect()

    context = await prefetch(bridge, FIGMA_URL)

    assert context.mode is SessionMode.PREFETCHED
    assert context.design == "d" * 8_000 + "\n[TRUNCATED]"
    assert context.components == "Button docs"
    assert context.tokens == "t" * 10
    assert context.icons is None
    assert figma.invocations == [("get_figma_data", {"fileKey": "AbC123", "nodeId": "12-34"})]
    assert [name for name, _ in naos.invocations] == ["get_naos_component_docs", "get_naos_design_tokens"]


@pytest.mark.anyio
async def test_prefetch_skips_absent_tools(fake_provider) -> None:
    bridge = ToolBridge([fake_provider("naos", {"get_naos_component_docs": "docs"})])
    await bridge.connect()

    context = await prefetch(bridge, FIGMA_URL)

    assert context.mode is SessionMode.TOOL_DRIVEN
    assert context.categories() == {"components": "docs"}


@pytest.mark.anyio
async def test_prefetch_failures_leave_categories_empty(fake_provider) -> None:
    provider = fake_provider(
        "mixed",
        {
            "get_figma_data": ToolOutcome("file not found", is_error=True),
            "get_naos_component_docs": RuntimeError("boom"),
            "get_naos_design_tokens": "   ",
        },
    )
    bridge = ToolBridge([provider])
    await bridge.connect()

    context = await prefetch(bridge, FIGMA_URL)

    assert context == PrefetchedContext()


@pytest.mark.anyio
async def test_unparseable_task_ref_skips_design(fake_provider) -> None:
    provider = fake_provider("figma", {"get_figma_data": "{}"})
    bridge = ToolBridge([provider])
    await bridge.connect()

    context = await prefetch(bridge, "not a url")

    assert context.design is None
    assert provider.invocations == []
