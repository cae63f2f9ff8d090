from __future__ import annotations

import pytest

from designforge_runtime.artifacts.extractor import parse_artifacts


def _join(*lines: str) -> str:
    return "\n".join(lines)


def test_info_string_path() -> None:
    text = _join(
        "Here is the component:",
        "",
        "```tsx Button/Button.tsx",
        "export function Button() {",
        "  return <button>Click</button>;",
        "}",
        "```",
    )

    artifacts = parse_artifacts(text)

    assert len(artifacts) == 1
    assert artifacts[0].path == "Button/Button.tsx"
    assert artifacts[0].language == "tsx"
    assert artifacts[0].content == "export function Button() {\n  return <button>Click</button>;\n}\n"


def test_filename_attribute_wins_over_info_string() -> None:
    text = _join(
        '```tsx filename="Card/Card.tsx" Other/Other.tsx',
        "export function Card() { return <div />; }",
        "```",
    )

    artifacts = parse_artifacts(text)

    assert [artifact.path for artifact in artifacts] == ["Card/Card.tsx"]


def test_first_line_comment_path_is_stripped_from_content() -> None:
    text = _join(
        "```typescript",
        "// Header/Header.types.ts",
        "export interface HeaderProps {",
        "  title: string;",
        "}",
        "```",
    )

    artifacts = parse_artifacts(text)

    assert len(artifacts) == 1
    assert artifacts[0].path == "Header/Header.types.ts"
    assert "// Header/Header.types.ts" not in artifacts[0].content
    assert artifacts[0].content.startswith("export interface HeaderProps")


@pytest.mark.parametrize(
    "label",
    ["**File:** Modal/index.ts", "### Modal/index.ts", "**File:** `Modal/index.ts`"],
)
def test_preceding_label_or_heading(label: str) -> None:
    text = _join(label, "```ts", "export { Modal } from './Modal';", "```")

    artifacts = parse_artifacts(text)

    assert [artifact.path for artifact in artifacts] == ["Modal/index.ts"]


def test_preceding_label_outside_lookback_window_is_ignored() -> None:
    text = _join("### Modal/index.ts", "x" * 250, "```ts", "export const a = 1;", "```")

    assert parse_artifacts(text) == []


def test_block_without_path_is_skipped() -> None:
    text = _join("Use it like this:", "```tsx", "<Button variant=\"primary\" />", "```")

    assert parse_artifacts(text) == []


def test_unknown_extension_in_info_string_is_not_a_path() -> None:
    text = _join("```python script.py", "print('hi')", "```")

    assert parse_artifacts(text) == []


@pytest.mark.parametrize("body", ["", "   ", "\n\n", " \t \n  "])
def test_blank_bodies_never_produce_artifacts(body: str) -> None:
    text = f"```tsx Empty/Empty.tsx\n{body}\n```" if body else "```tsx Empty/Empty.tsx\n```"

    assert parse_artifacts(text) == []


@pytest.mark.parametrize(
    "lines",
    [
        ["const a = 1;"],
        ["first line", "second line", "", "fourth line"],
        ["// not a path comment", "body"],
        ["```tsx inner.tsx is not a fence close", "still body"],
    ],
)
def test_fence_without_metadata_keeps_body_boundaries(lines: list[str]) -> None:
    body = "\n".join(lines)
    text = _join("### Thing/Thing.ts", "```", body, "```")

    artifacts = parse_artifacts(text)

    assert len(artifacts) == 1
    assert artifacts[0].path == "Thing/Thing.ts"
    assert artifacts[0].content == body.rstrip() + "\n"


def test_language_tag_without_metadata_does_not_consume_first_line() -> None:
    text = _join("### Util/util.ts", "```ts", "Other/Other.tsx", "export const x = 1;", "```")

    artifacts = parse_artifacts(text)

    assert artifacts[0].path == "Util/util.ts"
    assert artifacts[0].content == "Other/Other.tsx\nexport const x = 1;\n"


def test_multiple_blocks_in_order_with_trailing_whitespace_normalized() -> None:
    text = _join(
        "```tsx Toggle/Toggle.tsx",
        "export function Toggle() {}   ",
        "",
        "",
        "```",
        "Some explanation.",
        "```tsx",
        "<Toggle />",
        "```",
        "```tsx Toggle/Toggle.test.tsx",
        "it('renders', () => {});",
        "```",
    )

    artifacts = parse_artifacts(text)

    assert [artifact.path for artifact in artifacts] == ["Toggle/Toggle.tsx", "Toggle/Toggle.test.tsx"]
    assert artifacts[0].content == "export function Toggle() {}\n"


@pytest.mark.parametrize("closing", ["", "\n", "\n   \n"])
def test_block_holding_only_its_path_comment_is_skipped(closing: str) -> None:
    text = f"```tsx\n// Empty/Empty.tsx{closing}\n```"

    assert parse_artifacts(text) == []
