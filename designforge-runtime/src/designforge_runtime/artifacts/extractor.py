"""
This module extracts generated files from free-form model output.

The model is asked to emit every file as a fenced block whose opening line
carries a language tag and the relative path, e.g.::

    ```tsx Button/Button.tsx
    export function Button() { ... }
    ```

Models do not always comply, so a target path is resolved by trying, in order:

1. a ``filename="path"`` attribute in the fence metadata;
2. the metadata itself, when it ends with a known file extension;
3. a first body line of the form ``// path.ext`` (removed from the content);
4. a ``**File:** path`` label or ``### path`` heading just before the fence.

Blocks with no resolvable path are inline illustrations and are skipped, as
are blocks whose body is blank.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional

from designforge_contracts import ParsedArtifact

LOGGER = logging.getLogger(__name__)

# Only horizontal whitespace may separate the tag from the metadata. Allowing
# a newline there shifts the metadata capture onto the first body line.
CODE_FENCE_PATTERN = re.compile(r"^```(\w*)[ \t]*(.*?)\n([\s\S]*?)^```$", re.MULTILINE)
FILENAME_ATTR_PATTERN = re.compile(r'filename\s*=\s*"([^"]+)"')
FILE_EXTENSION_PATTERN = re.compile(r"\.(tsx?|jsx?|css|scss|less|json|md|html|yaml|yml)$", re.IGNORECASE)
FIRST_LINE_COMMENT_PATTERN = re.compile(r"^//\s*(.+\.\w+)\s*$")
PRECEDING_FILE_PATTERN = re.compile(r"(?:\*\*File:\*\*|###)\s*`?([^\n`]+\.\w+)`?\s*\Z")

LOOKBACK_CHARS = 200


def _path_from_metadata(metadata: str) -> Optional[str]:
    attr = FILENAME_ATTR_PATTERN.search(metadata)
    if attr:
        return attr.group(1)
    candidate = metadata.strip()
    if candidate and FILE_EXTENSION_PATTERN.search(candidate):
        return candidate
    return None


def _comment_path(first_line: str) -> Optional[str]:
    match = FIRST_LINE_COMMENT_PATTERN.match(first_line.strip())
    if match and FILE_EXTENSION_PATTERN.search(match.group(1)):
        return match.group(1)
    return None


def _preceding_path(text: str, fence_start: int) -> Optional[str]:
    window = text[max(0, fence_start - LOOKBACK_CHARS):fence_start]
    match = PRECEDING_FILE_PATTERN.search(window)
    if match:
        return match.group(1).strip()
    return None


def parse_artifacts(text: str) -> List[ParsedArtifact]:
    """
    Parse every path-labelled fenced block in ``text``.

    Args:
        text: Concatenated model output for one turn.

    Returns:
        The artifacts in the order their fences appear. Content is
        right-trimmed and ends with exactly one newline.
    """
    artifacts: List[ParsedArtifact] = []
    for match in CODE_FENCE_PATTERN.finditer(text):
        language, metadata, body = match.group(1), match.group(2), match.group(3)
        if not body.strip():
            continue

        first_line = body.split("\n", 1)[0]
        path = (
            _path_from_metadata(metadata)
            or _comment_path(first_line)
            or _preceding_path(text, match.start())
        )
        if not path:
            LOGGER.debug("Skipping fenced %s block without a file path", language or "untagged")
            continue

        content = body
        if _comment_path(first_line) == path:
            content = body.split("\n", 1)[1] if "\n" in body else ""
            if not content.strip():
                continue

        artifacts.append(
            ParsedArtifact(path=path.strip(), content=content.rstrip() + "\n", language=language)
        )
    return artifacts


def contains_fence(text: str) -> bool:
    return "```" in text
