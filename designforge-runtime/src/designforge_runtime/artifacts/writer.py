"""
Writes parsed artifacts under a sandbox root.

Paths come from untrusted model output. Each one is resolved against the root
and skipped when the resolved location is not strictly inside it, so a
``../`` segment or an absolute path can never write elsewhere. A rejected path
never aborts the rest of the batch, and neither does a filesystem error
while writing one (an over-long name, a path naming an existing directory).
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from designforge_contracts import ParsedArtifact

LOGGER = logging.getLogger(__name__)


def resolve_under_root(root: Path, relative: str) -> Path | None:
    """Return the absolute target for ``relative``, or None if it escapes ``root``."""
    base = root.resolve()
    try:
        target = (base / relative).resolve()
    except OSError:
        return None
    if target == base or not target.is_relative_to(base):
        return None
    return target


def write_artifacts(artifacts: Iterable[ParsedArtifact], root: Path | str) -> List[Path]:
    """
    Write each artifact below ``root``, creating parent directories as needed.

    Returns:
        Absolute paths of the files actually written, in input order.
    """
    base = Path(root)
    written: List[Path] = []
    for artifact in artifacts:
        target = resolve_under_root(base, artifact.path)
        if target is None:
            LOGGER.warning("Refusing to write %s outside %s", artifact.path, base)
            continue
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(artifact.content, encoding="utf-8")
        except OSError as exc:
            LOGGER.warning("Could not write %s: %s", artifact.path, exc)
            continue
        written.append(target)
    return written
