"""Builds the run summary from the files written during a run."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence

from designforge_contracts import RunStatus, RunSummary


def is_test_file(path: str) -> bool:
    return ".test." in Path(path).name


def is_story_file(path: str) -> bool:
    return ".stories." in Path(path).name


def is_component_file(path: str) -> bool:
    return path.endswith(".tsx") and not is_test_file(path) and not is_story_file(path)


def summarize_run(
    written: Sequence[Path | str],
    output_path: Path | str,
    *,
    status: RunStatus = RunStatus.COMPLETE,
    gaps: Iterable[str] = (),
) -> RunSummary:
    files: List[str] = [str(path) for path in written]
    return RunSummary(
        status=status,
        files_generated=len(files),
        components=sum(1 for path in files if is_component_file(path)),
        tests=sum(1 for path in files if is_test_file(path)),
        stories=sum(1 for path in files if is_story_file(path)),
        gaps=list(gaps),
        output_path=str(output_path),
        files=files,
    )
