"""
Logging setup for the DesignForge command line and library callers.

Every runtime module logs through ``logging.getLogger(__name__)``. A run logs
one INFO line per turn plus connections, pre-fetch sizes, trims and written
files; loop-breaker blocks and escalations are WARNINGs. Model text and tool
arguments are DEBUG, raised to INFO when the job is ``verbose`` (the
``--verbose`` flag of ``designforge start``). httpx and the MCP client
are held at WARNING or above, LangChain at INFO or above.

The root logger streams to stdout. Level and format come from the environment
unless the caller passes ``level`` (the CLI's ``--log-level``):

- ``DESIGNFORGE_LOG_LEVEL`` controls the root log level (default: ``INFO``).
- ``DESIGNFORGE_LOG_FORMAT`` controls the message format.
"""
from __future__ import annotations

import logging
import os
import sys
from typing import Final

DEFAULT_FORMAT: Final[str] = os.environ.get(
    "DESIGNFORGE_LOG_FORMAT",
    "%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
DEFAULT_DATEFMT: Final[str] = "%Y-%m-%d %H:%M:%S"
_CONFIGURED: bool = False


def _resolve_level(name: str | None) -> int:
    if not name:
        return logging.INFO
    normalized = name.strip().upper()
    level = getattr(logging, normalized, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, force: bool = False, level: str | None = None) -> None:
    """
    Configure the root logger to stream messages to stdout.

    Args:
        force: When True, existing handlers are cleared before configuring.
        level: Explicit level name; overrides ``DESIGNFORGE_LOG_LEVEL``.
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    root_logger = logging.getLogger()
    if force:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)

    resolved = _resolve_level(level or os.environ.get("DESIGNFORGE_LOG_LEVEL"))
    root_logger.setLevel(resolved)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT))
    root_logger.addHandler(handler)

    # Quiet down noisy dependencies unless explicitly overridden.
    logging.getLogger("httpx").setLevel(max(logging.WARNING, resolved))
    logging.getLogger("mcp").setLevel(max(logging.WARNING, resolved))
    logging.getLogger("langchain").setLevel(max(logging.INFO, resolved))

    _CONFIGURED = True
