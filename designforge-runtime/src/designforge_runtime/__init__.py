"""
This package is the DesignForge runtime: the conversation controller that
drives a chat model through a bounded, tool-augmented session turning Figma
designs into React/TypeScript files.

The public API is exposed lazily through ``__getattr__`` so that importing the
package (for example to read the version or configure logging) does not pull
in LangChain and the MCP client stack until a controller is actually needed.
"""

from importlib import import_module
from typing import Any, Dict, Tuple

__all__ = [
    "DesignForgeController",
    "run_designforge",
    "RuntimeSettings",
    "build_job",
    "ToolBridge",
    "LangChainBackend",
    "parse_artifacts",
    "write_artifacts",
    "configure_logging",
]


_ATTR_MODULE_MAP: Dict[str, Tuple[str, str]] = {
    "DesignForgeController": ("controller", "DesignForgeController"),
    "run_designforge": ("controller", "run_designforge"),
    "RuntimeSettings": ("config", "RuntimeSettings"),
    "build_job": ("config", "build_job"),
    "ToolBridge": ("tools", "ToolBridge"),
    "LangChainBackend": ("backend", "LangChainBackend"),
    "parse_artifacts": ("artifacts", "parse_artifacts"),
    "write_artifacts": ("artifacts", "write_artifacts"),
    "configure_logging": ("logging_utils", "configure_logging"),
}


def __getattr__(name: str) -> Any:
    """
    Lazily loads attributes from submodules of the ``designforge_runtime`` package.

    Raises:
        AttributeError: If the requested attribute is not part of the public API.
    """
    try:
        module_name, attribute = _ATTR_MODULE_MAP[name]
    except KeyError as exc:  # pragma: no cover - guard against typos
        raise AttributeError(f"module 'designforge_runtime' has no attribute {name!r}") from exc

    module = import_module(f".{module_name}", __name__)
    value = getattr(module, attribute)
    globals()[name] = value  # Cache for future lookups
    return value
