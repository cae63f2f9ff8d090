"""
Entry point for ``python -m designforge_runtime``; delegates to the CLI.
"""
from __future__ import annotations

from .cli.main import main

if __name__ == "__main__":
    raise SystemExit(main())
