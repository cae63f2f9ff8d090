#!/usr/bin/env python3
"""
Command-line interface for DesignForge.

Commands:
    start            Run the Figma-to-code workflow for one design.
    debug            Show environment status and optionally check MCP connectivity.
    validate-config  Load and validate a configuration file.

Environment variables are read from a ``.env`` file in the working directory
when present.
"""

import argparse
import asyncio
import json
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from designforge_contracts import AgentProgress, RunSummary, parse_provider_configs

from ..config import ConfigFileError, RuntimeSettings, build_job, load_config_file, provider_names
from ..controller import run_designforge
from ..errors import DesignForgeError
from ..logging_utils import configure_logging
from ..tools import ToolBridge


def _load_settings(config_path: Optional[str]) -> RuntimeSettings:
    config = load_config_file(config_path)
    return RuntimeSettings.from_environment(RuntimeSettings().merge_file(config))


def _print_progress(progress: AgentProgress) -> None:
    for call in progress.tool_calls:
        print(f"   tool: {call.tool}")


def _print_summary(summary: RunSummary) -> None:
    print("\nDesignForge Complete!\n")
    print("Summary:")
    print(f"   Files: {summary.files_generated}")
    print(f"   Components: {summary.components}")
    print(f"   Tests: {summary.tests}")
    print(f"   Stories: {summary.stories}")
    print(f"   Coverage: {summary.coverage}%")
    print(f"   Design Parity: {summary.design_parity}%")
    if summary.gaps:
        print("\nDesign System Gaps:")
        for gap in summary.gaps:
            print(f"   - {gap}")
    print(f"\nOutput: {summary.output_path}\n")


def cmd_start(args) -> int:
    """Run the workflow."""
    try:
        settings = _load_settings(args.config).with_overrides(
            max_turns=args.max_turns,
            min_coverage=args.coverage,
            model=args.model,
            base_url=args.base_url,
            mock_mode=True if args.mock else None,
        )
    except ConfigFileError as exc:
        print(f"Error: {exc}")
        return 1

    if not settings.api_key:
        print("Error: ANTHROPIC_API_KEY not found in environment")
        print("\nPlease set your API key:")
        print("  export ANTHROPIC_API_KEY=sk-ant-...")
        return 1

    try:
        job = build_job(settings, task_ref=args.figma, output_path=args.output, verbose=args.verbose)
    except ValidationError as exc:
        print(f"Error: invalid configuration\n{exc}")
        return 1

    print("\nDesignForge - Autonomous Figma to Code Agent\n")
    print("Configuration:")
    print(f"   Figma URL: {job.task_ref}")
    print(f"   Output: {job.output_path}")
    print(f"   Coverage: {job.min_coverage}%")
    print(f"   Max Turns: {job.limits.max_turns}")
    print(f"   Model: {job.backend.model}")
    print(f"   Providers: {', '.join(p.name for p in job.providers) or 'mock design tools'}")

    if args.dry_run:
        print("\nDry run: no model calls made and no files written.")
        return 0

    try:
        summary = asyncio.run(run_designforge(job, _print_progress))
    except DesignForgeError as exc:
        print(f"\nError: {exc}")
        return 1

    if args.json:
        print(json.dumps(summary.model_dump(mode="json"), indent=2))
    else:
        _print_summary(summary)
    return 0


async def _check_providers(settings: RuntimeSettings, only: Optional[str]) -> int:
    configs = parse_provider_configs(settings.providers)
    if only:
        configs = [config for config in configs if config.name == only]
    if not configs:
        print("No MCP servers configured to check.")
        return 1

    bridge = ToolBridge.from_configs(configs)
    try:
        await bridge.connect()
    except DesignForgeError as exc:
        print(f"MCP connectivity failed: {exc}")
        return 1
    try:
        tools = bridge.list_tools()
        print(f"\nConnected! Discovered {len(tools)} tools:\n")
        for name in bridge.provider_names:
            print(f"  {name}:")
            for tool in tools:
                if tool.provider == name:
                    print(f"    - {tool.name}: {tool.description or '(no description)'}")
            print()
    finally:
        await bridge.disconnect()
    return 0


def cmd_debug(args) -> int:
    """Show configuration status."""
    try:
        settings = _load_settings(args.config)
    except ConfigFileError as exc:
        print(f"Error: {exc}")
        return 1

    print("DesignForge Debug\n")
    print("Environment Variables:")
    for name in ("ANTHROPIC_API_KEY", "FIGMA_API_KEY"):
        print(f"  {name}: {'set' if os.environ.get(name) else 'not set'}")
    for name in ("ANTHROPIC_BASE_URL", "CLAUDE_MODEL", "NAOS_MCP_URL", "DESIGNFORGE_LOG_LEVEL"):
        print(f"  {name}: {os.environ.get(name) or 'not set'}")

    print("\nResolved settings:")
    print(f"  model: {settings.model}")
    print(f"  base_url: {settings.base_url}")
    print(f"  max_turns: {settings.max_turns}")
    print(f"  providers: {', '.join(provider_names(settings)) or 'none (mock design tools)'}")
    print(f"  mock_mode: {settings.mock_mode}")

    if args.check_mcp is not None:
        return asyncio.run(_check_providers(settings, args.check_mcp or None))
    return 0


def cmd_validate_config(args) -> int:
    """Validate a configuration file."""
    try:
        config = load_config_file(args.config)
        providers = parse_provider_configs(config["providers"])
        settings = RuntimeSettings().merge_file(config)
    except (ConfigFileError, ValidationError, TypeError, ValueError) as exc:
        print(f"Invalid configuration: {exc}")
        return 1

    print("Configuration Validation\n")
    print(f"  providers: {len(providers)}")
    for provider in providers:
        print(f"    - {provider.name}: {json.dumps(provider.describe())}")
    print(f"  model: {settings.model}")
    print(f"  max_turns: {settings.max_turns}")
    print(f"  min_coverage: {settings.min_coverage}")
    print("\nConfiguration is valid.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="designforge",
        description="Autonomous AI agent: Figma -> design system -> production code",
    )
    parser.add_argument("--log-level", default=None, help="Override DESIGNFORGE_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parser_start = subparsers.add_parser("start", help="Start the DesignForge workflow")
    parser_start.add_argument("--figma", required=True, help="Figma file URL")
    parser_start.add_argument("--output", required=True, help="Output directory path")
    parser_start.add_argument("--coverage", type=int, default=None, help="Minimum test coverage percentage")
    parser_start.add_argument("--max-turns", type=int, default=None, help="Maximum model turns")
    parser_start.add_argument("--model", default=None, help="Chat model identifier")
    parser_start.add_argument("--base-url", default=None, help="Chat backend endpoint")
    parser_start.add_argument("--config", default=None, help="Configuration file (YAML or JSON)")
    parser_start.add_argument("--mock", action="store_true", help="Use mock design tools")
    parser_start.add_argument("--verbose", action="store_true", help="Log model output and tool arguments")
    parser_start.add_argument("--dry-run", action="store_true", help="Preview the configuration only")
    parser_start.add_argument("--json", action="store_true", help="Print the summary as JSON")
    parser_start.set_defaults(func=cmd_start)

    parser_debug = subparsers.add_parser("debug", help="Debug DesignForge configuration")
    parser_debug.add_argument(
        "--check-mcp",
        nargs="?",
        const="",
        default=None,
        metavar="SERVER",
        help="Connect to the configured MCP servers (or just SERVER) and list their tools",
    )
    parser_debug.add_argument("--config", default=None, help="Configuration file (YAML or JSON)")
    parser_debug.set_defaults(func=cmd_debug)

    parser_validate = subparsers.add_parser("validate-config", help="Validate a configuration file")
    parser_validate.add_argument("--config", default=None, help="Configuration file (YAML or JSON)")
    parser_validate.set_defaults(func=cmd_validate_config)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(override=False)
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
