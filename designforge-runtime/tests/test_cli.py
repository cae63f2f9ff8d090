from __future__ import annotations

import json
from pathlib import Path

import pytest

from designforge_contracts import RunStatus, RunSummary
from designforge_runtime.cli import main as cli
from designforge_runtime.errors import TurnBudgetExhaustedError

FIGMA_URL = "https://www.figma.com/design/AbC123/Settings?node-id=12-34"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("ANTHROPIC_API_KEY", "FIGMA_API_KEY", "NAOS_MCP_URL", "DESIGNFORGE_MOCK_MODE", "DESIGNFORGE_MAX_TURNS"):
        monkeypatch.delenv(name, raising=False)


def test_start_requires_api_key(tmp_path: Path, capsys) -> None:
    code = cli.main(["start", "--figma", FIGMA_URL, "--output", str(tmp_path / "out")])

    assert code == 1
    assert "ANTHROPIC_API_KEY not found" in capsys.readouterr().out


def test_start_dry_run_prints_configuration(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")

    code = cli.main(
        ["start", "--figma", FIGMA_URL, "--output", str(tmp_path / "out"), "--max-turns", "7", "--mock", "--dry-run"]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "Max Turns: 7" in out
    assert "Providers: mock design tools" in out
    assert not (tmp_path / "out").exists()


def test_start_prints_summary_as_json(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    seen = {}

    async def _fake_run(job, on_progress=None, **_):
        seen["job"] = job
        return RunSummary(
            status=RunStatus.COMPLETE,
            output_path=str(job.output_path),
            files_generated=2,
            files=["a.tsx", "a.test.tsx"],
        )

    monkeypatch.setattr(cli, "run_designforge", _fake_run)

    code = cli.main(["start", "--figma", FIGMA_URL, "--output", str(tmp_path / "out"), "--json"])

    assert code == 0
    payload = json.loads(capsys.readouterr().out.split("Providers: mock design tools", 1)[1])
    assert payload["files_generated"] == 2
    assert seen["job"].providers == []


def test_start_reports_run_failures(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")

    async def _exhausted(job, on_progress=None, **_):
        raise TurnBudgetExhaustedError(job.limits.max_turns)

    monkeypatch.setattr(cli, "run_designforge", _exhausted)

    code = cli.main(["start", "--figma", FIGMA_URL, "--output", str(tmp_path / "out")])

    assert code == 1
    assert "Agent did not complete within 30 turns" in capsys.readouterr().out


def test_validate_config_accepts_valid_file(tmp_path: Path, capsys) -> None:
    path = tmp_path / "designforge.config.yaml"
    path.write_text(
        "providers:\n"
        "  naos:\n"
        "    url: https://naos.example/mcp\n"
        "    headers:\n"
        "      Authorization: Bearer secret\n"
        "agent:\n"
        "  maxTurns: 15\n",
        encoding="utf-8",
    )

    code = cli.main(["validate-config", "--config", str(path)])

    out = capsys.readouterr().out
    assert code == 0
    assert "providers: 1" in out
    assert "max_turns: 15" in out
    assert "Bearer secret" not in out


def test_validate_config_accepts_server_script_paths(tmp_path: Path, capsys) -> None:
    path = tmp_path / "designforge.config.yaml"
    path.write_text(
        "mcpServers:\n"
        "  figma:\n"
        "    path: ./mcp/figma-server\n"
        "    enabled: true\n"
        "  designSystem:\n"
        "    path: ./mcp/design-system-server\n"
        "    enabled: true\n",
        encoding="utf-8",
    )

    code = cli.main(["validate-config", "--config", str(path)])

    assert code == 0
    assert "providers: 2" in capsys.readouterr().out


def test_validate_config_rejects_bad_provider(tmp_path: Path, capsys) -> None:
    path = tmp_path / "designforge.config.json"
    path.write_text(json.dumps({"providers": {"naos": {"url": "ftp://naos"}}}), encoding="utf-8")

    code = cli.main(["validate-config", "--config", str(path)])

    assert code == 1
    assert "Invalid configuration" in capsys.readouterr().out


def test_debug_without_servers_to_check(capsys) -> None:
    code = cli.main(["debug", "--check-mcp"])

    out = capsys.readouterr().out
    assert code == 1
    assert "No MCP servers configured to check." in out
