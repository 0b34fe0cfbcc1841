"""Tests for `linknav links`."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner, Result

from linknav.cli import cli


def _invoke(cli_runner: CliRunner, vault_root: Path, *args: str) -> Result:
    return cli_runner.invoke(cli, ["--vault", str(vault_root), *args])


class TestLinksCommand:
    def test_human_output(self, cli_runner: CliRunner, vault_root: Path) -> None:
        result = _invoke(cli_runner, vault_root, "links", "Note A")
        assert result.exit_code == 0, result.output
        assert "←2  Note A  →3" in result.output
        assert "#alpha #beta #gamma" in result.output
        assert "diagram.png" in result.output

    def test_by_vault_path(self, cli_runner: CliRunner, vault_root: Path) -> None:
        result = _invoke(cli_runner, vault_root, "links", "MOC.canvas")
        assert result.exit_code == 0
        assert "MOC" in result.output

    def test_json(self, cli_runner: CliRunner, vault_root: Path) -> None:
        result = _invoke(cli_runner, vault_root, "--json", "links", "Note A", "--refresh")
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["ok"] is True
        assert payload["data"]["outlinks"] == ["Note B", "Note C"]
        assert payload["data"]["canvas_links"] == ["MOC"]

    def test_not_found(self, cli_runner: CliRunner, vault_root: Path) -> None:
        result = _invoke(cli_runner, vault_root, "links", "Ghost")
        assert result.exit_code == 1
        assert "No document found for 'Ghost'" in result.output

    def test_quiet(self, cli_runner: CliRunner, vault_root: Path) -> None:
        result = _invoke(cli_runner, vault_root, "-q", "links", "Note B")
        assert result.exit_code == 0
        assert result.output.strip() == "OK: links"

    def test_verbose_shows_telemetry(self, cli_runner: CliRunner, vault_root: Path) -> None:
        result = _invoke(cli_runner, vault_root, "-v", "links", "Note B")
        assert result.exit_code == 0
        assert "NavigatorService.links" in result.output
