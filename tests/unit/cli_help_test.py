"""Tests for the CLI: -h on every command, and the commands against small repositories."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from code_assist.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("CODE_ASSIST_CONFIG", raising=False)


@pytest.mark.parametrize(
    "args",
    [
        [],
        ["detect"],
        ["structure"],
        ["search"],
        ["grep"],
        ["parse"],
        ["context"],
        ["serve"],
        ["serve", "mcp"],
    ],
    ids=["root", "detect", "structure", "search", "grep", "parse", "context", "serve", "serve-mcp"],
)
def test_short_help_flag(args: list[str]) -> None:
    result = runner.invoke(app, [*args, "-h"])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_detect(rust_repo: Path) -> None:
    result = runner.invoke(app, ["detect", str(rust_repo)])
    assert result.exit_code == 0
    assert "Project type: Rust" in result.output
    assert "Cargo.toml" in result.output


def test_detect_missing_root(tmp_path: Path) -> None:
    result = runner.invoke(app, ["detect", str(tmp_path / "missing")])
    assert result.exit_code == 1


def test_invalid_config_file(tmp_path: Path, rust_repo: Path) -> None:
    config = tmp_path / "bad.toml"
    config.write_text("[context]\nbudget_bytes = -1\n")
    result = runner.invoke(app, ["-c", str(config), "detect", str(rust_repo)])
    assert result.exit_code == 1


def test_structure(rust_repo: Path) -> None:
    result = runner.invoke(app, ["structure", str(rust_repo)])
    assert result.exit_code == 0
    assert "src/" in result.output
    assert ".rs" in result.output


def test_search(rust_repo: Path) -> None:
    result = runner.invoke(app, ["search", "reset password", "--root", str(rust_repo)])
    assert result.exit_code == 0
    assert "src/auth.rs" in result.output
    assert "3: fn reset_password() {" in result.output


def test_grep_invalid_pattern(rust_repo: Path) -> None:
    result = runner.invoke(app, ["grep", "(", "-r", str(rust_repo)])
    assert result.exit_code == 1


def test_grep(rust_repo: Path) -> None:
    result = runner.invoke(app, ["grep", "reset_password", "-r", str(rust_repo)])
    assert result.exit_code == 0
    assert "(1 rows)" in result.output


def test_parse_json(rust_repo: Path) -> None:
    result = runner.invoke(app, ["parse", str(rust_repo / "src" / "auth.rs"), "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["language"] == "rust"
    assert [s["name"] for s in data["symbols"]] == ["reset_password"]


def test_parse_unsupported_language(rust_repo: Path) -> None:
    result = runner.invoke(app, ["parse", str(rust_repo / "src" / "auth.rs"), "--language", "cobol"])
    assert result.exit_code == 1


def test_context(rust_repo: Path) -> None:
    result = runner.invoke(app, ["context", "reset password", "--root", str(rust_repo)])
    assert result.exit_code == 0
    assert result.stdout.startswith("# Project context\n")
    assert "- function reset_password [3-6]" in result.stdout


def test_context_negative_budget(rust_repo: Path) -> None:
    result = runner.invoke(app, ["context", "reset", "--root", str(rust_repo), "--budget", "-1"])
    assert result.exit_code == 1
