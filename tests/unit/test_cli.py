"""Test CLI commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from geoffload import __version__
from geoffload.cli import app
from geoffload.graph import SqliteEntityStore

if TYPE_CHECKING:
    from pathlib import Path

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep stray geoffload.yaml files and env settings out of CLI runs."""
    monkeypatch.delenv("GEOFFLOAD_DATABASE", raising=False)
    monkeypatch.delenv("GEOFFLOAD_ENCODING", raising=False)
    monkeypatch.chdir(tmp_path)


def test_version_command() -> None:
    """Test geoffload version command."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert f"v{__version__}" in result.stdout


def test_no_args_shows_help() -> None:
    """Test that no arguments shows help."""
    result = runner.invoke(app, [])
    assert result.exit_code == 2
    assert "geoffload" in result.stdout


# --- Parse Command Tests ---


def test_parse_summary(fixtures_dir: Path) -> None:
    """parse prints node and relationship tables."""
    result = runner.invoke(app, ["parse", str(fixtures_dir / "movies.geoff")])
    assert result.exit_code == 0
    assert "Nodes (3)" in result.stdout
    assert "Relationships (4)" in result.stdout
    assert "keanu" in result.stdout
    assert "ACTED_IN" in result.stdout


def test_parse_json(fixtures_dir: Path) -> None:
    """parse --json emits the exported record."""
    result = runner.invoke(app, ["parse", str(fixtures_dir / "hookstest.geoff"), "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert [n["name"] for n in data["nodes"]] == ["ingrid10", "ingrid20", "ingrid30"]
    assert data["nodes"][2]["hook"] == {
        "label": "Person",
        "keys": ["name", "age"],
        "optional": True,
    }
    assert len(data["relationships"]) == 3


def test_parse_stdin() -> None:
    """A '-' path reads the document from stdin."""
    result = runner.invoke(app, ["parse", "-", "--json"], input="(a)-[:R]->(b)")
    assert result.exit_code == 0
    assert json.loads(result.stdout)["relationships"][0]["type"] == "R"


def test_parse_error_exits_nonzero(tmp_path: Path) -> None:
    bad = tmp_path / "bad.geoff"
    bad.write_text("(a)-[:X]-(b)")
    result = runner.invoke(app, ["parse", str(bad)])
    assert result.exit_code == 1
    assert "Parse error" in result.stdout
    assert "no direction" in result.stdout


def test_parse_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["parse", str(tmp_path / "nope.geoff")])
    assert result.exit_code == 1
    assert "File not found" in result.stdout


# --- Load Command Tests ---


def test_load_into_database(tmp_path: Path, fixtures_dir: Path) -> None:
    """load writes entities and reports named ids."""
    db = tmp_path / "out" / "graph.db"
    result = runner.invoke(
        app, ["load", str(fixtures_dir / "hookstest.geoff"), "--database", str(db)]
    )
    assert result.exit_code == 0
    assert "ingrid10" in result.stdout
    assert "ingrid30" not in result.stdout

    store = SqliteEntityStore(db)
    try:
        assert store.entity_count() == 2
        assert store.relationship_count() == 2
    finally:
        store.close()


def test_load_uses_config_database(tmp_path: Path, fixtures_dir: Path) -> None:
    (tmp_path / "geoffload.yaml").write_text("database: configured.db\n")
    result = runner.invoke(app, ["load", str(fixtures_dir / "movies.geoff")])
    assert result.exit_code == 0
    assert (tmp_path / "configured.db").exists()


def test_load_bad_config(tmp_path: Path, fixtures_dir: Path) -> None:
    result = runner.invoke(
        app,
        ["load", str(fixtures_dir / "movies.geoff"), "--config", str(tmp_path / "missing.yaml")],
    )
    assert result.exit_code == 1
    assert "Config file not found" in result.stdout


def test_log_option_writes_jsonl(tmp_path: Path, fixtures_dir: Path) -> None:
    """--log writes structured events to debug.jsonl."""
    logs = tmp_path / "logs"
    result = runner.invoke(
        app,
        [
            "--log",
            str(logs),
            "load",
            str(fixtures_dir / "movies.geoff"),
            "--database",
            str(tmp_path / "g.db"),
        ],
    )
    assert result.exit_code == 0
    events = [
        json.loads(line)["message"]
        for line in (logs / "debug.jsonl").read_text().splitlines()
    ]
    assert "subgraph_read" in events
    assert "subgraph_loaded" in events
