"""Tests for the sb developer CLI."""

import json

import pytest
from click.testing import CliRunner

from switchbar.cli import sb


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(sb, "configure_logging", lambda *args, **kwargs: None)


@pytest.fixture
def snapshot_file(tmp_path):
    path = tmp_path / "snapshot.yaml"
    path.write_text(
        "tabs:\n"
        "  - id: 1\n"
        "    title: Rust Book\n"
        "    url: https://doc.rust-lang.org/book/\n"
        "bookmarks:\n"
        "  - title: Python docs\n"
        "    url: https://docs.python.org/3/\n",
        encoding="utf-8",
    )
    return path


def test_search_json(snapshot_file):
    result = CliRunner().invoke(sb.cli, ["search", str(snapshot_file), "rust", "--no-favicons", "--json"])
    assert result.exit_code == 0, result.output
    options = json.loads(result.output)
    assert [o["type"] for o in options] == ["tab", "command"]
    assert options[0]["title"] == "Rust Book"
    assert options[0]["tabId"] == 1
    assert options[1]["searchTerm"] == "rust"


def test_search_table(snapshot_file):
    result = CliRunner().invoke(sb.cli, ["search", str(snapshot_file), "--no-favicons"])
    assert result.exit_code == 0, result.output
    assert "Rust Book" in result.output
    assert "Python docs" in result.output


def test_search_limit(snapshot_file):
    result = CliRunner().invoke(sb.cli, ["search", str(snapshot_file), "--no-favicons", "--json", "-l", "1"])
    assert result.exit_code == 0, result.output
    assert len(json.loads(result.output)) == 1


def test_tokenize():
    result = CliRunner().invoke(sb.cli, ["tokenize", "Hello-World 2024", "--field", "title"])
    assert result.exit_code == 0, result.output
    assert result.output.split() == ["hello", "world"]


def test_config_output(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("pipeline:\n  display_cap: 9\n", encoding="utf-8")
    result = CliRunner().invoke(sb.cli, ["--config", str(path), "config"])
    assert result.exit_code == 0, result.output
    assert "display_cap: 9" in result.output


def test_bad_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("pipeline:\n  display_cap: -4\n", encoding="utf-8")
    result = CliRunner().invoke(sb.cli, ["--config", str(path), "config"])
    assert result.exit_code != 0
    assert "Invalid config" in result.output
