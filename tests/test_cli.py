"""Integration tests for CLI commands."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from callgraph_cli import __version__
from callgraph_cli.cli import app

runner = CliRunner()


@pytest.fixture
def clean_session_file(tmp_path: Path, session_document: dict) -> Path:
    """The sample session without entries that would log warnings."""
    session_document["files"] = session_document["files"][:2]
    session_document["incomingCalls"] = session_document["incomingCalls"][:1]
    path = tmp_path / "clean.json"
    path.write_text(json.dumps(session_document), encoding="utf-8")
    return path


class TestRenderCommand:
    """Tests for 'cgv render'."""

    def test_render_dot_to_stdout(self, clean_session_file: Path):
        result = runner.invoke(app, ["render", str(clean_session_file)])

        assert result.exit_code == 0
        assert result.stdout.startswith("digraph {")
        assert 'datafrom="1:10_5"' in result.stdout

    def test_render_mermaid(self, clean_session_file: Path):
        result = runner.invoke(app, ["render", str(clean_session_file), "--format", "mermaid"])

        assert result.exit_code == 0
        assert result.stdout.startswith("flowchart LR")
        assert "2_4_17 -.-> 1_3_1" in result.stdout

    def test_render_json_to_file(self, session_file: Path, tmp_path: Path):
        target = tmp_path / "out" / "graph.json"

        result = runner.invoke(app, ["render", str(session_file), "-f", "json", "-o", str(target)])

        assert result.exit_code == 0
        assert "Exported json graph" in result.output
        data = json.loads(target.read_text(encoding="utf-8"))
        assert [f["id"] for f in data["files"]] == [1, 2]
        assert {r["kind"] for r in data["relations"]} == {"call", "implements"}

    def test_lang_override_keeps_go_test_file(self, session_file: Path, tmp_path: Path):
        target = tmp_path / "graph.json"

        result = runner.invoke(app, ["render", str(session_file), "-f", "json", "--lang", "default", "-o", str(target)])

        assert result.exit_code == 0
        paths = [f["path"] for f in json.loads(target.read_text(encoding="utf-8"))["files"]]
        assert "/work/shop/cart/cart_test.go" in paths

    def test_unknown_format(self, session_file: Path):
        result = runner.invoke(app, ["render", str(session_file), "--format", "svg"])

        assert result.exit_code != 0

    def test_invalid_session(self, tmp_path: Path):
        broken = tmp_path / "broken.json"
        broken.write_text("[not json", encoding="utf-8")

        result = runner.invoke(app, ["render", str(broken)])

        assert result.exit_code == 1

    def test_missing_session_file(self, tmp_path: Path):
        result = runner.invoke(app, ["render", str(tmp_path / "nope.json")])

        assert result.exit_code != 0


class TestSearchCommands:
    """Tests for 'cgv search', 'cgv files' and 'cgv kinds'."""

    def test_search_symbols(self, clean_session_file: Path):
        result = runner.invoke(app, ["search", str(clean_session_file), "checkout"])

        assert result.exit_code == 0
        assert "Checkout" in result.stdout

    def test_search_no_match(self, clean_session_file: Path):
        result = runner.invoke(app, ["search", str(clean_session_file), "zzz"])

        assert result.exit_code == 0
        assert "No matching symbols." in result.stdout

    def test_files(self, clean_session_file: Path):
        result = runner.invoke(app, ["files", str(clean_session_file), "db"])

        assert result.exit_code == 0
        assert result.stdout == "   2  /work/shop/db/sql.go\n"

    def test_kinds(self, clean_session_file: Path):
        result = runner.invoke(app, ["kinds", str(clean_session_file), "interface"])

        assert result.exit_code == 0
        assert "Store" in result.stdout
        assert "Checkout" not in result.stdout

    def test_unknown_kind(self, clean_session_file: Path):
        result = runner.invoke(app, ["kinds", str(clean_session_file), "gizmo"])

        assert result.exit_code == 2


class TestConfigCommands:
    """Tests for 'cgv config'."""

    def test_show_defaults(self):
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "format = 'dot'" in result.stdout
        assert "language = 'default'" in result.stdout

    def test_set_then_render_uses_default_format(self, clean_session_file: Path):
        result = runner.invoke(app, ["config", "set", "--format", "mermaid"])
        assert result.exit_code == 0
        assert "Saved render defaults" in result.stdout

        shown = runner.invoke(app, ["config", "show"])
        assert "format = 'mermaid'" in shown.stdout

        rendered = runner.invoke(app, ["render", str(clean_session_file)])
        assert rendered.stdout.startswith("flowchart LR")

    def test_set_rejects_unknown_values(self):
        assert runner.invoke(app, ["config", "set", "--format", "svg"]).exit_code == 2
        assert runner.invoke(app, ["config", "set", "--lang", "cobol"]).exit_code == 2

    def test_reset(self):
        runner.invoke(app, ["config", "set", "--lang", "rust"])

        result = runner.invoke(app, ["config", "reset"])

        assert result.exit_code == 0
        assert "language = 'default'" in runner.invoke(app, ["config", "show"]).stdout


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"callgraph-cli v{__version__}" in result.stdout


def test_languages_lists_strategies():
    result = runner.invoke(app, ["languages"])

    assert result.exit_code == 0
    assert "typescript jsx" in result.stdout
    assert "rust" in result.stdout
