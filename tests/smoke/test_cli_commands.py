"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json

import pytest
from loguru import logger
from rich.console import Console
from typer.testing import CliRunner

from studyloop.cli import main as cli_main
from studyloop.cli.main import app

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

NOW = "2024-06-15T12:00:00"

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Render tables without wrapping so names stay intact."""
    monkeypatch.setattr(cli_main, "console", Console(width=200))
    yield
    # The CLI bound a sink to the runner's stream, which is closed now
    logger.remove()


@pytest.fixture
def history(tmp_path):
    """History snapshot with two categories and a few days of activity."""
    data = {
        "categories": [
            {"id": "basics", "name": "Basics", "topic_ids": ["variables", "optionals"], "sort_order": 1},
            {"id": "advanced", "name": "Advanced", "topic_ids": ["generics"], "sort_order": 2},
        ],
        "topics": [
            {"id": "variables", "name": "Variables", "sort_order": 1},
            {"id": "optionals", "name": "Optionals", "sort_order": 2},
            {"id": "generics", "name": "Generics", "prerequisites": ["optionals"], "sort_order": 3},
        ],
        "questions": [
            {"id": f"{topic}-{n}", "topic_id": topic, "category_id": category}
            for topic, category in (
                ("variables", "basics"),
                ("optionals", "basics"),
                ("generics", "advanced"),
            )
            for n in (1, 2)
        ],
        "answers": [
            {"question_id": "variables-1", "topic_id": "variables", "was_correct": True,
             "answered_at": "2024-06-15T09:00:00"},
            {"question_id": "variables-2", "topic_id": "variables", "was_correct": False,
             "answered_at": "2024-06-14T09:00:00"},
            {"question_id": "optionals-1", "topic_id": "optionals", "was_correct": False,
             "answered_at": "2024-06-13T09:00:00"},
        ],
        "sessions": [
            {"date": f"2024-06-{day}", "total_questions": 10, "correct_answers": 9}
            for day in (13, 14, 15)
        ],
    }
    path = tmp_path / "history.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def run_cli_command(*args: str):
    """Invoke the CLI in-process and return the click Result."""
    return runner.invoke(app, [str(a) for a in args])


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        """Main help should list every command."""
        result = run_cli_command("--help")

        assert result.exit_code == 0, result.output
        for command in ("proficiency", "recommend", "select", "streak", "insights"):
            assert command in result.output


class TestAnalyticsCommands:
    """Commands that render tables and panels."""

    def test_proficiency(self, history):
        result = run_cli_command("proficiency", history, "--now", NOW)

        assert result.exit_code == 0, result.output
        assert "Variables" in result.output
        assert "Basics" in result.output

    def test_recommend(self, history):
        result = run_cli_command("recommend", history, "--now", NOW)

        assert result.exit_code == 0, result.output
        assert "Recommendations" in result.output

    def test_insights(self, history):
        result = run_cli_command("insights", history, "--now", NOW)

        assert result.exit_code == 0, result.output
        assert "Strong Performance" in result.output

    def test_streak(self, history):
        result = run_cli_command("streak", history, "--now", NOW)

        assert result.exit_code == 0, result.output
        assert "Current streak" in result.output
        assert "3" in result.output


class TestSelectCommand:
    def test_select_from_category(self, history):
        result = run_cli_command(
            "select", history, "-n", "2", "-c", "basics", "--seed", "7", "--now", NOW
        )

        assert result.exit_code == 0, result.output
        ids = [line for line in result.output.splitlines() if line.startswith(("variables", "optionals"))]
        assert len(ids) == 2

    def test_no_questions_exits_with_error(self, history):
        result = run_cli_command("select", history, "-c", "networking", "--now", NOW)

        assert result.exit_code == 1
        assert "No questions" in result.output


class TestInputErrors:
    def test_invalid_snapshot(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"answers": [{"question_id": "q1"}]}), encoding="utf-8")

        result = run_cli_command("proficiency", path)
        assert result.exit_code == 1
        assert "Invalid snapshot" in result.output

    def test_missing_file(self, tmp_path):
        result = run_cli_command("proficiency", tmp_path / "nope.json")
        assert result.exit_code != 0
