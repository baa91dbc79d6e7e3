"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from strata.core.categories import ALL_CATEGORIES

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def cli_env(tmp_path):
    """Environment pointing the CLI at a throwaway profile and question bank."""
    questions = [
        {"id": f"{category.value}-{i}", "tag": category.value, "question": "Q", "answer": "a"}
        for category in ALL_CATEGORIES
        for i in range(12)
    ]
    catalog_path = tmp_path / "questions.json"
    catalog_path.write_text(json.dumps(questions), encoding="utf-8")

    env = dict(os.environ)
    env.update(
        {
            "STRATA_DATA_DIR": str(tmp_path / "data"),
            "STRATA_CATALOG_PATH": str(catalog_path),
            "STRATA_RANDOM_SEED": "7",
            "PYTHONIOENCODING": "utf-8",
            "COLUMNS": "160",
        }
    )
    return env


def run_cli_command(args: list[str], env: dict, timeout: int = 30) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        args: Arguments after 'python -m strata.delivery.cli'
        env: Process environment
        timeout: Maximum time to wait

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    result = subprocess.run(
        [sys.executable, "-m", "strata.delivery.cli", *args],
        cwd=PROJECT_ROOT,
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8",
        timeout=timeout,
    )

    return result.returncode, result.stdout, result.stderr


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self, cli_env):
        code, stdout, stderr = run_cli_command(["--help"], cli_env)

        assert code == 0, f"Help failed: {stderr}"
        assert "plan" in stdout
        assert "stats" in stdout


class TestCLIPlan:
    """Test session previews."""

    def test_daily_plan(self, cli_env):
        code, stdout, stderr = run_cli_command(["plan", "daily"], cli_env)

        assert code == 0, f"Plan failed: {stderr}"
        assert "7 items" in stdout

    def test_empty_repair(self, cli_env):
        code, stdout, stderr = run_cli_command(["plan", "repair"], cli_env)

        assert code == 0, f"Plan failed: {stderr}"
        assert "No items" in stdout

    def test_category_without_name_fails(self, cli_env):
        code, _, _ = run_cli_command(["plan", "category"], cli_env)
        assert code == 1


class TestCLIProfile:
    """Test profile management commands."""

    def test_stats_runs(self, cli_env):
        code, stdout, stderr = run_cli_command(["stats"], cli_env)

        assert code == 0, f"Stats failed: {stderr}"
        assert "Study streak" in stdout

    def test_report_without_answers(self, cli_env):
        code, stdout, stderr = run_cli_command(["report"], cli_env)

        assert code == 0, f"Report failed: {stderr}"
        assert "No answers recorded yet" in stdout
        assert "Kanji specimens" in stdout

    def test_name_then_stats(self, cli_env):
        code, _, stderr = run_cli_command(["name", "Mika"], cli_env)
        assert code == 0, f"Name failed: {stderr}"

        _, stdout, _ = run_cli_command(["stats"], cli_env)
        assert "Mika" in stdout

    def test_export_import_roundtrip(self, cli_env, tmp_path):
        backup = tmp_path / "backup.json"
        run_cli_command(["name", "Backup"], cli_env)

        code, _, stderr = run_cli_command(["export", str(backup)], cli_env)
        assert code == 0, f"Export failed: {stderr}"
        assert json.loads(backup.read_text(encoding="utf-8"))["profile"]["name"] == "Backup"

        run_cli_command(["reset", "--yes"], cli_env)
        code, _, stderr = run_cli_command(["import", str(backup), "--yes"], cli_env)
        assert code == 0, f"Import failed: {stderr}"

        _, stdout, _ = run_cli_command(["stats"], cli_env)
        assert "Backup" in stdout

    def test_missing_question_bank(self, cli_env, tmp_path):
        cli_env["STRATA_CATALOG_PATH"] = str(tmp_path / "nowhere.json")

        code, stdout, _ = run_cli_command(["stats"], cli_env)
        assert code == 1
        assert "Question bank not found" in stdout

    def test_import_rejects_garbage(self, cli_env, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("[1, 2]", encoding="utf-8")

        code, stdout, _ = run_cli_command(["import", str(bad), "--yes"], cli_env)
        assert code == 1
        assert "Could not import" in stdout
