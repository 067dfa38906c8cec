"""
Tests for the git command runner.
"""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from prmerge.core.errors import VcsCommandError
from prmerge.core.git import GitClient, format_command


def completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


class TestFormatCommand:
    def test_quotes_arguments(self):
        assert format_command(["git", "commit", "-m", "two words"]) == "git commit -m 'two words'"


class TestRun:
    """Tests for GitClient.run."""

    def test_runs_in_checkout(self, tmp_path):
        git = GitClient(tmp_path)

        with patch("prmerge.core.git.subprocess.run", return_value=completed()) as mock_run:
            git.run(["checkout", "main"], "Unable to switch")

        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "checkout", "main"]
        assert kwargs["cwd"] == tmp_path
        assert kwargs["check"] is False
        assert kwargs["timeout"] is None

    def test_streams_output_by_default(self, tmp_path):
        git = GitClient(tmp_path)

        with patch("prmerge.core.git.subprocess.run", return_value=completed()) as mock_run:
            git.run(["fetch", "origin"], "Unable to fetch")

        assert mock_run.call_args.kwargs["capture_output"] is False

    def test_quiet_captures_output(self, tmp_path):
        git = GitClient(tmp_path, quiet=True)

        with patch("prmerge.core.git.subprocess.run", return_value=completed(stdout="ok")) as mock_run:
            git.run(["fetch", "origin"], "Unable to fetch")

        assert mock_run.call_args.kwargs["capture_output"] is True

    def test_non_zero_exit_raises(self, tmp_path):
        git = GitClient(tmp_path)

        with patch("prmerge.core.git.subprocess.run", return_value=completed(returncode=128)):
            with pytest.raises(VcsCommandError) as exc_info:
                git.run(["fetch", "origin"], "Unable to fetch remote 'origin'")

        error = exc_info.value
        assert str(error) == "Unable to fetch remote 'origin'"
        assert error.operation == "Unable to fetch remote 'origin'"
        assert error.command == ["git", "fetch", "origin"]
        assert error.returncode == 128

    def test_missing_git_raises(self, tmp_path):
        git = GitClient(tmp_path)

        with patch("prmerge.core.git.subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(VcsCommandError) as exc_info:
                git.run(["status"], "Unable to check status")

        assert "could not run git" in str(exc_info.value)
        assert exc_info.value.returncode is None

    def test_timeout_raises(self, tmp_path):
        git = GitClient(tmp_path, timeout=5)
        expired = subprocess.TimeoutExpired(["git", "fetch"], 5)

        with patch("prmerge.core.git.subprocess.run", side_effect=expired) as mock_run:
            with pytest.raises(VcsCommandError, match="timed out"):
                git.run(["fetch", "origin"], "Unable to fetch")

        assert mock_run.call_args.kwargs["timeout"] == 5

    def test_on_command_sees_each_command(self, tmp_path):
        seen: list[list[str]] = []
        git = GitClient(tmp_path, on_command=seen.append)

        with patch("prmerge.core.git.subprocess.run", return_value=completed()):
            git.run(["checkout", "main"], "x")
            git.run(["fetch", "origin"], "y")

        assert seen == [["git", "checkout", "main"], ["git", "fetch", "origin"]]


class TestQueries:
    """Tests for the read-only helpers."""

    def test_get_remote_url(self):
        git = GitClient(Path("."))

        with patch(
            "prmerge.core.git.subprocess.run",
            return_value=completed(stdout="git@github.com:octo/widgets.git\n"),
        ) as mock_run:
            url = git.get_remote_url("origin")

        assert url == "git@github.com:octo/widgets.git"
        assert mock_run.call_args.args[0] == ["git", "config", "--get", "remote.origin.url"]

    def test_get_remote_url_unknown(self):
        git = GitClient(Path("."))

        with patch("prmerge.core.git.subprocess.run", return_value=completed(returncode=1)):
            assert git.get_remote_url("nope") is None

    def test_get_remote_url_without_git(self):
        git = GitClient(Path("."))

        with patch("prmerge.core.git.subprocess.run", side_effect=FileNotFoundError("git")):
            assert git.get_remote_url("origin") is None

    def test_branch_exists(self):
        git = GitClient(Path("."))

        with patch("prmerge.core.git.subprocess.run", return_value=completed()) as mock_run:
            assert git.branch_exists("integration") is True

        assert mock_run.call_args.args[0][:3] == ["git", "rev-parse", "--verify"]
        assert mock_run.call_args.args[0][-1] == "integration"

    def test_branch_missing(self):
        git = GitClient(Path("."))

        with patch("prmerge.core.git.subprocess.run", return_value=completed(returncode=1)):
            assert git.branch_exists("integration") is False

    def test_queries_do_not_echo(self):
        seen: list[list[str]] = []
        git = GitClient(Path("."), on_command=seen.append)

        with patch("prmerge.core.git.subprocess.run", return_value=completed()):
            git.branch_exists("x")
            git.get_remote_url("origin")

        assert seen == []
