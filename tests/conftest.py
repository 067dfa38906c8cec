"""
Pytest configuration and shared fixtures.

Provides a fake git client that records commands, an httpx MockTransport
based GitHub API, and isolation from the user's real config and env.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from prmerge.core.errors import VcsCommandError
from prmerge.core.github.api import GitHubApi
from prmerge.core.github.models import RepoInfo

API = "https://api.github.com"


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.config/prmerge and PRMERGE_* vars."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in [
        "PRMERGE_AUTH",
        "PRMERGE_REMOTE",
        "PRMERGE_BASE",
        "PRMERGE_API_URL",
        "PRMERGE_LABEL",
        "PRMERGE_TRUSTED_ONLY",
        "PRMERGE_CONTINUE_ON_FAILURE",
        "PRMERGE_QUIET",
        "PRMERGE_MAX_PAGES",
        "PRMERGE_HTTP_TIMEOUT",
        "PRMERGE_GIT_TIMEOUT",
    ]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project_dir(tmp_path):
    """Provide an empty checkout folder."""
    project = tmp_path / "project"
    project.mkdir()
    return project


# ==============================================================================
# Git Fixtures
# ==============================================================================


class FakeGit:
    """
    Stand-in for GitClient that records commands instead of running them.

    A command fails when its argument list starts with one of the prefixes
    in ``failing``. The ours-biased merge also fails for any PR in
    ``conflicts``, keyed on the PR most recently fetched.
    ``merge_started`` is what a MERGE_HEAD lookup reports after such a
    failure.
    """

    def __init__(
        self,
        cwd: Path = Path("."),
        remotes: dict[str, str] | None = None,
        branches: set[str] | None = None,
        failing: list[list[str]] | None = None,
        conflicts: set[int] | None = None,
    ) -> None:
        self.cwd = cwd
        self.remotes = remotes or {}
        self.branches = branches or set()
        self.failing = failing or []
        self.conflicts = conflicts or set()
        self.fetched: int | None = None
        self.merge_started = True
        self.commands: list[list[str]] = []

    def fail_on(self, *args: str) -> None:
        self.failing.append(list(args))

    def run(self, args: list[str], operation: str) -> None:
        self.commands.append(list(args))
        if args[0] == "fetch" and len(args) == 3:
            self.fetched = int(args[2].split("/")[1])
        if args[:2] == ["merge", "--no-edit"] and self.fetched in self.conflicts:
            raise VcsCommandError(operation, ["git", *args], 1)
        for prefix in self.failing:
            if args[: len(prefix)] == prefix:
                raise VcsCommandError(operation, ["git", *args], 1)

    def succeeds(self, args: list[str]) -> bool:
        if args[-1:] == ["MERGE_HEAD"]:
            return self.merge_started
        return True

    def get_remote_url(self, name: str) -> str | None:
        return self.remotes.get(name)

    def branch_exists(self, name: str) -> bool:
        return name in self.branches


@pytest.fixture
def fake_git():
    """Provide a FakeGit with an 'origin' remote on GitHub."""
    return FakeGit(remotes={"origin": "git@github.com:octo/widgets.git"})


# ==============================================================================
# GitHub API Fixtures
# ==============================================================================


@pytest.fixture
def repo():
    return RepoInfo(owner="octo", repo="widgets")


def pr_json(number: int, labels: list[str] | None = None, author: str = "alice") -> dict[str, Any]:
    """Build a pull request object the way the REST API returns it."""
    return {
        "number": number,
        "title": f"PR {number}",
        "state": "open",
        "labels": [{"id": i, "name": name} for i, name in enumerate(labels or [])],
        "user": {"login": author, "type": "User"},
        "head": {"sha": "0" * 40},
    }


def collaborator_json(login: str, push: bool) -> dict[str, Any]:
    return {
        "login": login,
        "permissions": {"pull": True, "push": push, "admin": False},
    }


def paged_handler(pages_by_path: dict[str, list[list[Any]]]) -> Callable[[httpx.Request], httpx.Response]:
    """
    Serve list endpoints page by page.

    Each path maps to a list of pages; page N links to page N+1 with a
    ``Link`` header until the last page.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        pages = pages_by_path.get(request.url.path)
        if pages is None:
            return httpx.Response(404, json={"message": "Not Found"})
        page = int(request.url.params.get("page", "1"))
        headers = {}
        if page < len(pages):
            next_url = request.url.copy_set_param("page", str(page + 1))
            headers["Link"] = f'<{next_url}>; rel="next", <{next_url}>; rel="last"'
        return httpx.Response(200, json=pages[page - 1], headers=headers)

    return handler


@pytest.fixture
def make_api():
    """Build a GitHubApi whose HTTP traffic goes to a handler function."""
    created: list[GitHubApi] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response], auth: str | None = None) -> GitHubApi:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        api = GitHubApi(auth, client=client)
        created.append(api)
        return api

    yield _make

    for api in created:
        api._client.close()
