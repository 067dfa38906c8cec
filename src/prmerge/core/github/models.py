"""
GitHub data models for prmerge.

Defines Pydantic models for the repository identifier and the minimal
projections of pull requests and collaborators that filtering needs.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

DEFAULT_HOST = "github.com"


def remote_url_pattern(host: str = DEFAULT_HOST) -> re.Pattern[str]:
    """
    Pattern matching the end of SSH (git@host:owner/name.git) and HTTPS
    (https://host/owner/name) remote URLs for ``host``.
    """
    return re.compile(re.escape(host) + r"[/:]([A-Za-z0-9_-]+)/([A-Za-z0-9_-]+)(?:\.git)?$")


REMOTE_URL_PATTERN = remote_url_pattern()


class RepoInfo(BaseModel):
    """
    GitHub repository identifier.

    Parsed from a git remote URL once per run and never modified.

    Example:
        >>> RepoInfo.from_remote_url("git@github.com:user/repo.git").full_name
        'user/repo'
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., description="Repository owner (user or organization)")
    repo: str = Field(..., description="Repository name")

    @computed_field
    @property
    def full_name(self) -> str:
        """Full repository name (owner/repo)."""
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return self.full_name

    @classmethod
    def from_remote_url(cls, remote_url: str, host: str = DEFAULT_HOST) -> RepoInfo | None:
        """
        Parse repository info from a git remote URL.

        Handles formats:
        - git@github.com:user/repo.git
        - https://github.com/user/repo
        - ssh://git@github.com/user/repo.git

        Args:
            remote_url: Git remote URL
            host: Web host of the GitHub instance (a GitHub Enterprise
                server, for example)

        Returns:
            RepoInfo or None if the URL does not point at a GitHub repository
        """
        if not remote_url:
            return None
        pattern = REMOTE_URL_PATTERN if host == DEFAULT_HOST else remote_url_pattern(host)
        match = pattern.search(remote_url.strip())
        if not match:
            return None
        return cls(owner=match.group(1), repo=match.group(2))


class PullRequest(BaseModel):
    """
    An open pull request, reduced to the fields used for filtering.
    """

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., description="PR number, unique within the repository")
    labels: frozenset[str] = Field(default_factory=frozenset, description="Label names")
    author: str = Field(default="", description="Login of the PR author")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PullRequest:
        """
        Project a pull request object from the REST API.

        Args:
            data: One element of ``GET /repos/{repo}/pulls``

        Returns:
            PullRequest instance
        """
        labels: set[str] = set()
        for label in data.get("labels") or []:
            if isinstance(label, dict) and isinstance(label.get("name"), str):
                labels.add(label["name"])

        user = data.get("user")
        author = user.get("login") if isinstance(user, dict) else None

        return cls(
            number=int(data["number"]),
            labels=frozenset(labels),
            author=author if isinstance(author, str) else "",
        )


class Collaborator(BaseModel):
    """A repository collaborator and whether they can push."""

    model_config = ConfigDict(frozen=True)

    login: str
    push: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Collaborator:
        """Project a user object from ``GET /repos/{repo}/collaborators``."""
        permissions = data.get("permissions")
        push = permissions.get("push") if isinstance(permissions, dict) else False
        return cls(login=str(data.get("login") or ""), push=push is True)
