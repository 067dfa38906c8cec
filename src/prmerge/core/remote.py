"""Resolve the GitHub repository behind a local git remote."""

from __future__ import annotations

import logging

from prmerge.core.errors import ConfigurationError
from prmerge.core.git import GitClient
from prmerge.core.github.models import DEFAULT_HOST, RepoInfo

logger = logging.getLogger(__name__)


def resolve_repository(
    git: GitClient,
    remote_name: str = "origin",
    host: str = DEFAULT_HOST,
) -> RepoInfo:
    """
    Find the GitHub repository a remote points at.

    Args:
        git: Client for the local checkout
        remote_name: Name of the git remote
        host: Web host the remote URL must point at

    Returns:
        RepoInfo for the remote's URL

    Raises:
        ConfigurationError: If the name is empty, the remote has no URL, or the
            URL is not a repository URL on ``host``
    """
    if not remote_name:
        raise ConfigurationError("No remote name provided")

    url = git.get_remote_url(remote_name)
    if not url:
        raise ConfigurationError(
            f"Cannot determine url of remote '{remote_name}' -- "
            "is this a valid git repository and is git installed?",
            remote=remote_name,
        )

    repo = RepoInfo.from_remote_url(url, host)
    if repo is None:
        raise ConfigurationError(
            f"Cannot find GitHub repository that belongs to '{url}'.",
            remote=remote_name,
            url=url,
            host=host,
        )

    logger.debug("Remote %s (%s) resolved to %s", remote_name, url, repo.full_name)
    return repo
