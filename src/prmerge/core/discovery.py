"""
Pull request discovery.

Finds the open PRs targeting a base branch and narrows them down by label
and, optionally, by whether the author has push access.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from prmerge.core.github.api import DEFAULT_MAX_PAGES, GitHubApi
from prmerge.core.github.models import PullRequest, RepoInfo

logger = logging.getLogger(__name__)


def filter_pull_requests(
    prs: Iterable[PullRequest],
    label: str | None = None,
    trusted_authors: set[str] | None = None,
) -> list[PullRequest]:
    """
    Apply the label and trusted-author filters.

    The author check only happens together with the label check: without a
    label every PR is kept, whatever ``trusted_authors`` holds.

    Args:
        prs: Pull requests in API order
        label: Label a PR must carry, or None for no filtering
        trusted_authors: Logins allowed when filtering by label, or None

    Returns:
        The matching pull requests, order preserved
    """
    if label is None:
        return list(prs)

    kept: list[PullRequest] = []
    for pr in prs:
        if label not in pr.labels:
            continue
        if trusted_authors is not None and pr.author not in trusted_authors:
            logger.info("Skipping PR %d: author '%s' cannot push", pr.number, pr.author)
            continue
        kept.append(pr)
    return kept


def discover_pull_requests(
    api: GitHubApi,
    repo: RepoInfo,
    base: str,
    label: str | None = None,
    require_trusted_author: bool = False,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> list[int]:
    """
    Find the numbers of the open PRs to integrate.

    Args:
        api: GitHub API client
        repo: Repository to query
        base: Base branch the PRs must target
        label: Optional label filter
        require_trusted_author: Only keep labelled PRs whose author can push
        max_pages: Page budget for each list request

    Returns:
        PR numbers in the order the API returned them (possibly empty)

    Raises:
        HttpError: If a request fails
        ParseError: If a response is malformed
    """
    trusted: set[str] | None = None
    if require_trusted_author:
        trusted = api.fetch_trusted_authors(repo, max_pages)
        if label is None:
            logger.warning("--trusted-only has no effect without --label")

    prs = api.fetch_pull_requests(repo, base, max_pages)
    logger.debug("API returned %d open PR(s) against %s", len(prs), base)

    return [pr.number for pr in filter_pull_requests(prs, label, trusted)]
