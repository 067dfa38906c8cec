"""
GitHub integration for prmerge.

Provides the paged REST API client and the models it projects responses into.
"""

from prmerge.core.github.api import DEFAULT_API_URL, DEFAULT_MAX_PAGES, GitHubApi
from prmerge.core.github.models import Collaborator, PullRequest, RepoInfo

__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_MAX_PAGES",
    "Collaborator",
    "GitHubApi",
    "PullRequest",
    "RepoInfo",
]
