"""
Integration service.

Runs the whole pipeline for one RunConfig: check the folder, resolve the
GitHub repository, discover PRs, recreate the branch and merge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from prmerge.core.branch import init_branch
from prmerge.core.config.models import RunConfig
from prmerge.core.discovery import discover_pull_requests
from prmerge.core.errors import ConfigurationError
from prmerge.core.git import CommandCallback, GitClient
from prmerge.core.github.api import GitHubApi, web_host
from prmerge.core.github.models import RepoInfo
from prmerge.core.merge import MergeEngine, MergeEventCallback, MergeOutcome
from prmerge.core.remote import resolve_repository

logger = logging.getLogger(__name__)


class IntegrationEventCallback(MergeEventCallback, Protocol):
    """Progress callbacks for a whole run."""

    def on_folder(self, folder: Path) -> None:
        """Called once the checkout folder has been validated."""
        ...

    def on_repository(self, repo: RepoInfo) -> None:
        """Called once the GitHub repository is known."""
        ...

    def on_discovered(self, numbers: list[int], label: str | None) -> None:
        """Called with the PR numbers that will be merged."""
        ...

    def on_branch_ready(self, name: str) -> None:
        """Called after the integration branch is checked out."""
        ...


@dataclass
class IntegrationReport:
    """Summary of a run that got as far as merging."""

    repo: RepoInfo
    branch: str
    discovered: list[int]
    outcome: MergeOutcome
    continue_on_failure: bool

    @property
    def ok(self) -> bool:
        return self.outcome.ok


class IntegrationService:
    """
    Ties the components together for a single run.

    Errors before the merge step (configuration, API, branch creation) are
    raised; the merge step reports through the returned IntegrationReport.

    Example:
        >>> report = IntegrationService(config).run()
        >>> report.outcome.merged
        [3, 5]
    """

    def __init__(
        self,
        config: RunConfig,
        callback: IntegrationEventCallback | None = None,
        on_command: CommandCallback | None = None,
        api: GitHubApi | None = None,
    ) -> None:
        self.config = config
        self.callback = callback
        self.on_command = on_command
        self._api = api

    def check_folder(self) -> None:
        """
        Make sure the configured folder is a directory.

        Raises:
            ConfigurationError: If it is missing or not a directory
        """
        folder = self.config.folder
        if not folder.is_dir():
            raise ConfigurationError(f"'{folder}' is not a directory", folder=str(folder))

    def make_git(self) -> GitClient:
        return GitClient(
            self.config.folder,
            quiet=self.config.quiet,
            timeout=self.config.git_timeout,
            on_command=self.on_command,
        )

    def make_api(self) -> GitHubApi:
        if self._api is not None:
            return self._api
        return GitHubApi(
            self.config.auth,
            api_url=self.config.api_url,
            timeout=self.config.http_timeout,
        )

    def discover(self, repo: RepoInfo) -> list[int]:
        """Find the PR numbers to merge for ``repo``."""
        api = self.make_api()
        try:
            return discover_pull_requests(
                api,
                repo,
                self.config.base,
                label=self.config.label,
                require_trusted_author=self.config.trusted_only,
                max_pages=self.config.max_pages,
            )
        finally:
            if api is not self._api:
                api.close()

    def run(self) -> IntegrationReport:
        """
        Execute the run.

        Returns:
            IntegrationReport with the merge outcome

        Raises:
            ConfigurationError: If the folder or remote is unusable
            HttpError: If an API request fails
            ParseError: If an API response is malformed
            VcsCommandError: If creating the branch fails
        """
        config = self.config
        self.check_folder()
        if self.callback is not None:
            self.callback.on_folder(config.folder)
        git = self.make_git()

        repo = resolve_repository(git, config.remote, web_host(config.api_url))
        logger.info("Using repository %s", repo.full_name)
        if self.callback is not None:
            self.callback.on_repository(repo)

        numbers = self.discover(repo)
        logger.info("Discovered %d PR(s): %s", len(numbers), numbers)
        if self.callback is not None:
            self.callback.on_discovered(numbers, config.label)

        init_branch(git, config.base, config.remote, config.branch)
        if self.callback is not None:
            self.callback.on_branch_ready(config.branch)

        engine = MergeEngine(git, config.remote, config.continue_on_failure, self.callback)
        outcome = engine.merge_all(numbers)

        return IntegrationReport(
            repo=repo,
            branch=config.branch,
            discovered=numbers,
            outcome=outcome,
            continue_on_failure=config.continue_on_failure,
        )
