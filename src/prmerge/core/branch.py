"""Create the integration branch the PRs are merged onto."""

from __future__ import annotations

import logging

from prmerge.core.errors import ConfigurationError
from prmerge.core.git import GitClient

logger = logging.getLogger(__name__)


def init_branch(git: GitClient, base: str, remote: str, name: str) -> None:
    """
    (Re)create branch ``name`` from ``<remote>/<base>`` and switch to it.

    An existing local branch called ``name`` is force-deleted first, so any
    commits only it holds are lost. Nothing is rolled back if a later step
    fails; the checkout stays wherever the failing step left it.

    Args:
        git: Client for the local checkout
        base: Base branch to start from
        remote: Remote to fetch ``base`` from
        name: Branch to create

    Raises:
        ConfigurationError: If an argument is empty
        VcsCommandError: If any git step fails
    """
    for value, what in ((base, "base"), (remote, "remote"), (name, "name")):
        if not value:
            raise ConfigurationError(f"No {what} provided")

    git.run(["checkout", base], "Unable to switch to base branch")

    if git.branch_exists(name):
        logger.info("Deleting existing branch %s", name)
        git.run(["branch", "-D", name], f"Unable to delete branch '{name}'")

    git.run(["fetch", remote], f"Unable to fetch remote '{remote}'")
    git.run(["branch", "--no-track", name, f"{remote}/{base}"], f"Unable to create branch {name}")
    git.run(["checkout", name], "Unable to switch to new branch")
