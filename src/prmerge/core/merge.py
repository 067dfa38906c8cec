"""
Sequential merge engine.

Merges PRs one at a time, lowest number first, onto the current branch.
Each PR head is fetched from the remote and merged with ``-X ours``, so on
a textual conflict the branch's side wins. A PR that still fails to merge
is aborted and recorded as failed; whether the run then stops depends on
``continue_on_failure``. A failed fetch always stops the run.

State machine:

    PENDING ──all attempted──────────────▶ COMPLETED
       │
       ├──merge failed, not continuing──▶ ABORTED_ON_FAILURE
       └──fetch or abort failed─────────▶ ABORTED_ON_ERROR
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from prmerge.core.errors import MergeConflictError, PrMergeError, VcsCommandError
from prmerge.core.git import GitClient

logger = logging.getLogger(__name__)


class MergeState(str, Enum):
    """Where a merge run stands."""

    PENDING = "pending"
    COMPLETED = "completed"
    ABORTED_ON_FAILURE = "aborted_on_failure"
    ABORTED_ON_ERROR = "aborted_on_error"


@dataclass
class MergeOutcome:
    """
    Accumulated result of a merge run.

    Attributes:
        numbers: PR numbers in the order they are processed
        merged: PRs merged cleanly, in processing order
        failed: PRs whose merge failed and was aborted, in processing order
        state: Terminal (or current) state of the run
        fatal_error: Error that halted the run, if any
    """

    numbers: list[int]
    merged: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    state: MergeState = MergeState.PENDING
    fatal_error: PrMergeError | None = None

    @property
    def pending(self) -> list[int]:
        """PRs never attempted (only non-empty after a fatal halt)."""
        done = set(self.merged) | set(self.failed)
        return [n for n in self.numbers if n not in done]

    @property
    def ok(self) -> bool:
        """True if every PR was attempted without a fatal error."""
        return self.state == MergeState.COMPLETED


class MergeEventCallback(Protocol):
    """Protocol for merge progress callbacks."""

    def on_start(self, pr_number: int) -> None:
        """Called before a PR is fetched."""
        ...

    def on_merged(self, pr_number: int) -> None:
        """Called after a PR merged cleanly."""
        ...

    def on_failed(self, pr_number: int, error: MergeConflictError) -> None:
        """Called after a PR failed to merge and the merge was aborted."""
        ...


def merge_order(numbers: Iterable[int]) -> list[int]:
    """Return the distinct PR numbers in ascending order."""
    return sorted(set(numbers))


class MergeEngine:
    """
    Applies PRs to the checked-out branch one by one.

    Example:
        >>> engine = MergeEngine(git, "origin", continue_on_failure=True)
        >>> outcome = engine.merge_all([42, 7, 19])
        >>> outcome.numbers
        [7, 19, 42]
    """

    def __init__(
        self,
        git: GitClient,
        remote: str,
        continue_on_failure: bool = False,
        callback: MergeEventCallback | None = None,
    ) -> None:
        self.git = git
        self.remote = remote
        self.continue_on_failure = continue_on_failure
        self.callback = callback

    def fetch_pr(self, pr_number: int) -> None:
        """Fetch the head of a PR into FETCH_HEAD."""
        self.git.run(
            ["fetch", self.remote, f"pull/{pr_number}/head"],
            f"Failed to fetch commits for PR {pr_number}",
        )

    def merge_fetched(self, pr_number: int) -> None:
        """
        Merge FETCH_HEAD, aborting the merge if it fails.

        Git refuses some merges before starting them (unrelated histories,
        untracked files in the way). No MERGE_HEAD exists then, so there is
        nothing to abort.

        Raises:
            MergeConflictError: If the merge failed (the tree is clean again)
            VcsCommandError: If aborting a started merge also failed
        """
        try:
            self.git.run(
                ["merge", "--no-edit", "FETCH_HEAD", "-X", "ours"],
                f"Failed to merge PR {pr_number}",
            )
        except VcsCommandError as e:
            if self.merge_in_progress():
                self.git.run(["merge", "--abort"], f"Unable to abort failed merge of PR {pr_number}")
            else:
                logger.debug("Merge of PR %d never started; nothing to abort", pr_number)
            raise MergeConflictError(pr_number) from e

    def merge_in_progress(self) -> bool:
        """Check whether a merge has been started and not concluded."""
        return self.git.succeeds(["rev-parse", "-q", "--verify", "MERGE_HEAD"])

    def merge_all(self, numbers: Iterable[int]) -> MergeOutcome:
        """
        Merge every PR in ascending numeric order.

        Fatal errors are returned in the outcome rather than raised, together
        with whatever was merged or failed before the halt.

        Args:
            numbers: PR numbers, in any order

        Returns:
            MergeOutcome describing the run
        """
        outcome = MergeOutcome(numbers=merge_order(numbers))

        for pr_number in outcome.numbers:
            if self.callback is not None:
                self.callback.on_start(pr_number)

            try:
                self.fetch_pr(pr_number)
            except VcsCommandError as e:
                return self._halt(outcome, MergeState.ABORTED_ON_ERROR, e)

            try:
                self.merge_fetched(pr_number)
            except MergeConflictError as e:
                outcome.failed.append(pr_number)
                if self.callback is not None:
                    self.callback.on_failed(pr_number, e)
                if not self.continue_on_failure:
                    return self._halt(outcome, MergeState.ABORTED_ON_FAILURE, e)
                logger.warning("%s; continuing", e)
                continue
            except VcsCommandError as e:
                # merge failed and so did the abort
                outcome.failed.append(pr_number)
                return self._halt(outcome, MergeState.ABORTED_ON_ERROR, e)

            outcome.merged.append(pr_number)
            if self.callback is not None:
                self.callback.on_merged(pr_number)

        outcome.state = MergeState.COMPLETED
        return outcome

    @staticmethod
    def _halt(outcome: MergeOutcome, state: MergeState, error: PrMergeError) -> MergeOutcome:
        logger.error("%s; stopping", error)
        outcome.state = state
        outcome.fatal_error = error
        return outcome


def merge_all(
    git: GitClient,
    remote: str,
    numbers: Iterable[int],
    continue_on_failure: bool = False,
    callback: MergeEventCallback | None = None,
) -> MergeOutcome:
    """Merge PRs onto the current branch; see MergeEngine.merge_all."""
    return MergeEngine(git, remote, continue_on_failure, callback).merge_all(numbers)
