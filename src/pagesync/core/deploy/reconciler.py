"""
Branch reconciliation for the publishing branch.

Brings a fresh clone onto the target branch, whatever state that branch is
in. The fallback chain is an explicit state machine:

    START -> PROBE_LOCAL -> USE_LOCAL -----------------> READY
                  |
                  +-> PROBE_REMOTE -> TRACK_REMOTE ----> READY
                           |
                           +-> CREATE_ORPHAN ----------> READY

A failed probe is not an error, it only selects the next state. The run
fails only when the orphan branch cannot be created either.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from pagesync.core.deploy.errors import BranchReconciliationError
from pagesync.core.deploy.git import GitRunner
from pagesync.core.deploy.models import BranchState, CommitIdentity, ReconcileState

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """
    Outcome of reconciliation.

    Attributes:
        branch: Branch now checked out
        branch_state: Where the branch existed before reconciliation
        path: States visited, START through READY
        pulled: Whether the pull in USE_LOCAL succeeded (None if not attempted)
        failures: Failure messages of local and remote lookups or orphan creation,
            keyed by the state that failed
    """

    branch: str
    branch_state: BranchState | None = None
    path: list[ReconcileState] = field(default_factory=list)
    pulled: bool | None = None
    failures: dict[ReconcileState, str] = field(default_factory=dict)


class BranchReconciler:
    """
    Drives a repository onto the publishing branch.

    Example:
        >>> reconciler = BranchReconciler(runner, "gh-pages")
        >>> result = reconciler.reconcile()
        >>> result.branch_state
        <BranchState.REMOTE_ONLY: 'remote_only'>
    """

    def __init__(
        self,
        runner: GitRunner,
        branch: str,
        *,
        remote_name: str = "origin",
        identity: CommitIdentity | None = None,
    ) -> None:
        self.runner = runner
        self.branch = branch
        self.remote_name = remote_name
        self.identity = identity or CommitIdentity()

    @property
    def local_ref(self) -> str:
        return f"refs/heads/{self.branch}"

    @property
    def remote_ref(self) -> str:
        return f"refs/remotes/{self.remote_name}/{self.branch}"

    def reconcile(self) -> ReconcileResult:
        """
        Run the state machine to READY.

        Raises:
            BranchReconciliationError: If local, remote and orphan paths all fail.
        """
        handlers: dict[ReconcileState, Callable[[ReconcileResult], ReconcileState]] = {
            ReconcileState.START: self._start,
            ReconcileState.PROBE_LOCAL: self._probe_local,
            ReconcileState.USE_LOCAL: self._use_local,
            ReconcileState.PROBE_REMOTE: self._probe_remote,
            ReconcileState.TRACK_REMOTE: self._track_remote,
            ReconcileState.CREATE_ORPHAN: self._create_orphan,
        }

        result = ReconcileResult(branch=self.branch)
        state = ReconcileState.START
        result.path.append(state)
        while state is not ReconcileState.READY:
            state = handlers[state](result)
            result.path.append(state)

        return result

    def _ref_exists(self, ref: str) -> bool:
        return self.runner.run(["show-ref", "--verify", "--quiet", ref]).ok

    def _start(self, result: ReconcileResult) -> ReconcileState:
        return ReconcileState.PROBE_LOCAL

    def _probe_local(self, result: ReconcileResult) -> ReconcileState:
        # Plain `git checkout <branch>` would guess a tracking branch from the
        # remote, so require a real local ref first.
        if not self._ref_exists(self.local_ref):
            result.failures[ReconcileState.PROBE_LOCAL] = f"no local branch {self.branch}"
            return ReconcileState.PROBE_REMOTE

        checkout = self.runner.run(["checkout", self.branch])
        if not checkout.ok:
            result.failures[ReconcileState.PROBE_LOCAL] = checkout.error_message
            return ReconcileState.PROBE_REMOTE

        logger.info("Switched to existing %s branch", self.branch)
        return ReconcileState.USE_LOCAL

    def _use_local(self, result: ReconcileResult) -> ReconcileState:
        remote_exists = self._ref_exists(self.remote_ref)
        result.branch_state = (
            BranchState.LOCAL_AND_REMOTE if remote_exists else BranchState.LOCAL_ONLY
        )

        pull = self.runner.run(
            ["pull", "--no-rebase", "--no-edit", self.remote_name, self.branch],
            config=self.identity.as_git_config(),
        )
        result.pulled = pull.ok
        if pull.ok:
            logger.info("Pulled latest changes from remote %s branch", self.branch)
        else:
            # Leave no half-finished merge behind; the abort itself may fail
            # harmlessly when no merge was started.
            self.runner.run(["merge", "--abort"])
            logger.warning(
                "Could not pull from remote %s branch, continuing with local branch: %s",
                self.branch,
                pull.error_message,
            )
        return ReconcileState.READY

    def _probe_remote(self, result: ReconcileResult) -> ReconcileState:
        checkout = self.runner.run([
            "checkout",
            "-b",
            self.branch,
            "--track",
            f"{self.remote_name}/{self.branch}",
        ])
        if not checkout.ok:
            result.failures[ReconcileState.PROBE_REMOTE] = checkout.error_message
            return ReconcileState.CREATE_ORPHAN

        logger.info("Created local %s branch from remote", self.branch)
        return ReconcileState.TRACK_REMOTE

    def _track_remote(self, result: ReconcileResult) -> ReconcileState:
        result.branch_state = BranchState.REMOTE_ONLY
        return ReconcileState.READY

    def _create_orphan(self, result: ReconcileResult) -> ReconcileState:
        orphan = self.runner.run(["checkout", "--orphan", self.branch])
        if orphan.ok:
            # Start the orphan from an empty index, not the previous branch's tree
            orphan = self.runner.run(["rm", "-r", "-q", "--cached", "--ignore-unmatch", "."])

        if not orphan.ok:
            result.failures[ReconcileState.CREATE_ORPHAN] = orphan.error_message
            detail = "; ".join(
                f"{state.value}: {message}" for state, message in result.failures.items()
            )
            raise BranchReconciliationError(
                f"Could not check out, track or create branch {self.branch}",
                detail=detail,
            )

        logger.info("Created new orphan %s branch", self.branch)
        result.branch_state = BranchState.ABSENT
        return ReconcileState.READY
