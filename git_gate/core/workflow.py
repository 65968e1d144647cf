"""Command workflows: commit-and-push, create-branch and merge-to-main."""

from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from git_gate.config import Config
from git_gate.exceptions import (
    AmbiguousMergeError,
    BranchExistsError,
    DetachedHeadError,
    DirtyWorkingTreeError,
    InvalidBranchNameError,
    MissingRemoteError,
    StaleMainError,
)
from git_gate.models.repository import RepositoryState
from git_gate.services.display_service import DisplayService
from git_gate.services.git import BranchQueries, GitOperations, WorktreeService
from git_gate.services.health_service import HealthService
from git_gate.services.policy_service import BlockingPolicyService
from git_gate.utils.logging import get_logger

logger = get_logger(__name__)


class WorkflowState(Enum):
    """States of one command invocation."""
    IDLE = "idle"
    HEALTH_CHECKED = "health-checked"
    COMMITTING = "committing"
    BRANCH_CREATING = "branch-creating"
    MERGING = "merging"
    DONE = "done"
    ABORTED = "aborted"
    FAILED = "failed"


ALLOWED_TRANSITIONS = {
    WorkflowState.IDLE: {WorkflowState.HEALTH_CHECKED, WorkflowState.FAILED},
    WorkflowState.HEALTH_CHECKED: {
        WorkflowState.COMMITTING,
        WorkflowState.BRANCH_CREATING,
        WorkflowState.MERGING,
    },
    WorkflowState.COMMITTING: {WorkflowState.DONE, WorkflowState.FAILED},
    WorkflowState.BRANCH_CREATING: {WorkflowState.DONE, WorkflowState.FAILED},
    WorkflowState.MERGING: {WorkflowState.DONE, WorkflowState.ABORTED, WorkflowState.FAILED},
}


class WorkflowOrchestrator:
    """Runs one git-gate command against a repository.

    Built fresh for every invocation. The health check always runs first;
    the first failure moves the workflow to FAILED and propagates.
    """

    def __init__(
        self,
        repo_path: str,
        config: Config,
        confirm: Optional[Callable[[str], bool]] = None,
        display: Optional[DisplayService] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the orchestrator and its services.

        Args:
            repo_path: Path inside the git work tree
            config: Configuration object
            confirm: Yes/no callback for the interactive merge prompt
                (defaults to asking on the terminal)
            display: Output service
            clock: Source of the timestamp in automatic commit messages

        Raises:
            NotARepositoryError: If repo_path is not inside a git work tree
        """
        self.config = config
        self.main_branch = config.main_branch
        self.display = display or DisplayService()
        self.confirm = confirm or self.display.confirm
        self.clock = clock
        self.state = WorkflowState.IDLE
        self.repository_state: Optional[RepositoryState] = None

        self.git_ops = GitOperations(repo_path, config)
        self.health_service = HealthService(self.git_ops, config)
        self.branch_queries = BranchQueries(self.git_ops, config)
        self.worktree_service = WorktreeService(self.git_ops)
        self.policy_service = BlockingPolicyService(self.branch_queries, self.worktree_service)

    def _transition(self, new_state: WorkflowState) -> None:
        if new_state not in ALLOWED_TRANSITIONS.get(self.state, set()):
            raise RuntimeError(f"Invalid workflow transition {self.state.value} -> {new_state.value}")
        logger.debug(f"Workflow {self.state.value} -> {new_state.value}")
        self.state = new_state

    @contextmanager
    def _operation(self, state: WorkflowState):
        """Run a command body in the given state; any failure ends in FAILED."""
        self.check_health()
        self._transition(state)
        try:
            yield
        except Exception:
            self._transition(WorkflowState.FAILED)
            raise

    def check_health(self) -> RepositoryState:
        """Run the health check once per invocation and confirm the result."""
        if self.state != WorkflowState.IDLE:
            return self.repository_state

        try:
            self.repository_state = self.health_service.check()
        except Exception:
            self._transition(WorkflowState.FAILED)
            raise

        self._transition(WorkflowState.HEALTH_CHECKED)
        self.display.success("git is healthy")
        return self.repository_state

    # Commands

    def commit_and_push(self) -> WorkflowState:
        """Stage everything, commit if anything is staged, and push the branch."""
        with self._operation(WorkflowState.COMMITTING):
            self._require_remote()
            self._commit_and_push(self._require_branch())

        self._transition(WorkflowState.DONE)
        return self.state

    def create_branch(self, branch_name: str) -> WorkflowState:
        """Create a branch from the current one, give it a start commit and push it."""
        with self._operation(WorkflowState.BRANCH_CREATING):
            self._require_remote()
            current = self._require_branch()

            if not self.git_ops.is_valid_branch_name(branch_name):
                raise InvalidBranchNameError(branch_name)
            if self.git_ops.branch_exists(branch_name):
                raise BranchExistsError(branch_name)
            if self.git_ops.status_lines():
                raise DirtyWorkingTreeError("b")

            self.policy_service.require_clean(current, self.main_branch)

            self.display.info(f"Creating branch '{branch_name}' from '{current}'")
            self.git_ops.switch(branch_name, create=True)
            self.git_ops.commit(f"branch start: {branch_name}", allow_empty=True)
            self.git_ops.push(branch_name, set_upstream=True)
            self.display.success(
                f"Branch '{branch_name}' created and pushed to {self.config.remote}/{branch_name}"
            )

        self._transition(WorkflowState.DONE)
        return self.state

    def merge_to_main(self) -> WorkflowState:
        """Merge the current branch, or the single unmerged branch when on main, into main."""
        outcome = WorkflowState.DONE

        with self._operation(WorkflowState.MERGING):
            self._require_remote()
            current = self._require_branch()

            if current != self.main_branch:
                self.policy_service.require_clean(current, self.main_branch)
                self._commit_and_push(current)
                self._merge_into_main(current)
            else:
                outcome = self._merge_from_main()

        self._transition(outcome)
        return self.state

    # Steps

    def _require_remote(self) -> None:
        if not self.git_ops.has_remote():
            raise MissingRemoteError(self.config.remote)

    def _require_branch(self) -> str:
        branch = self.git_ops.current_branch()
        if branch is None:
            raise DetachedHeadError()
        return branch

    def _commit_and_push(self, branch: str) -> None:
        self.git_ops.stage_all()
        if self.git_ops.has_staged_changes():
            message = f"auto: {branch} {self.clock().strftime('%Y-%m-%d %H:%M:%S')}"
            sha = self.git_ops.commit(message)
            self.display.info(f"[{branch} {sha[:7]}] {message}")
        else:
            self.display.info("Nothing staged to commit.")
        self._push(branch)

    def _push(self, branch: str) -> None:
        if self.git_ops.upstream_of(branch):
            self.display.info(f"Pushing '{branch}'")
            self.git_ops.push(branch)
        else:
            self.display.info(f"Pushing '{branch}' and setting upstream {self.config.remote}/{branch}")
            self.git_ops.push(branch, set_upstream=True)

    def _merge_from_main(self) -> WorkflowState:
        """On main: find the one branch to merge and ask before merging it."""
        if self.git_ops.status_lines():
            raise DirtyWorkingTreeError("m")

        branches = self.branch_queries.list_branches()
        candidates = self.branch_queries.unmerged_branches(branches)

        if not candidates:
            self.display.info(f"On {self.main_branch}: nothing to merge.")
            return WorkflowState.DONE
        if len(candidates) > 1:
            raise AmbiguousMergeError(self.main_branch, [b.name for b in candidates])

        candidate = candidates[0].name
        self.policy_service.require_clean(candidate, self.main_branch, branches=branches)

        prompt = (
            f"Merge branch '{candidate}' into {self.main_branch} and push {self.main_branch}?"
        )
        if not self.confirm(prompt):
            self.display.info("Merge cancelled.")
            return WorkflowState.ABORTED

        self._merge_into_main(candidate)
        return WorkflowState.DONE

    def _merge_into_main(self, branch: str) -> None:
        """Switch to main, refuse a stale main, merge with --no-ff and push main."""
        if self.git_ops.current_branch() != self.main_branch:
            self.git_ops.switch(self.main_branch)

        behind = self.branch_queries.main_behind_count()
        if behind:
            raise StaleMainError(self.main_branch, self.branch_queries.main_remote_ref(), behind)

        self.display.info(f"Merging '{branch}' into {self.main_branch} (no-ff)")
        self.git_ops.merge_no_ff(branch, into=self.main_branch)
        self._push(self.main_branch)
        self.display.success(f"Merged '{branch}' into {self.main_branch} and pushed")
