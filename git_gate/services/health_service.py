"""Repository health checks run before every command."""

from dataclasses import replace
from typing import TYPE_CHECKING, List

from git_gate.exceptions import IntegrityCheckError, RepositoryBusyError
from git_gate.models.repository import IntegrityStatus, RepositoryState
from git_gate.services.git.operations import (
    CHERRY_PICK_MARKER,
    GitOperations,
    INDEX_LOCK,
    MERGE_MARKER,
    REBASE_MARKERS,
    REVERT_MARKER,
)
from git_gate.utils.logging import get_logger

if TYPE_CHECKING:
    from git_gate.config import Config

logger = get_logger(__name__)

# How to get out of each unfinished operation
RESOLUTION_HINTS = {
    "merge": "finish with 'git commit' or run 'git merge --abort'",
    "rebase": "run 'git rebase --continue' or 'git rebase --abort'",
    "cherry-pick": "run 'git cherry-pick --continue' or 'git cherry-pick --abort'",
    "revert": "run 'git revert --continue' or 'git revert --abort'",
}


def filter_fsck_findings(lines: List[str]) -> List[str]:
    """Drop informational dangling-object lines from fsck output."""
    return [line for line in lines if not line.startswith("dangling ")]


class HealthService:
    """Verifies the repository is not mid-operation and optionally scans it."""

    def __init__(self, git_ops: GitOperations, config: "Config"):
        self.git_ops = git_ops
        self.config = config

    def inspect(self) -> RepositoryState:
        """Collect the full repository state without judging it. Never mutates."""
        return self._scan_integrity(self._inspect_markers())

    def check(self) -> RepositoryState:
        """Fail on the first unhealthy condition.

        Order: lock file, unfinished operation, integrity scan. The scan only
        runs once the markers are clear.

        Raises:
            RepositoryBusyError: Lock file present or an operation is in progress
            IntegrityCheckError: fsck reported something besides dangling objects
        """
        state = self._inspect_markers()

        if state.lock_file_present:
            raise RepositoryBusyError(
                f"Lock file {INDEX_LOCK} exists in {self.git_ops.git_dir}",
                "another git process is running or crashed; remove the lock once it is gone",
            )

        operation = state.operation_in_progress
        if operation:
            raise RepositoryBusyError(f"A {operation} is in progress", RESOLUTION_HINTS[operation])

        state = self._scan_integrity(state)
        if state.integrity == IntegrityStatus.FAILED:
            raise IntegrityCheckError(state.integrity_findings)

        logger.info(f"Repository healthy (integrity: {state.integrity.value})")
        return state

    def _inspect_markers(self) -> RepositoryState:
        return RepositoryState(
            merge_in_progress=self.git_ops.git_dir_has(MERGE_MARKER),
            rebase_in_progress=any(self.git_ops.git_dir_has(m) for m in REBASE_MARKERS),
            cherry_pick_in_progress=self.git_ops.git_dir_has(CHERRY_PICK_MARKER),
            revert_in_progress=self.git_ops.git_dir_has(REVERT_MARKER),
            lock_file_present=self.git_ops.git_dir_has(INDEX_LOCK),
        )

    def _scan_integrity(self, state: RepositoryState) -> RepositoryState:
        if not self.config.integrity_check:
            return state

        result = self.git_ops.fsck()
        findings = filter_fsck_findings(result.lines)

        if result.status != 0:
            integrity = IntegrityStatus.FAILED
            findings = findings or [f"git fsck exited with status {result.status}"]
        elif findings:
            integrity = IntegrityStatus.FAILED
        elif result.lines:
            integrity = IntegrityStatus.WARNINGS_IGNORABLE
            logger.debug(f"Ignoring {len(result.lines)} dangling object(s) reported by fsck")
        else:
            integrity = IntegrityStatus.CLEAN

        return replace(state, integrity=integrity, integrity_findings=tuple(findings))
