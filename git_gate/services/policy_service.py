"""Blocking policy: decides whether the whole repository is safe to branch or merge."""

from typing import List, Optional

from git_gate.exceptions import PolicyBlockError
from git_gate.models.branch import BranchInfo
from git_gate.models.report import BlockingReport
from git_gate.models.worktree import WorktreeInfo
from git_gate.services.git.branch_queries import BranchQueries
from git_gate.services.git.worktrees import WorktreeService
from git_gate.utils.logging import get_logger

logger = get_logger(__name__)


def _commits(count: int) -> str:
    return f"{count} commit{'s' if count != 1 else ''}"


class BlockingPolicyService:
    """Aggregates branch and worktree snapshots into a BlockingReport.

    Every branch other than the one being acted on must have a healthy
    upstream (A) and be fully merged into main (B), and every other worktree
    must be clean (C). The three categories are always evaluated together so
    one run shows every problem.
    """

    def __init__(self, branch_queries: BranchQueries, worktree_service: WorktreeService):
        self.branch_queries = branch_queries
        self.worktree_service = worktree_service

    def evaluate(
        self,
        exclude_branch: Optional[str],
        main_branch: str,
        branches: Optional[List[BranchInfo]] = None,
        worktrees: Optional[List[WorktreeInfo]] = None,
    ) -> BlockingReport:
        """Evaluate the policy against one snapshot of the repository.

        Args:
            exclude_branch: Branch being acted on; exempt from A and B
            main_branch: Branch everything must be merged into
            branches: Branch snapshot to reuse (inspected now if omitted)
            worktrees: Worktree snapshot to reuse (inspected now if omitted)

        Returns:
            The report; clean when no issue was found
        """
        if branches is None:
            branches = self.branch_queries.list_branches()
        if worktrees is None:
            worktrees = self.worktree_service.list_worktrees()

        report = BlockingReport(main_branch=main_branch)

        for branch in branches:
            if branch.name == exclude_branch or branch.is_detached:
                continue
            if branch.upstream is None:
                report.upstream.append(f"{branch.name}: no upstream set")
            elif branch.upstream_gone:
                report.upstream.append(f"{branch.name}: upstream {branch.upstream} is gone")
            elif branch.ahead:
                report.upstream.append(
                    f"{branch.name}: {_commits(branch.ahead)} not pushed to {branch.upstream}"
                )

        for branch in branches:
            if branch.name in (main_branch, exclude_branch) or branch.is_detached:
                continue
            if branch.unmerged > 0:
                report.unmerged.append(
                    f"{branch.name}: {_commits(branch.unmerged)} not merged into {main_branch}"
                )

        for worktree in worktrees:
            if worktree.is_current:
                continue
            if worktree.is_dirty:
                report.dirty_worktrees.append(f"{worktree.path} (branch: {worktree.branch_label})")

        logger.debug(
            f"Policy excluding {exclude_branch!r}: "
            f"A={len(report.upstream)} B={len(report.unmerged)} C={len(report.dirty_worktrees)}"
        )
        return report

    def require_clean(
        self,
        exclude_branch: Optional[str],
        main_branch: str,
        branches: Optional[List[BranchInfo]] = None,
        worktrees: Optional[List[WorktreeInfo]] = None,
    ) -> BlockingReport:
        """Evaluate and raise PolicyBlockError unless the report is clean."""
        report = self.evaluate(exclude_branch, main_branch, branches, worktrees)
        if not report.is_clean:
            raise PolicyBlockError(report)
        return report
