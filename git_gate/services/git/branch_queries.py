"""Branch query service for git-gate."""

from typing import List, Optional, TYPE_CHECKING

from git_gate.exceptions import GitOperationError
from git_gate.models.branch import BranchInfo
from git_gate.services.git.operations import GitOperations, HEADS_PREFIX
from git_gate.utils.logging import get_logger

if TYPE_CHECKING:
    from git_gate.config import Config

logger = get_logger(__name__)


class BranchQueries:
    """Service for querying local branches against their upstreams and main."""

    def __init__(self, git_ops: GitOperations, config: "Config"):
        """Initialize the branch queries service.

        Args:
            git_ops: Git adapter for the repository
            config: Configuration object
        """
        self.git_ops = git_ops
        self.config = config
        self.main_branch = config.main_branch

        logger.debug("Branch queries service initialized")

    def refresh_remote(self) -> bool:
        """Fetch the remote before checking, when enabled.

        Best effort: a failed fetch is logged and the checks run on the
        remote-tracking refs already present.

        Returns:
            True if a fetch ran and succeeded
        """
        if not self.config.fetch_before_check:
            return False
        if not self.git_ops.has_remote():
            logger.debug(f"Remote '{self.git_ops.remote_name}' not configured, skipping fetch")
            return False

        try:
            self.git_ops.fetch()
            logger.debug(f"Fetched {self.git_ops.remote_name}")
            return True
        except GitOperationError as e:
            logger.warning(f"Fetch failed, checking against possibly stale remote refs: {e}")
            return False

    def list_branches(self, fetch: bool = True) -> List[BranchInfo]:
        """Inspect every local branch.

        Args:
            fetch: Run the optional fetch pre-step first

        Returns:
            BranchInfo snapshots in ref enumeration order
        """
        if fetch:
            self.refresh_remote()

        main_ref = f"{HEADS_PREFIX}{self.main_branch}"
        if not self.git_ops.ref_exists(main_ref):
            raise GitOperationError("inspect", self.main_branch, "main branch does not exist locally")

        branches = []
        for ref in self.git_ops.list_branch_refs():
            ahead: Optional[int] = None
            behind: Optional[int] = None
            if ref.upstream_ref and not ref.upstream_gone:
                ahead, behind = self.git_ops.count_ahead_behind(ref.name, ref.upstream_ref)

            if ref.name == self.main_branch:
                unmerged = 0
            else:
                unmerged = self.git_ops.count_commits(main_ref, f"{HEADS_PREFIX}{ref.name}")

            branch = BranchInfo(
                name=ref.name,
                upstream=ref.upstream_name,
                upstream_gone=ref.upstream_gone,
                ahead=ahead,
                behind=behind,
                unmerged=unmerged,
            )
            logger.debug(f"Branch {branch}")
            branches.append(branch)

        return branches

    def unmerged_branches(self, branches: Optional[List[BranchInfo]] = None) -> List[BranchInfo]:
        """Branches other than main holding commits main does not have."""
        if branches is None:
            branches = self.list_branches()
        return [b for b in branches if b.name != self.main_branch and b.unmerged > 0]

    def main_remote_ref(self) -> Optional[str]:
        """Remote counterpart of main: its upstream, else <remote>/<main> if present."""
        upstream = self.git_ops.upstream_of(self.main_branch)
        if upstream and self.git_ops.ref_exists(upstream):
            return upstream

        remote_ref = self.git_ops.remote_branch_ref(self.main_branch)
        if self.git_ops.ref_exists(remote_ref):
            return remote_ref
        return None

    def main_behind_count(self) -> Optional[int]:
        """How many commits local main lacks relative to its remote counterpart.

        Returns:
            Commit count, or None when main has no remote counterpart
        """
        remote_ref = self.main_remote_ref()
        if remote_ref is None:
            return None
        return self.git_ops.count_commits(f"{HEADS_PREFIX}{self.main_branch}", remote_ref)
