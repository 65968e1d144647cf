"""Git-related services for git-gate."""

from .operations import GitOperations
from .worktrees import WorktreeService
from .branch_queries import BranchQueries

__all__ = [
    "GitOperations",
    "WorktreeService",
    "BranchQueries",
]
