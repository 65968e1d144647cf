"""Data models for git-gate."""

from .branch import BranchInfo, DETACHED_HEAD
from .worktree import WorktreeInfo
from .repository import IntegrityStatus, RepositoryState
from .report import BlockingReport

__all__ = [
    "BranchInfo",
    "DETACHED_HEAD",
    "WorktreeInfo",
    "IntegrityStatus",
    "RepositoryState",
    "BlockingReport",
]
