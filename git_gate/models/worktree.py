"""Worktree data models."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class WorktreeInfo:
    """Information about a git worktree."""

    path: str
    branch_name: str  # Empty for detached HEAD
    commit_sha: str
    is_current: bool  # Is this the worktree we are running in?
    is_dirty: Optional[bool] = None  # None = not inspected (always the case for the current one)

    @property
    def branch_label(self) -> str:
        return self.branch_name or "detached HEAD"

    def __str__(self) -> str:
        """String representation of worktree."""
        if self.is_dirty is None:
            status = "not inspected"
        else:
            status = "dirty" if self.is_dirty else "clean"
        current_marker = " (current)" if self.is_current else ""
        return f"{self.branch_label} @ {self.path}{current_marker} [{status}]"
