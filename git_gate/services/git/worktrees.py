"""Worktree inspection service for git-gate."""

import os
from typing import Any, Dict, List

from git_gate.models.worktree import WorktreeInfo
from git_gate.services.git.operations import GitOperations, HEADS_PREFIX
from git_gate.utils.logging import get_logger

logger = get_logger(__name__)


def parse_worktree_porcelain(output: str) -> List[Dict[str, Any]]:
    """Parse `git worktree list --porcelain` into one dict per worktree.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   (or "detached")
        (blank line between worktrees)

    Keys: path, HEAD, branch, bare, prunable.
    """
    entries: List[Dict[str, Any]] = []
    current: Dict[str, Any] = {}

    for line in output.split("\n"):
        line = line.strip()

        if not line:
            # Empty line marks end of worktree entry
            if current.get("path"):
                entries.append(current)
            current = {}
            continue

        if line.startswith("worktree "):
            if current.get("path"):
                entries.append(current)
            current = {"path": line.split(" ", 1)[1], "branch": ""}
        elif line.startswith("HEAD "):
            current["HEAD"] = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            branch_ref = line.split(" ", 1)[1]
            if branch_ref.startswith(HEADS_PREFIX):
                current["branch"] = branch_ref[len(HEADS_PREFIX):]
            else:
                current["branch"] = branch_ref
        elif line == "detached":
            current["branch"] = ""
        elif line == "bare":
            current["bare"] = True
        elif line.startswith("prunable"):
            current["prunable"] = True

    # Handle last entry if no trailing blank line
    if current.get("path"):
        entries.append(current)

    return entries


class WorktreeService:
    """Service for inspecting the worktrees bound to the repository."""

    def __init__(self, git_ops: GitOperations):
        """Initialize the worktree service.

        Args:
            git_ops: Git adapter for the repository
        """
        self.git_ops = git_ops

    def list_worktrees(self) -> List[WorktreeInfo]:
        """Get information about all worktrees that still exist on disk.

        The current worktree is identified by comparing resolved paths and is
        never inspected for changes. Worktrees whose directory is gone are
        skipped.

        Returns:
            List of WorktreeInfo objects, in git's listing order
        """
        current_path = os.path.realpath(self.git_ops.working_tree_dir)
        worktrees = []

        for entry in parse_worktree_porcelain(self.git_ops.list_worktrees_porcelain()):
            if entry.get("bare"):
                continue

            path = os.path.realpath(entry["path"])
            if not os.path.isdir(path):
                logger.debug(f"Skipping worktree {entry['path']}: directory no longer exists")
                continue

            is_current = path == current_path
            is_dirty = None if is_current else self.is_dirty(path)

            worktrees.append(
                WorktreeInfo(
                    path=path,
                    branch_name=entry.get("branch", ""),
                    commit_sha=entry.get("HEAD", ""),
                    is_current=is_current,
                    is_dirty=is_dirty,
                )
            )

        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def is_dirty(self, worktree_path: str) -> bool:
        """Check a worktree for tracked or untracked modifications."""
        return bool(self.git_ops.status_lines(worktree_path))

    def dirty_worktrees(self) -> List[WorktreeInfo]:
        """Non-current worktrees with uncommitted changes."""
        return [wt for wt in self.list_worktrees() if not wt.is_current and wt.is_dirty]
