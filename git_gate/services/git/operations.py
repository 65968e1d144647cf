"""Git operations service.

Every git command git-gate issues goes through this module; the other
services only see parsed values.
"""

import os
from contextlib import contextmanager
from typing import List, NamedTuple, Optional, Tuple, TYPE_CHECKING

import git

from git_gate.exceptions import (
    GitOperationError,
    MergeConflictError,
    NotARepositoryError,
)
from git_gate.utils.logging import get_logger

if TYPE_CHECKING:
    from git_gate.config import Config

logger = get_logger(__name__)

HEADS_PREFIX = "refs/heads/"
REMOTES_PREFIX = "refs/remotes/"

# Marker files/directories left in the git dir by unfinished operations
MERGE_MARKER = "MERGE_HEAD"
REBASE_MARKERS = ("rebase-merge", "rebase-apply")
CHERRY_PICK_MARKER = "CHERRY_PICK_HEAD"
REVERT_MARKER = "REVERT_HEAD"
INDEX_LOCK = "index.lock"


class BranchRef(NamedTuple):
    """A local branch as listed by for-each-ref."""
    name: str
    upstream_ref: Optional[str]  # Full ref, e.g. refs/remotes/origin/main
    upstream_name: Optional[str]  # Short form, e.g. origin/main
    upstream_gone: bool


class FsckResult(NamedTuple):
    """Exit status and output lines of git fsck."""
    status: int
    lines: List[str]


def describe_git_error(e: git.exc.GitCommandError) -> str:
    """Build a readable message from a GitCommandError."""
    command = e.command if hasattr(e, "command") else "git"
    if isinstance(command, (list, tuple)):
        command = " ".join(str(part) for part in command)
    stderr = (e.stderr if hasattr(e, "stderr") and e.stderr else "").strip()
    # GitPython formats stderr as "stderr: '<text>'"
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:"):].strip().strip("'").strip()
    status = e.status if hasattr(e, "status") else "unknown"

    if stderr:
        return f"'{command}' failed (exit {status}): {stderr}"
    return f"'{command}' failed with exit code {status}"


class GitOperations:
    """Service for Git operations."""

    def __init__(self, repo_path: str, config: "Config"):
        """Initialize the service.

        Args:
            repo_path: Path inside the git work tree
            config: Configuration object

        Raises:
            NotARepositoryError: If repo_path is not inside a git work tree
        """
        self.repo_path = repo_path
        self.config = config
        self.remote_name = config.remote

        try:
            self.repo = git.Repo(repo_path, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            logger.debug(f"Could not open repository at {repo_path}: {e}")
            raise NotARepositoryError(repo_path) from e

        if self.repo.bare or not self.repo.working_tree_dir:
            raise NotARepositoryError(repo_path)

        logger.debug(f"Git operations initialized for {self.repo.working_tree_dir}")

    @contextmanager
    def _git_operation(self, operation: str, branch: Optional[str] = None):
        """Context manager translating git failures into GitOperationError."""
        try:
            yield
        except git.exc.GitCommandError as e:
            error_msg = describe_git_error(e)
            logger.debug(f"Git operation '{operation}' failed: {error_msg}")
            raise GitOperationError(operation, branch, error_msg) from e

    # Locations

    @property
    def working_tree_dir(self) -> str:
        return str(self.repo.working_tree_dir)

    @property
    def git_dir(self) -> str:
        """Per-worktree git directory (holds the index and operation markers)."""
        return str(self.repo.git_dir)

    def git_dir_has(self, name: str) -> bool:
        return os.path.exists(os.path.join(self.git_dir, name))

    def is_merge_in_progress(self) -> bool:
        return self.git_dir_has(MERGE_MARKER)

    # Queries

    def current_branch(self) -> Optional[str]:
        """Name of the checked-out branch, or None on a detached HEAD."""
        if self.repo.head.is_detached:
            return None
        return self.repo.active_branch.name

    def has_remote(self) -> bool:
        return self.remote_name in [remote.name for remote in self.repo.remotes]

    def ref_exists(self, ref: str) -> bool:
        try:
            self.repo.git.show_ref("--verify", "--quiet", ref)
            return True
        except git.exc.GitCommandError:
            return False

    def branch_exists(self, branch_name: str) -> bool:
        return self.ref_exists(f"{HEADS_PREFIX}{branch_name}")

    def remote_branch_ref(self, branch_name: str) -> str:
        return f"{REMOTES_PREFIX}{self.remote_name}/{branch_name}"

    def is_valid_branch_name(self, branch_name: str) -> bool:
        if not branch_name or branch_name.startswith("-"):
            return False
        try:
            self.repo.git.check_ref_format("--branch", branch_name)
            return True
        except git.exc.GitCommandError:
            return False

    def list_branch_refs(self) -> List[BranchRef]:
        """List local branches with their upstream configuration."""
        with self._git_operation("for-each-ref"):
            output = self.repo.git.for_each_ref(
                "--format=%(refname)%09%(upstream)%09%(upstream:short)%09%(upstream:track)",
                "refs/heads",
            )

        branches = []
        for line in output.split("\n"):
            if not line.strip():
                continue
            fields = line.split("\t")
            fields += [""] * (4 - len(fields))
            refname, upstream_ref, upstream_name, track = fields[:4]
            branches.append(
                BranchRef(
                    name=refname[len(HEADS_PREFIX):] if refname.startswith(HEADS_PREFIX) else refname,
                    upstream_ref=upstream_ref or None,
                    upstream_name=upstream_name or None,
                    upstream_gone=track.strip() == "[gone]",
                )
            )
        return branches

    def upstream_of(self, branch_name: str) -> Optional[str]:
        """Full upstream ref of a branch, or None when none is configured."""
        try:
            upstream = self.repo.git.for_each_ref(
                "--format=%(upstream)", f"{HEADS_PREFIX}{branch_name}"
            )
        except git.exc.GitCommandError as e:
            logger.debug(f"Could not read upstream of {branch_name}: {e}")
            return None
        return upstream.strip() or None

    def count_ahead_behind(self, branch_name: str, upstream_ref: str) -> Tuple[int, int]:
        """Return (ahead, behind) of a branch relative to its upstream."""
        with self._git_operation("rev-list", branch_name):
            output = self.repo.git.rev_list(
                "--left-right", "--count", f"{upstream_ref}...{HEADS_PREFIX}{branch_name}"
            )
        behind, ahead = (int(part) for part in output.split())
        return ahead, behind

    def count_commits(self, exclude_ref: str, include_ref: str) -> int:
        """Number of commits reachable from include_ref but not from exclude_ref."""
        with self._git_operation("rev-list"):
            return int(self.repo.git.rev_list("--count", f"{exclude_ref}..{include_ref}"))

    def status_lines(self, worktree_path: Optional[str] = None) -> List[str]:
        """Porcelain status (tracked and untracked changes) of a worktree.

        Args:
            worktree_path: Worktree to inspect; defaults to the current one
        """
        args = ["status", "--porcelain", "--untracked-files=normal"]
        with self._git_operation("status"):
            if worktree_path:
                status = self.repo.git.execute(["git", "-C", worktree_path, *args])
            else:
                status = self.repo.git.status(*args[1:])
        return [line for line in status.split("\n") if line.strip()]

    def list_worktrees_porcelain(self) -> str:
        with self._git_operation("worktree list"):
            return self.repo.git.worktree("list", "--porcelain")

    def fetch(self) -> None:
        with self._git_operation("fetch"):
            self.repo.git.fetch("--prune", self.remote_name)

    def fsck(self) -> FsckResult:
        """Run a full integrity scan; never raises on findings."""
        status, stdout, stderr = self.repo.git.fsck(
            "--full",
            "--no-progress",
            with_extended_output=True,
            with_exceptions=False,
        )
        lines = [line.strip() for line in f"{stdout}\n{stderr}".split("\n") if line.strip()]
        return FsckResult(status=status, lines=lines)

    # Mutations

    def stage_all(self) -> None:
        with self._git_operation("add"):
            self.repo.git.add("-A")

    def has_staged_changes(self) -> bool:
        status, _, stderr = self.repo.git.diff(
            "--cached", "--quiet", with_extended_output=True, with_exceptions=False
        )
        if status not in (0, 1):
            raise GitOperationError("diff --cached", message=stderr.strip() or f"exit {status}")
        return status == 1

    def commit(self, message: str, allow_empty: bool = False) -> str:
        """Create a commit and return its SHA."""
        args = ["-m", message]
        if allow_empty:
            args.insert(0, "--allow-empty")
        with self._git_operation("commit"):
            self.repo.git.commit(*args)
        return self.repo.head.commit.hexsha

    def switch(self, branch_name: str, create: bool = False) -> None:
        with self._git_operation("switch", branch_name):
            if create:
                self.repo.git.switch("-c", branch_name)
            else:
                self.repo.git.switch(branch_name)

    def merge_no_ff(self, branch_name: str, into: str) -> None:
        """Merge a branch into the checked-out one, always creating a merge commit."""
        try:
            self.repo.git.merge("--no-ff", "--no-edit", branch_name)
        except git.exc.GitCommandError as e:
            if self.is_merge_in_progress():
                raise MergeConflictError(branch_name, into) from e
            raise GitOperationError("merge", branch_name, describe_git_error(e)) from e

    def upstream_push_target(self, branch_name: str) -> Optional[Tuple[str, str]]:
        """(remote, remote ref) a branch's upstream lives at, or None without one."""
        try:
            output = self.repo.git.for_each_ref(
                "--format=%(upstream:remotename)%09%(upstream:remoteref)",
                f"{HEADS_PREFIX}{branch_name}",
            )
        except git.exc.GitCommandError as e:
            logger.debug(f"Could not read upstream of {branch_name}: {e}")
            return None

        remote, _, remote_ref = output.strip().partition("\t")
        if not remote or not remote_ref:
            return None
        return remote, remote_ref

    def push(self, branch_name: str, set_upstream: bool = False) -> None:
        """Push exactly one branch.

        With set_upstream the branch is pushed to the configured remote under
        its own name and becomes tracked. Otherwise it goes to its existing
        upstream through an explicit refspec, so push.default never widens
        the push to other branches.
        """
        with self._git_operation("push", branch_name):
            if set_upstream:
                self.repo.git.push("-u", self.remote_name, branch_name)
                return

            target = self.upstream_push_target(branch_name)
            if target is None:
                raise GitOperationError("push", branch_name, "no upstream configured")
            remote, remote_ref = target
            self.repo.git.push(remote, f"{HEADS_PREFIX}{branch_name}:{remote_ref}")
