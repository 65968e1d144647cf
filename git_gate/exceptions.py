"""Custom exceptions for git-gate"""

from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from git_gate.models.report import BlockingReport


class GitGateError(Exception):
    """Base exception for all git-gate errors."""
    pass


class FatalError(GitGateError):
    """A precondition failed; the current workflow stops with a non-zero exit."""
    pass


class NotARepositoryError(FatalError):
    """Exception raised when the working directory is not inside a git work tree."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not inside a git work tree: {path}")


class RepositoryBusyError(FatalError):
    """Exception raised when a lock file or an unfinished operation is present."""

    def __init__(self, reason: str, hint: Optional[str] = None):
        self.reason = reason
        self.hint = hint

        error_msg = reason
        if hint:
            error_msg += f" ({hint})"

        super().__init__(error_msg)


class IntegrityCheckError(FatalError):
    """Exception raised when git fsck reports problems other than dangling objects."""

    def __init__(self, findings: Iterable[str]):
        self.findings = list(findings)

        error_msg = "Repository integrity check failed"
        if self.findings:
            error_msg += ":\n" + "\n".join(f"  {line}" for line in self.findings)

        super().__init__(error_msg)


class GitOperationError(FatalError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class MissingRemoteError(FatalError):
    """Exception raised when the configured remote does not exist."""

    def __init__(self, remote: str):
        self.remote = remote
        super().__init__(f"Remote '{remote}' is not configured (set GIT_GATE_REMOTE or add the remote)")


class DetachedHeadError(FatalError):
    """Exception raised when repository is in detached HEAD state."""

    def __init__(self):
        super().__init__("Repository is in detached HEAD state; check out a branch first")


class DirtyWorkingTreeError(FatalError):
    """Exception raised when the current working tree has uncommitted changes."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"Working tree is not clean; commit or stash your changes before '{operation}'"
        )


class InvalidBranchNameError(FatalError):
    """Exception raised when a requested branch name is not a valid ref name."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(f"'{branch}' is not a valid branch name")


class BranchExistsError(FatalError):
    """Exception raised when creating a branch that already exists."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(f"Branch '{branch}' already exists")


class StaleMainError(FatalError):
    """Exception raised when local main is behind its remote counterpart."""

    def __init__(self, main_branch: str, remote_ref: str, behind: int):
        self.main_branch = main_branch
        self.remote_ref = remote_ref
        self.behind = behind
        super().__init__(
            f"Local {main_branch} is behind {remote_ref} by {behind} commit(s); "
            f"pull {main_branch} before merging"
        )


class MergeConflictError(FatalError):
    """Exception raised when a merge stops on conflicts."""

    def __init__(self, branch: str, main_branch: str):
        self.branch = branch
        self.main_branch = main_branch
        super().__init__(
            f"Merge of '{branch}' into {main_branch} stopped on conflicts. "
            "Resolve them and commit, or run 'git merge --abort'"
        )


class AmbiguousMergeError(FatalError):
    """Exception raised when more than one branch could be merged from main."""

    def __init__(self, main_branch: str, candidates: Iterable[str]):
        self.main_branch = main_branch
        self.candidates = list(candidates)
        super().__init__(
            f"On {main_branch}: {len(self.candidates)} branches have unmerged commits "
            f"({', '.join(self.candidates)}); check out the one to merge and run 'm' there"
        )


class PolicyBlockError(GitGateError):
    """Exception raised when the blocking policy reports at least one issue."""

    def __init__(self, report: "BlockingReport"):
        self.report = report
        super().__init__(f"Blocking issues detected ({report.issue_count})")
