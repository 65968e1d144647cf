"""Branch model"""
from dataclasses import dataclass
from typing import Optional

# Name git uses for the checked-out commit when no branch is checked out
DETACHED_HEAD = "HEAD"


@dataclass(frozen=True)
class BranchInfo:
    """Snapshot of a local branch relative to its upstream and to main."""
    name: str
    upstream: Optional[str] = None  # None = no upstream set
    upstream_gone: bool = False  # Upstream configured but its remote ref was deleted
    ahead: Optional[int] = None  # None = no usable upstream
    behind: Optional[int] = None
    unmerged: int = 0  # Commits reachable from the branch but not from main

    @property
    def has_upstream(self) -> bool:
        return self.upstream is not None and not self.upstream_gone

    @property
    def is_detached(self) -> bool:
        return self.name == DETACHED_HEAD or self.name.startswith("(")
