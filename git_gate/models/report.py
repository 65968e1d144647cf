"""Blocking report model."""
from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

UPSTREAM_LABEL = "A) Branches without upstream or with unpushed commits:"
UNMERGED_LABEL = "B) Branches with commits not merged into {main}:"
DIRTY_WORKTREES_LABEL = "C) Other worktrees are dirty:"


@dataclass
class BlockingReport:
    """Issues that block a branch or merge operation, grouped by category.

    A: upstream problems, B: commits not merged into main, C: dirty worktrees.
    """
    main_branch: str = "main"
    upstream: List[str] = field(default_factory=list)
    unmerged: List[str] = field(default_factory=list)
    dirty_worktrees: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.upstream or self.unmerged or self.dirty_worktrees)

    @property
    def issue_count(self) -> int:
        return len(self.upstream) + len(self.unmerged) + len(self.dirty_worktrees)

    def sections(self) -> Iterator[Tuple[str, List[str]]]:
        """Yield (label, issues) for every non-empty category, in A, B, C order."""
        labelled = [
            (UPSTREAM_LABEL, self.upstream),
            (UNMERGED_LABEL.format(main=self.main_branch), self.unmerged),
            (DIRTY_WORKTREES_LABEL, self.dirty_worktrees),
        ]
        for label, issues in labelled:
            if issues:
                yield label, issues
