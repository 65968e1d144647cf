"""Repository state model."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class IntegrityStatus(Enum):
    """Outcome of the repository integrity scan."""
    CLEAN = "clean"
    WARNINGS_IGNORABLE = "warnings-ignorable"  # Only dangling objects were found
    FAILED = "failed"
    SKIPPED = "skipped"  # Scan disabled by configuration


@dataclass(frozen=True)
class RepositoryState:
    """Operation-in-progress markers, lock file and integrity scan outcome."""
    merge_in_progress: bool = False
    rebase_in_progress: bool = False
    cherry_pick_in_progress: bool = False
    revert_in_progress: bool = False
    lock_file_present: bool = False
    integrity: IntegrityStatus = IntegrityStatus.SKIPPED
    integrity_findings: Tuple[str, ...] = ()

    @property
    def operation_in_progress(self) -> Optional[str]:
        """Name of the unfinished operation, if any."""
        if self.merge_in_progress:
            return "merge"
        if self.rebase_in_progress:
            return "rebase"
        if self.cherry_pick_in_progress:
            return "cherry-pick"
        if self.revert_in_progress:
            return "revert"
        return None

    @property
    def is_healthy(self) -> bool:
        return (
            self.operation_in_progress is None
            and not self.lock_file_present
            and self.integrity != IntegrityStatus.FAILED
        )
