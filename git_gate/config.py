"""Configuration handling for git-gate"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_REMOTE = "GIT_GATE_REMOTE"
ENV_MAIN_BRANCH = "GIT_GATE_MAIN_BRANCH"
ENV_FETCH = "GIT_GATE_FETCH"
ENV_FSCK = "GIT_GATE_FSCK"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_bool(name: str, value: Optional[str], default: bool) -> bool:
    """Parse a boolean environment value.

    Args:
        name: Variable name, used in the error message
        value: Raw value (None or blank means unset)
        default: Value used when unset

    Returns:
        The parsed boolean
    """
    if value is None or not value.strip():
        return default

    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be one of 1/0, true/false, yes/no, on/off; got '{value}'")


@dataclass(frozen=True)
class Config:
    """Configuration for git-gate with validation.

    Built once at startup and passed to every service; nothing reads the
    environment after that.
    """

    remote: str = "origin"
    main_branch: str = "main"
    fetch_before_check: bool = True
    integrity_check: bool = True

    # Execution modes
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_remote()
        self._validate_main_branch()

    def _validate_remote(self):
        """Validate remote is not empty."""
        if not self.remote or not self.remote.strip():
            raise ValueError("remote cannot be empty")
        if self.remote != self.remote.strip():
            raise ValueError(f"remote must not contain surrounding whitespace, got '{self.remote}'")

    def _validate_main_branch(self):
        """Validate main_branch is not empty."""
        if not self.main_branch or not self.main_branch.strip():
            raise ValueError("main_branch cannot be empty")
        if self.main_branch != self.main_branch.strip():
            raise ValueError(
                f"main_branch must not contain surrounding whitespace, got '{self.main_branch}'"
            )

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        verbose: bool = False,
        debug: bool = False,
    ) -> "Config":
        """Create Config from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            verbose: Verbose output flag from the command line
            debug: Debug output flag from the command line
        """
        env = os.environ if environ is None else environ

        return cls(
            remote=(env.get(ENV_REMOTE) or "origin").strip(),
            main_branch=(env.get(ENV_MAIN_BRANCH) or "main").strip(),
            fetch_before_check=parse_bool(ENV_FETCH, env.get(ENV_FETCH), True),
            integrity_check=parse_bool(ENV_FSCK, env.get(ENV_FSCK), True),
            verbose=verbose,
            debug=debug,
        )

    def to_dict(self) -> dict:
        """Convert config to dictionary for debug display."""
        return {
            "remote": self.remote,
            "main_branch": self.main_branch,
            "fetch_before_check": self.fetch_before_check,
            "integrity_check": self.integrity_check,
            "verbose": self.verbose,
            "debug": self.debug,
        }
