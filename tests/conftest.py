"""Pytest fixtures for git-gate tests"""
import logging
import tempfile
from pathlib import Path

import git
import pytest

from git_gate.config import Config
from git_gate.core.workflow import WorkflowOrchestrator
from git_gate.utils.logging import ColoredFormatter

from helpers import commit_file, configure_identity


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def origin_repo(temp_dir):
    """Create a bare repository acting as the remote."""
    repo = git.Repo.init(temp_dir / "origin.git", bare=True)
    repo.git.symbolic_ref("HEAD", "refs/heads/main")
    yield repo
    repo.close()


@pytest.fixture
def git_repo(temp_dir, origin_repo):
    """Create a repository with main pushed to origin and tracking it."""
    repo_path = temp_dir / "work"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    configure_identity(repo)

    commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")

    # Rename master to main if needed
    repo.git.branch("-M", "main")

    repo.create_remote("origin", str(origin_repo.git_dir))
    repo.git.push("-u", "origin", "main")

    yield repo

    repo.close()


@pytest.fixture
def second_clone(temp_dir, origin_repo, git_repo):
    """Another clone of origin, used to move the remote on behind the work repo's back."""
    repo = git.Repo.clone_from(str(origin_repo.git_dir), temp_dir / "other-clone")
    configure_identity(repo)
    yield repo
    repo.close()


@pytest.fixture
def config():
    """Configuration with every check enabled."""
    return Config(remote="origin", main_branch="main", fetch_before_check=True, integrity_check=True)


@pytest.fixture
def prompts():
    """Prompts shown by the orchestrator, in order."""
    return []


@pytest.fixture
def make_orchestrator(git_repo, config, prompts):
    """Factory for orchestrators with a programmed confirmation answer."""

    def _make(answer=False, path=None, cfg=None, **kwargs):
        def confirm(prompt):
            prompts.append(prompt)
            return answer

        return WorkflowOrchestrator(
            path or git_repo.working_tree_dir, cfg or config, confirm=confirm, **kwargs
        )

    return _make


@pytest.fixture
def restore_logging():
    """Remove the handlers setup_logging() installs and restore logger levels."""
    root = logging.getLogger()
    level = root.level
    git_level = logging.getLogger("git").level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, ColoredFormatter) or (
            isinstance(handler, logging.FileHandler) and handler.baseFilename.endswith("git-gate.log")
        ):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.getLogger("git").setLevel(git_level)
