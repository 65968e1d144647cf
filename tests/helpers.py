"""Helpers for building git history in tests"""
from pathlib import Path


def configure_identity(repo):
    """Give a test repository a committer identity and unsigned commits."""
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
        writer.set_value("commit", "gpgsign", "false")


def commit_file(repo, name, content, message=None):
    """Write a file in the repository's work tree and commit it."""
    path = Path(repo.working_tree_dir) / name
    path.write_text(content)
    repo.index.add([name])
    return repo.index.commit(message or f"Update {name}")


def create_branch(repo, name, commits=0, push=False):
    """Create a branch from the current HEAD, optionally with commits and an upstream.

    Leaves the original branch checked out.
    """
    original = repo.active_branch.name
    repo.git.checkout("-b", name)
    for i in range(commits):
        commit_file(repo, f"{name.replace('/', '_')}_{i}.txt", f"{name} {i}\n", f"{name} commit {i}")
    if push:
        repo.git.push("-u", "origin", name)
    repo.git.checkout(original)


def remote_sha(origin_repo, branch):
    """Tip of a branch in the bare remote."""
    return origin_repo.commit(branch).hexsha
