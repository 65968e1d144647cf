"""Tests for the blocking policy"""
import os
from unittest.mock import Mock

import pytest

from git_gate.config import Config
from git_gate.exceptions import PolicyBlockError
from git_gate.models import BranchInfo, WorktreeInfo
from git_gate.services.git import BranchQueries, GitOperations, WorktreeService
from git_gate.services.policy_service import BlockingPolicyService

from helpers import create_branch

MAIN = BranchInfo("main", upstream="origin/main", ahead=0, behind=0)
CURRENT_WORKTREE = WorktreeInfo("/repo", "main", "abc", is_current=True)


def make_service(branches=(), worktrees=(CURRENT_WORKTREE,)):
    branch_queries = Mock(spec=BranchQueries)
    branch_queries.list_branches.return_value = [MAIN, *branches]
    worktree_service = Mock(spec=WorktreeService)
    worktree_service.list_worktrees.return_value = list(worktrees)
    return BlockingPolicyService(branch_queries, worktree_service)


class TestEvaluate:
    def test_clean_repository(self):
        report = make_service().evaluate("main", "main")
        assert report.is_clean

    def test_branch_without_upstream(self):
        service = make_service([BranchInfo("local")])
        report = service.evaluate("main", "main")
        assert report.upstream == ["local: no upstream set"]

    def test_gone_upstream(self):
        service = make_service([BranchInfo("old", upstream="origin/old", upstream_gone=True)])
        report = service.evaluate("main", "main")
        assert report.upstream == ["old: upstream origin/old is gone"]

    def test_unpushed_commits(self):
        service = make_service([BranchInfo("feat", upstream="origin/feat", ahead=1, behind=0)])
        report = service.evaluate("main", "main")
        assert report.upstream == ["feat: 1 commit not pushed to origin/feat"]

    def test_behind_is_not_blocking(self):
        service = make_service([BranchInfo("feat", upstream="origin/feat", ahead=0, behind=4)])
        assert service.evaluate("main", "main").is_clean

    def test_unmerged_commits_counted(self):
        service = make_service([BranchInfo("feat", upstream="origin/feat", ahead=0, unmerged=2)])
        report = service.evaluate("main", "main")
        assert report.unmerged == ["feat: 2 commits not merged into main"]

    def test_excluded_branch_exempt_from_upstream_and_merge_checks(self):
        service = make_service([BranchInfo("feat", unmerged=5)])
        assert service.evaluate("feat", "main").is_clean

    def test_main_checked_for_upstream_when_not_excluded(self):
        service = make_service()
        service.branch_queries.list_branches.return_value = [
            BranchInfo("main", upstream="origin/main", ahead=3, behind=0),
            BranchInfo("feat", upstream="origin/feat", ahead=0),
        ]
        report = service.evaluate("feat", "main")
        assert report.upstream == ["main: 3 commits not pushed to origin/main"]
        assert report.unmerged == []

    def test_detached_entries_ignored(self):
        service = make_service([BranchInfo("(HEAD detached at 1234567)", unmerged=1)])
        assert service.evaluate("main", "main").is_clean

    def test_dirty_other_worktree(self):
        worktrees = [
            CURRENT_WORKTREE,
            WorktreeInfo("/wt/a", "feat", "def", is_current=False, is_dirty=True),
            WorktreeInfo("/wt/b", "", "123", is_current=False, is_dirty=True),
            WorktreeInfo("/wt/c", "other", "456", is_current=False, is_dirty=False),
        ]
        report = make_service(worktrees=worktrees).evaluate("main", "main")
        assert report.dirty_worktrees == [
            "/wt/a (branch: feat)",
            "/wt/b (branch: detached HEAD)",
        ]

    def test_current_worktree_never_blocks(self):
        worktrees = [WorktreeInfo("/repo", "main", "abc", is_current=True, is_dirty=True)]
        assert make_service(worktrees=worktrees).evaluate("main", "main").is_clean

    def test_all_categories_reported_together(self):
        service = make_service(
            [BranchInfo("local", unmerged=1)],
            [CURRENT_WORKTREE, WorktreeInfo("/wt", "x", "1", is_current=False, is_dirty=True)],
        )
        report = service.evaluate("main", "main")

        assert report.issue_count == 3
        assert report.upstream == ["local: no upstream set"]
        assert report.unmerged == ["local: 1 commit not merged into main"]
        assert report.dirty_worktrees == ["/wt (branch: x)"]

    def test_snapshots_are_reused(self):
        service = make_service()
        report = service.evaluate(
            "main", "main", branches=[MAIN, BranchInfo("local")], worktrees=[CURRENT_WORKTREE]
        )

        service.branch_queries.list_branches.assert_not_called()
        service.worktree_service.list_worktrees.assert_not_called()
        assert report.upstream == ["local: no upstream set"]


class TestRequireClean:
    def test_returns_clean_report(self):
        assert make_service().require_clean("main", "main").is_clean

    def test_raises_with_report(self):
        service = make_service([BranchInfo("local")])
        with pytest.raises(PolicyBlockError, match=r"Blocking issues detected \(1\)") as exc_info:
            service.require_clean("main", "main")
        assert exc_info.value.report.upstream == ["local: no upstream set"]


class TestAgainstRealRepository:
    """Policy evaluated on real branches and worktrees"""

    @pytest.fixture
    def service(self, git_repo):
        config = Config()
        git_ops = GitOperations(git_repo.working_tree_dir, config)
        return BlockingPolicyService(BranchQueries(git_ops, config), WorktreeService(git_ops))

    def test_fresh_clone_is_clean(self, service):
        assert service.evaluate("main", "main").is_clean

    def test_reports_every_category(self, service, git_repo, temp_dir):
        create_branch(git_repo, "local-only")
        create_branch(git_repo, "pushed", commits=2, push=True)
        worktree_path = temp_dir / "wt"
        git_repo.git.worktree("add", str(worktree_path), "pushed")
        (worktree_path / "scratch.txt").write_text("wip\n")

        report = service.evaluate("main", "main")

        assert report.upstream == ["local-only: no upstream set"]
        assert report.unmerged == ["pushed: 2 commits not merged into main"]
        assert report.dirty_worktrees == [f"{os.path.realpath(worktree_path)} (branch: pushed)"]
