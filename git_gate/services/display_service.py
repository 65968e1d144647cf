"""Display service for user-facing output"""
from rich.console import Console
from rich.markup import escape

from git_gate.models.report import BlockingReport
from git_gate.utils.logging import get_logger

# soft_wrap keeps long messages on one line when output is not a terminal
console = Console(soft_wrap=True, highlight=False)
error_console = Console(stderr=True, soft_wrap=True, highlight=False)
logger = get_logger(__name__)

USAGE_TEXT = """\
Usage: g [command]

Safety gate for git: branch and merge only when every branch and worktree is safe.

Commands:
  (none)      Check repository health and show this help
  c           Stage everything, commit with an automatic message and push
  b <name>    Create, commit and push a new branch from the current one
  m           Merge the current branch into main and push main
              (on main: merge the single branch with unmerged commits, after confirmation)

Options:
  -h, --help  Show this help
  --version   Show version
  -v          Verbose logging
  --debug     Debug logging (also written to ~/.git-gate/git-gate.log)

Environment:
  GIT_GATE_REMOTE       Remote to push to and check against (default: origin)
  GIT_GATE_MAIN_BRANCH  Branch everything merges into (default: main)
  GIT_GATE_FETCH        Fetch before checking branches, 1/0 (default: 1)
  GIT_GATE_FSCK         Run git fsck in the health check, 1/0 (default: 1)
"""


class DisplayService:
    """Prints progress, errors and blocking reports."""

    def info(self, message: str) -> None:
        console.print(escape(message))

    def success(self, message: str) -> None:
        console.print(f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        error_console.print(f"[yellow]WARNING: {escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        error_console.print(f"[red]ERROR: {escape(message)}[/red]")

    def usage(self) -> None:
        console.print(escape(USAGE_TEXT), end="")

    def blocking_report(self, report: BlockingReport) -> None:
        """Print every non-empty category of a blocking report."""
        error_console.print(
            f"[red]ERROR: Blocking issues detected ({report.issue_count}):[/red]"
        )
        for label, issues in report.sections():
            error_console.print(f"[yellow]{escape(label)}[/yellow]")
            for issue in issues:
                error_console.print(f"  - {escape(issue)}")
        logger.debug(f"Reported {report.issue_count} blocking issue(s)")

    def confirm(self, prompt: str) -> bool:
        """Ask a yes/no question on the terminal; anything but yes declines."""
        try:
            response = console.input(escape(f"{prompt} [y/N] "))
        except EOFError:
            console.print()
            return False
        return response.strip().lower() in ("y", "yes")
