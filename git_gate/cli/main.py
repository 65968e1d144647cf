"""Command-line interface for git-gate"""

import os
import sys
from typing import List, Optional

from git_gate.cli.args import COMMANDS, parse_args
from git_gate.config import Config
from git_gate.core.workflow import WorkflowOrchestrator
from git_gate.exceptions import FatalError, PolicyBlockError
from git_gate.services.display_service import DisplayService, error_console
from git_gate.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application.

    Returns:
        0 on success or a declined merge, 1 on any failure or usage error
    """
    display = DisplayService()

    try:
        parsed_args = parse_args(argv)
    except SystemExit as e:
        # --version, or an argparse error
        return e.code if isinstance(e.code, int) else 1

    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

    if parsed_args.help:
        display.usage()
        return 0

    command = parsed_args.command
    if parsed_args.unknown or (command is not None and command not in COMMANDS):
        display.usage()
        return 1
    if command == "b" and len(parsed_args.args) != 1:
        display.error("'b' takes exactly one argument: the name of the new branch")
        display.usage()
        return 1
    if command in ("c", "m") and parsed_args.args:
        display.usage()
        return 1

    try:
        config = Config.from_env(verbose=parsed_args.verbose, debug=parsed_args.debug)
    except ValueError as e:
        display.error(f"Invalid configuration: {e}")
        return 1

    if parsed_args.debug:
        logger.debug("Configuration:")
        for key, value in config.to_dict().items():
            logger.debug(f"  {key}: {value}")

    try:
        orchestrator = WorkflowOrchestrator(os.getcwd(), config, display=display)

        if command is None:
            orchestrator.check_health()
            display.usage()
        elif command == "c":
            orchestrator.commit_and_push()
        elif command == "b":
            orchestrator.create_branch(parsed_args.args[0])
        else:
            orchestrator.merge_to_main()

        return 0
    except PolicyBlockError as e:
        display.blocking_report(e.report)
        return 1
    except FatalError as e:
        display.error(str(e))
        return 1
    except KeyboardInterrupt:
        error_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except Exception as e:
        display.error(f"Unexpected error: {e}")
        if parsed_args.debug:
            error_console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
