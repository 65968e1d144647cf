import sys

from git_gate.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
