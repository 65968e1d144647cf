"""Services for git-gate."""
