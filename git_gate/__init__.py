"""
git-gate - A safety gate for committing, branching and merging with git
"""

from .__version__ import __version__
from .core import WorkflowOrchestrator
from .cli.main import main

__all__ = ["WorkflowOrchestrator", "main", "__version__"]
