"""Core workflows for git-gate."""

from .workflow import WorkflowOrchestrator, WorkflowState

__all__ = ["WorkflowOrchestrator", "WorkflowState"]
