"""Exceptions raised for malformed external input."""

from typing import Optional


class WorkflowBuilderError(Exception):
    """Base class for workflow_builder exceptions."""


class InvalidDocumentError(WorkflowBuilderError):
    """An imported document does not satisfy the workflow invariants."""

    def __init__(self, message: str, violations: Optional[list[str]] = None):
        super().__init__(message)
        self.violations = violations or []

    def __str__(self) -> str:
        base = super().__str__()
        if not self.violations:
            return base
        return base + "\n" + "\n".join(f"- {v}" for v in self.violations)


class CommandSyntaxError(WorkflowBuilderError):
    """A text command line could not be parsed."""
