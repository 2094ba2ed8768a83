"""Workflow Builder - tree-shaped workflow documents with undo/redo editing."""

from .models import NodeType, WorkflowNode, WorkflowDocument, initial_document, validate_document
from .editor import WorkflowEngine, CommandError, CommandResult, EditorState
from .export import dump_document, load_document

__version__ = "0.1.0"

__all__ = [
    "NodeType",
    "WorkflowNode",
    "WorkflowDocument",
    "initial_document",
    "validate_document",
    "WorkflowEngine",
    "CommandError",
    "CommandResult",
    "EditorState",
    "dump_document",
    "load_document",
]
