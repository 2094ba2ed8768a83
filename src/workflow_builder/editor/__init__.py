"""Editor package - structural rules, commands, reducer and engine."""

from .rules import (
    can_have_children,
    can_delete,
    valid_child_types,
    default_label,
    generate_node_id,
    sequential_ids,
)
from .commands import AddNode, DeleteNode, UpdateLabel, Undo, Redo, Command, parse_command
from .reducer import CommandError, CommandResult, EditorState, reduce
from .engine import WorkflowEngine

__all__ = [
    "can_have_children",
    "can_delete",
    "valid_child_types",
    "default_label",
    "generate_node_id",
    "sequential_ids",
    "AddNode",
    "DeleteNode",
    "UpdateLabel",
    "Undo",
    "Redo",
    "Command",
    "parse_command",
    "CommandError",
    "CommandResult",
    "EditorState",
    "reduce",
    "WorkflowEngine",
]
