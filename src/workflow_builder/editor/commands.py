"""Editor commands - the messages accepted by the workflow engine."""

import shlex
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..errors import CommandSyntaxError
from ..models import NodeType


class AddNode(BaseModel):
    """Add a child of ``node_type`` under ``parent_id``."""

    kind: Literal["add_node"] = "add_node"
    parent_id: str
    node_type: NodeType
    branch_label: Optional[str] = None


class DeleteNode(BaseModel):
    """Splice a node out of the tree."""

    kind: Literal["delete_node"] = "delete_node"
    node_id: str


class UpdateLabel(BaseModel):
    kind: Literal["update_label"] = "update_label"
    node_id: str
    label: str


class Undo(BaseModel):
    kind: Literal["undo"] = "undo"


class Redo(BaseModel):
    kind: Literal["redo"] = "redo"


Command = Annotated[
    Union[AddNode, DeleteNode, UpdateLabel, Undo, Redo],
    Field(discriminator="kind"),
]

command_adapter: TypeAdapter[Command] = TypeAdapter(Command)

USAGE = {
    "add": "add <parent-id> <action|branch|end> [branch-label]",
    "delete": "delete <node-id>",
    "label": "label <node-id> <text...>",
    "undo": "undo",
    "redo": "redo",
}

_ALIASES = {
    "del": "delete",
    "rm": "delete",
    "rename": "label",
}


def parse_command(line: str) -> Command:
    """
    Parse a text command line into a Command.

    Args:
        line: e.g. ``add start action`` or ``label node_1 "Send email"``

    Returns:
        The parsed command

    Raises:
        CommandSyntaxError: unknown verb, wrong argument count or bad node type
    """
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        raise CommandSyntaxError(f"Cannot parse '{line}': {e}") from e

    if not tokens:
        raise CommandSyntaxError("Empty command")

    verb = tokens[0].lower()
    verb = _ALIASES.get(verb, verb)
    args = tokens[1:]

    if verb not in USAGE:
        raise CommandSyntaxError(f"Unknown command '{tokens[0]}'")

    try:
        if verb == "add" and len(args) in (2, 3):
            return AddNode(
                parent_id=args[0],
                node_type=args[1].lower(),
                branch_label=args[2] if len(args) == 3 else None,
            )
        if verb == "delete" and len(args) == 1:
            return DeleteNode(node_id=args[0])
        if verb == "label" and len(args) >= 2:
            return UpdateLabel(node_id=args[0], label=" ".join(args[1:]))
        if verb == "undo" and not args:
            return Undo()
        if verb == "redo" and not args:
            return Redo()
    except ValidationError as e:
        raise CommandSyntaxError(f"Invalid arguments for '{verb}': {e.errors()[0]['msg']}") from e

    raise CommandSyntaxError(f"Usage: {USAGE[verb]}")
