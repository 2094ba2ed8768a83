"""Editor reducer - pure (state, command) -> result transitions.

No side effects, no IO. Every transition is total: rejected commands return
the input state untouched together with a ``CommandError``. Documents are
never mutated in place; each applied command builds a new node mapping and
replaces only the nodes it touches, so earlier snapshots stay valid history.
"""

from enum import Enum
from types import MappingProxyType
from typing import Callable, Optional
from pydantic import BaseModel, ConfigDict, Field

from ..models import NodeType, WorkflowDocument, WorkflowNode, initial_document
from .commands import AddNode, Command, DeleteNode, Redo, Undo, UpdateLabel
from .rules import can_delete, can_have_children, default_label, generate_node_id, valid_child_types


class CommandError(str, Enum):
    """Reasons a mutating command is rejected."""

    PARENT_NOT_FOUND = "parent_not_found"
    UNSUPPORTED_CHILD_TYPE = "unsupported_child_type"
    NODE_NOT_FOUND = "node_not_found"
    ROOT_DELETION_FORBIDDEN = "root_deletion_forbidden"


class EditorState(BaseModel):
    """编辑器状态 - current document plus undo/redo snapshot stacks.

    Both stacks are ordered oldest first, most recent last.
    """

    model_config = ConfigDict(frozen=True)

    document: WorkflowDocument = Field(default_factory=initial_document)
    undo_stack: tuple[WorkflowDocument, ...] = Field(default=())
    redo_stack: tuple[WorkflowDocument, ...] = Field(default=())

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)


class CommandResult(BaseModel):
    """Outcome of one command."""

    model_config = ConfigDict(frozen=True)

    state: EditorState
    applied: bool
    error: Optional[CommandError] = None
    message: str = ""
    node_id: Optional[str] = None  # id of the node created by add_node

    @property
    def document(self) -> WorkflowDocument:
        return self.state.document


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _push(
    stack: tuple[WorkflowDocument, ...],
    document: WorkflowDocument,
    limit: Optional[int],
) -> tuple[WorkflowDocument, ...]:
    stack = stack + (document,)
    if limit is not None and len(stack) > limit:
        stack = stack[len(stack) - limit:]
    return stack


def _commit(
    state: EditorState,
    nodes: dict[str, WorkflowNode],
    message: str,
    history_limit: Optional[int],
    node_id: Optional[str] = None,
) -> CommandResult:
    # model_copy skips validators
    document = state.document.model_copy(update={"nodes": MappingProxyType(nodes)})
    new_state = state.model_copy(update={
        "document": document,
        "undo_stack": _push(state.undo_stack, state.document, history_limit),
        "redo_stack": (),
    })
    return CommandResult(state=new_state, applied=True, message=message, node_id=node_id)


def _reject(state: EditorState, error: CommandError, message: str) -> CommandResult:
    return CommandResult(state=state, applied=False, error=error, message=message)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def add_node(
    state: EditorState,
    parent_id: str,
    node_type: NodeType,
    branch_label: Optional[str] = None,
    *,
    node_id: Optional[str] = None,
    history_limit: Optional[int] = None,
    id_factory: Callable[[], str] = generate_node_id,
) -> CommandResult:
    """
    Add a new node under ``parent_id``.

    Under an action parent the new node becomes the sole child and adopts
    the previous successor, so the downstream subtree is kept. Under start
    and branch parents the new node is appended to the children.

    Args:
        state: Current editor state
        parent_id: Node to attach to
        node_type: Type of the new node
        branch_label: Optional branch tag (e.g. "True")
        node_id: Id for the new node; taken from ``id_factory`` when omitted
        history_limit: Max snapshots kept on the undo stack
        id_factory: Id generator, only called once the command is accepted;
            ids already in the document are skipped

    Returns:
        CommandResult; ``node_id`` holds the new id when applied

    Raises:
        ValueError: an explicit ``node_id`` is already taken
    """
    document = state.document
    parent = document.get_node(parent_id)
    if parent is None:
        return _reject(state, CommandError.PARENT_NOT_FOUND, f"Parent node '{parent_id}' not found")

    if not can_have_children(parent.type):
        return _reject(
            state,
            CommandError.UNSUPPORTED_CHILD_TYPE,
            f"Cannot add child to {parent.type.value} node '{parent_id}'",
        )

    node_type = NodeType(node_type)
    if node_type not in valid_child_types(parent.type):
        return _reject(
            state,
            CommandError.UNSUPPORTED_CHILD_TYPE,
            f"A {node_type.value} node cannot be a child of {parent.type.value} node '{parent_id}'",
        )

    adopted: tuple[str, ...] = ()
    if parent.type == NodeType.ACTION:
        adopted = parent.children
        if adopted and not can_have_children(node_type):
            return _reject(
                state,
                CommandError.UNSUPPORTED_CHILD_TYPE,
                f"Cannot insert {node_type.value} node after '{parent_id}': it already has a successor",
            )

    if node_id is not None:
        if node_id in document.nodes:
            raise ValueError(f"Node id '{node_id}' already exists")
        new_id = node_id
    else:
        new_id = id_factory()
        while new_id in document.nodes:
            new_id = id_factory()

    nodes = dict(document.nodes)
    nodes[new_id] = WorkflowNode(
        id=new_id,
        type=node_type,
        label=default_label(node_type),
        children=adopted,
        parent_id=parent_id,
        branch_label=branch_label,
    )

    if parent.type == NodeType.ACTION:
        # Splice the existing successor below the new node
        for child_id in adopted:
            nodes[child_id] = nodes[child_id].model_copy(update={"parent_id": new_id})
        nodes[parent_id] = parent.model_copy(update={"children": (new_id,)})
    else:
        nodes[parent_id] = parent.model_copy(update={"children": parent.children + (new_id,)})

    return _commit(
        state,
        nodes,
        f"Added {node_type.value} node '{new_id}' under '{parent_id}'",
        history_limit,
        node_id=new_id,
    )


def delete_node(
    state: EditorState,
    node_id: str,
    *,
    history_limit: Optional[int] = None,
) -> CommandResult:
    """
    Splice a node out of the tree.

    The node's slot in its parent's children is replaced, in place, by the
    node's own children. Each of them is re-parented to the grandparent and
    takes over the deleted node's branch label (which may be None).
    """
    document = state.document
    if not can_delete(node_id, document.root_id):
        return _reject(state, CommandError.ROOT_DELETION_FORBIDDEN, "Cannot delete root node")

    target = document.get_node(node_id)
    if target is None or target.parent_id is None:
        return _reject(state, CommandError.NODE_NOT_FOUND, f"Node '{node_id}' not found or has no parent")

    parent = document.get_node(target.parent_id)
    if parent is None or node_id not in parent.children:
        return _reject(state, CommandError.NODE_NOT_FOUND, f"Parent of node '{node_id}' not found")

    idx = parent.children.index(node_id)
    nodes = dict(document.nodes)
    nodes[parent.id] = parent.model_copy(update={
        "children": parent.children[:idx] + target.children + parent.children[idx + 1:],
    })
    for child_id in target.children:
        nodes[child_id] = nodes[child_id].model_copy(update={
            "parent_id": parent.id,
            "branch_label": target.branch_label,
        })
    del nodes[node_id]

    return _commit(
        state,
        nodes,
        f"Deleted node '{node_id}', {len(target.children)} child(ren) moved to '{parent.id}'",
        history_limit,
    )


def update_label(
    state: EditorState,
    node_id: str,
    label: str,
    *,
    history_limit: Optional[int] = None,
) -> CommandResult:
    """Replace a node's label verbatim."""
    node = state.document.get_node(node_id)
    if node is None:
        return _reject(state, CommandError.NODE_NOT_FOUND, f"Node '{node_id}' not found")

    nodes = dict(state.document.nodes)
    nodes[node_id] = node.model_copy(update={"label": label})
    return _commit(state, nodes, f"Relabelled node '{node_id}'", history_limit)


def undo(state: EditorState, *, history_limit: Optional[int] = None) -> CommandResult:
    """Restore the most recent past snapshot. No-op when there is none."""
    if not state.undo_stack:
        return CommandResult(state=state, applied=False, message="Nothing to undo")

    new_state = state.model_copy(update={
        "document": state.undo_stack[-1],
        "undo_stack": state.undo_stack[:-1],
        "redo_stack": _push(state.redo_stack, state.document, history_limit),
    })
    return CommandResult(state=new_state, applied=True, message="Undo")


def redo(state: EditorState, *, history_limit: Optional[int] = None) -> CommandResult:
    """Re-apply the most recently undone snapshot. No-op when there is none."""
    if not state.redo_stack:
        return CommandResult(state=state, applied=False, message="Nothing to redo")

    new_state = state.model_copy(update={
        "document": state.redo_stack[-1],
        "undo_stack": _push(state.undo_stack, state.document, history_limit),
        "redo_stack": state.redo_stack[:-1],
    })
    return CommandResult(state=new_state, applied=True, message="Redo")


def reduce(
    state: EditorState,
    command: Command,
    *,
    history_limit: Optional[int] = None,
    id_factory: Callable[[], str] = generate_node_id,
) -> CommandResult:
    """Apply one command to ``state``."""
    if isinstance(command, AddNode):
        return add_node(
            state,
            command.parent_id,
            command.node_type,
            command.branch_label,
            history_limit=history_limit,
            id_factory=id_factory,
        )
    if isinstance(command, DeleteNode):
        return delete_node(state, command.node_id, history_limit=history_limit)
    if isinstance(command, UpdateLabel):
        return update_label(state, command.node_id, command.label, history_limit=history_limit)
    if isinstance(command, Undo):
        return undo(state, history_limit=history_limit)
    if isinstance(command, Redo):
        return redo(state, history_limit=history_limit)
    raise TypeError(f"Unknown command: {command!r}")
