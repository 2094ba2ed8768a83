"""Data models for workflow documents."""

from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .config import settings


class NodeType(str, Enum):
    """节点类型"""

    START = "start"
    ACTION = "action"
    BRANCH = "branch"
    END = "end"


class WorkflowNode(BaseModel):
    """A single node of the workflow tree.

    Nodes refer to each other by id only; ``children`` order is display
    order, and under a branch parent ``branch_label`` groups the children.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique node id")
    type: NodeType = Field(..., description="start/action/branch/end")
    label: str = Field(default="", description="Free text label")
    children: tuple[str, ...] = Field(default=(), description="Ordered child ids")
    parent_id: Optional[str] = Field(default=None, description="Parent id, None only for the root")
    branch_label: Optional[str] = Field(default=None, description="Branch tag, e.g. True/False")


class WorkflowDocument(BaseModel):
    """Node mapping plus root identity - one immutable snapshot of a workflow."""

    model_config = ConfigDict(frozen=True)

    root_id: str = Field(..., description="Id of the single parentless start node")
    nodes: Mapping[str, WorkflowNode] = Field(
        default_factory=dict, validate_default=True, description="id -> node, read-only"
    )

    @field_validator("nodes", mode="after")
    @classmethod
    def _freeze_nodes(cls, v: Mapping[str, WorkflowNode]) -> Mapping[str, WorkflowNode]:
        return MappingProxyType(dict(v))

    @field_serializer("nodes")
    def _dump_nodes(self, v: Mapping[str, WorkflowNode]) -> dict[str, WorkflowNode]:
        return dict(v)

    @property
    def root(self) -> WorkflowNode:
        return self.nodes[self.root_id]

    def get_node(self, node_id: str) -> Optional[WorkflowNode]:
        """Find a node by id."""
        return self.nodes.get(node_id)

    def get_children(self, node_id: str) -> list[WorkflowNode]:
        """Get the child nodes of a node, in order."""
        node = self.nodes.get(node_id)
        if node is None:
            return []
        return [self.nodes[c] for c in node.children if c in self.nodes]

    def walk(self) -> Iterator[tuple[WorkflowNode, int]]:
        """Yield ``(node, depth)`` pairs in pre-order starting at the root."""
        if self.root_id not in self.nodes:
            return
        stack = [(self.root_id, 0)]
        seen: set[str] = set()
        while stack:
            node_id, depth = stack.pop()
            if node_id in seen or node_id not in self.nodes:
                continue
            seen.add(node_id)
            node = self.nodes[node_id]
            yield node, depth
            stack.extend((c, depth + 1) for c in reversed(node.children))


def initial_document(root_id: Optional[str] = None, root_label: Optional[str] = None) -> WorkflowDocument:
    """Create the single-node document holding only the start node."""
    root_id = root_id or settings.root_id
    root = WorkflowNode(
        id=root_id,
        type=NodeType.START,
        label=root_label if root_label is not None else settings.root_label,
    )
    return WorkflowDocument(root_id=root_id, nodes={root_id: root})


def validate_document(document: WorkflowDocument, allow_action_fanout: bool = False) -> list[str]:
    """Validate the tree structure of a document.

    Splicing a multi-child node out from under an action leaves that action
    with several successors; pass ``allow_action_fanout`` to accept that.

    Returns a list of error messages (empty = valid).
    """
    errors: list[str] = []
    nodes = document.nodes

    root = nodes.get(document.root_id)
    if root is None:
        errors.append(f"Root node '{document.root_id}' is missing.")
    else:
        if root.type != NodeType.START:
            errors.append(f"Root node '{root.id}' must be of type start, got {root.type.value}.")
        if root.parent_id is not None:
            errors.append(f"Root node '{root.id}' must not have a parent.")

    parentless = [n.id for n in nodes.values() if n.parent_id is None]
    if len(parentless) != 1:
        errors.append(f"Document must have exactly one parentless node, found {len(parentless)}: {parentless}")

    for key, node in nodes.items():
        if key != node.id:
            errors.append(f"Node stored under '{key}' has id '{node.id}'.")

        if node.type == NodeType.END and node.children:
            errors.append(f"End node '{node.id}' has children.")
        if node.type == NodeType.ACTION and len(node.children) > 1 and not allow_action_fanout:
            errors.append(f"Action node '{node.id}' has {len(node.children)} children (max 1).")
        if len(set(node.children)) != len(node.children):
            errors.append(f"Node '{node.id}' lists a child more than once.")

        for child_id in node.children:
            child = nodes.get(child_id)
            if child is None:
                errors.append(f"Node '{node.id}' references unknown child '{child_id}'.")
            elif child.parent_id != node.id:
                errors.append(
                    f"Child '{child_id}' of '{node.id}' points to parent '{child.parent_id}'."
                )

        if node.parent_id is not None:
            parent = nodes.get(node.parent_id)
            if parent is None:
                errors.append(f"Node '{node.id}' references unknown parent '{node.parent_id}'.")
            elif parent.children.count(node.id) != 1:
                errors.append(f"Node '{node.id}' is not listed exactly once by parent '{parent.id}'.")

    # Reachability / cycles
    if root is not None:
        visited: set[str] = set()
        stack = [document.root_id]
        while stack:
            node_id = stack.pop()
            if node_id in visited:
                errors.append(f"Node '{node_id}' is reachable more than once (cycle or shared child).")
                continue
            visited.add(node_id)
            node = nodes.get(node_id)
            if node is not None:
                stack.extend(node.children)
        unreachable = sorted(set(nodes) - visited)
        if unreachable:
            errors.append(f"Nodes not reachable from the root: {unreachable}")

    return errors
