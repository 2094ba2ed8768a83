"""Structural rules - pure queries over node types and ids."""

import itertools
import time
import uuid
from typing import Callable, Optional

from ..config import settings
from ..models import NodeType

_CHILD_TYPES: dict[NodeType, frozenset[NodeType]] = {
    NodeType.START: frozenset({NodeType.ACTION, NodeType.BRANCH, NodeType.END}),
    NodeType.ACTION: frozenset({NodeType.ACTION, NodeType.BRANCH, NodeType.END}),
    NodeType.BRANCH: frozenset({NodeType.ACTION, NodeType.BRANCH, NodeType.END}),
    NodeType.END: frozenset(),
}


def can_have_children(node_type: NodeType) -> bool:
    """Check if a node type can have children."""
    return NodeType(node_type) != NodeType.END


def can_delete(node_id: str, root_id: str) -> bool:
    """Check if a node can be deleted. The root never can."""
    return node_id != root_id


def valid_child_types(parent_type: NodeType) -> frozenset[NodeType]:
    """Get the node types that may be added as children of ``parent_type``.

    ``start`` is never offered: a document has exactly one start node.
    """
    return _CHILD_TYPES[NodeType(parent_type)]


def default_label(node_type: NodeType) -> str:
    """Label given to a freshly added node: the capitalized type name."""
    return NodeType(node_type).value.capitalize()


def generate_node_id(prefix: Optional[str] = None) -> str:
    """Generate a unique ID for a new node.

    Millisecond timestamp plus 48 random bits.
    """
    prefix = prefix or settings.id_prefix
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}"


def sequential_ids(prefix: Optional[str] = None, start: int = 1) -> Callable[[], str]:
    """Id factory yielding ``node_1``, ``node_2``, ... for hand-typed sessions and scripts."""
    prefix = prefix or settings.id_prefix
    counter = itertools.count(start)
    return lambda: f"{prefix}_{next(counter)}"
