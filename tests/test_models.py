from __future__ import annotations

import pytest
from pydantic import ValidationError

from workflow_builder.models import (
    NodeType,
    WorkflowDocument,
    WorkflowNode,
    initial_document,
    validate_document,
)


def _doc(*nodes: WorkflowNode, root_id: str = "start") -> WorkflowDocument:
    return WorkflowDocument(root_id=root_id, nodes={n.id: n for n in nodes})


def test_initial_document_is_valid():
    doc = initial_document(root_id="start", root_label="Start")
    assert validate_document(doc) == []
    assert doc.root == WorkflowNode(id="start", type=NodeType.START, label="Start")


def test_models_are_frozen():
    node = WorkflowNode(id="a", type="action")
    with pytest.raises(ValidationError):
        node.label = "changed"


def test_document_nodes_are_read_only():
    nodes = {"start": WorkflowNode(id="start", type="start")}
    doc = WorkflowDocument(root_id="start", nodes=nodes)
    with pytest.raises(TypeError):
        doc.nodes["x"] = WorkflowNode(id="x", type="end", parent_id="start")

    nodes["y"] = WorkflowNode(id="y", type="end")
    assert list(doc.nodes) == ["start"]
    assert doc.model_dump()["nodes"] == {"start": doc.root.model_dump()}


def test_walk_is_preorder():
    doc = _doc(
        WorkflowNode(id="start", type="start", children=("b",)),
        WorkflowNode(id="b", type="branch", parent_id="start", children=("x", "y")),
        WorkflowNode(id="x", type="action", parent_id="b", children=("z",)),
        WorkflowNode(id="z", type="end", parent_id="x"),
        WorkflowNode(id="y", type="end", parent_id="b"),
    )
    assert [(n.id, depth) for n, depth in doc.walk()] == [
        ("start", 0), ("b", 1), ("x", 2), ("z", 3), ("y", 2),
    ]
    assert [n.id for n in doc.get_children("b")] == ["x", "y"]
    assert doc.get_children("missing") == []


def test_missing_root():
    errors = validate_document(_doc(WorkflowNode(id="a", type="action"), root_id="start"))
    assert any("Root node 'start' is missing" in e for e in errors)


def test_root_must_be_start():
    errors = validate_document(_doc(WorkflowNode(id="start", type="action")))
    assert any("must be of type start" in e for e in errors)


def test_end_with_children_is_invalid():
    doc = _doc(
        WorkflowNode(id="start", type="start", children=("e",)),
        WorkflowNode(id="e", type="end", parent_id="start", children=("a",)),
        WorkflowNode(id="a", type="action", parent_id="e"),
    )
    assert validate_document(doc) == ["End node 'e' has children."]


def test_action_fanout():
    doc = _doc(
        WorkflowNode(id="start", type="start", children=("a",)),
        WorkflowNode(id="a", type="action", parent_id="start", children=("x", "y")),
        WorkflowNode(id="x", type="end", parent_id="a"),
        WorkflowNode(id="y", type="end", parent_id="a"),
    )
    assert validate_document(doc) == ["Action node 'a' has 2 children (max 1)."]
    assert validate_document(doc, allow_action_fanout=True) == []


def test_parent_child_mismatch():
    doc = _doc(
        WorkflowNode(id="start", type="start", children=("a",)),
        WorkflowNode(id="a", type="action", parent_id="other"),
        WorkflowNode(id="other", type="action", parent_id="start"),
    )
    errors = validate_document(doc)
    assert any("points to parent 'other'" in e for e in errors)
    assert any("is not listed exactly once by parent 'other'" in e for e in errors)
    assert any("is not listed exactly once by parent 'start'" in e for e in errors)


def test_cycle_and_unreachable_nodes():
    doc = _doc(
        WorkflowNode(id="start", type="start"),
        WorkflowNode(id="a", type="action", parent_id="b", children=("b",)),
        WorkflowNode(id="b", type="action", parent_id="a", children=("a",)),
    )
    errors = validate_document(doc)
    assert any("not reachable from the root" in e for e in errors)


def test_second_parentless_node():
    doc = _doc(
        WorkflowNode(id="start", type="start"),
        WorkflowNode(id="loose", type="start"),
    )
    errors = validate_document(doc)
    assert any("exactly one parentless node" in e for e in errors)


def test_unknown_child_reference():
    doc = _doc(WorkflowNode(id="start", type="start", children=("ghost",)))
    assert validate_document(doc) == ["Node 'start' references unknown child 'ghost'."]
