from __future__ import annotations

import json

import pytest

from workflow_builder.errors import InvalidDocumentError
from workflow_builder.export import document_from_dict, document_to_dict, dump_document, load_document
from workflow_builder.models import NodeType


def _build_branchy(engine):
    action = engine.add_node("start", NodeType.ACTION).node_id
    branch = engine.add_node(action, NodeType.BRANCH).node_id
    engine.add_node(branch, NodeType.END, "True")
    engine.add_node(branch, NodeType.ACTION, "False")
    engine.update_label(action, "Fetch order ✓")
    return engine.get_state()


def test_dump_is_keyed_by_node_id(engine):
    doc = _build_branchy(engine)
    data = json.loads(dump_document(doc))

    assert data["root_id"] == "start"
    assert list(data["nodes"]) == list(doc.nodes)
    assert data["nodes"]["n_2"] == {
        "id": "n_2",
        "type": "branch",
        "label": "Branch",
        "children": ["n_3", "n_4"],
        "parent_id": "n_1",
        "branch_label": None,
    }
    assert "Fetch order ✓" in dump_document(doc)


def test_load_round_trip(engine):
    doc = _build_branchy(engine)
    assert load_document(dump_document(doc)) == doc
    assert document_from_dict(document_to_dict(doc)) == doc


def test_load_keeps_action_fanout_by_default(engine):
    doc = _build_branchy(engine)
    engine.delete_node("n_2")
    text = dump_document(engine.get_state())

    assert load_document(text).nodes["n_1"].children == ("n_3", "n_4")
    with pytest.raises(InvalidDocumentError):
        load_document(text, allow_action_fanout=False)
    assert doc.nodes["n_1"].children == ("n_2",)


def test_load_rejects_invalid_json():
    with pytest.raises(InvalidDocumentError, match="Invalid JSON"):
        load_document("{not json")


@pytest.mark.parametrize("payload", [[], {"nodes": {}}, {"root_id": "start", "nodes": []}])
def test_load_rejects_wrong_shape(payload):
    with pytest.raises(InvalidDocumentError):
        document_from_dict(payload)


def test_load_rejects_bad_node_type():
    payload = {"root_id": "start", "nodes": {"start": {"id": "start", "type": "loop"}}}
    with pytest.raises(InvalidDocumentError) as exc_info:
        document_from_dict(payload)
    assert exc_info.value.violations


def test_load_reports_invariant_violations():
    payload = {
        "root_id": "start",
        "nodes": {
            "start": {"id": "start", "type": "start", "children": ["e"]},
            "e": {"id": "e", "type": "end", "parent_id": "start", "children": ["x"]},
            "x": {"id": "x", "type": "action", "parent_id": "e"},
        },
    }
    with pytest.raises(InvalidDocumentError) as exc_info:
        document_from_dict(payload)
    assert exc_info.value.violations == ["End node 'e' has children."]
    assert "End node 'e' has children." in str(exc_info.value)
