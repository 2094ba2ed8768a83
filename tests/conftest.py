from __future__ import annotations

import logging

import pytest

from workflow_builder.editor import EditorState, WorkflowEngine, sequential_ids
from workflow_builder.models import WorkflowDocument, initial_document


def shape(document: WorkflowDocument, node_id: str | None = None) -> tuple:
    """Structure of a document with ids erased: (type, label, branch_label, children)."""
    node = document.nodes[node_id or document.root_id]
    return (
        node.type.value,
        node.label,
        node.branch_label,
        tuple(shape(document, c) for c in node.children),
    )


@pytest.fixture
def state() -> EditorState:
    return EditorState(document=initial_document(root_id="start", root_label="Start"))


@pytest.fixture
def engine() -> WorkflowEngine:
    return WorkflowEngine(
        document=initial_document(root_id="start", root_label="Start"),
        id_factory=sequential_ids("n"),
    )


@pytest.fixture
def shape_of():
    return shape


@pytest.fixture(autouse=True)
def reset_package_logger():
    """CLI runs install handlers bound to the runner's streams; drop them after each test."""
    yield
    logger = logging.getLogger("workflow_builder")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
