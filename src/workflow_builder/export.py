"""Document export - JSON dump keyed by node id, and the matching loader."""

import json
import logging
from typing import Any

from pydantic import ValidationError

from .errors import InvalidDocumentError
from .models import WorkflowDocument, WorkflowNode, validate_document

logger = logging.getLogger(__name__)


def document_to_dict(document: WorkflowDocument) -> dict[str, Any]:
    """Encode a document as ``{"root_id": ..., "nodes": {id: record}}``.

    Node order and ``children`` order are preserved.
    """
    return {
        "root_id": document.root_id,
        "nodes": {
            node_id: node.model_dump(mode="json")
            for node_id, node in document.nodes.items()
        },
    }


def dump_document(document: WorkflowDocument, indent: int = 2) -> str:
    """Serialize a document to JSON text."""
    return json.dumps(document_to_dict(document), ensure_ascii=False, indent=indent)


def document_from_dict(data: Any, allow_action_fanout: bool = True) -> WorkflowDocument:
    """
    Build and validate a document from its dict encoding.

    Args:
        data: Output of ``document_to_dict`` (or parsed JSON of ``dump_document``)
        allow_action_fanout: Accept action nodes with several children

    Raises:
        InvalidDocumentError: malformed records or broken tree invariants
    """
    if not isinstance(data, dict) or "nodes" not in data or "root_id" not in data:
        raise InvalidDocumentError("Document must be an object with 'root_id' and 'nodes'")
    if not isinstance(data["nodes"], dict):
        raise InvalidDocumentError("'nodes' must be an object keyed by node id")

    try:
        nodes = {
            node_id: WorkflowNode.model_validate(record)
            for node_id, record in data["nodes"].items()
        }
        document = WorkflowDocument(root_id=data["root_id"], nodes=nodes)
    except ValidationError as e:
        raise InvalidDocumentError("Malformed node record", [str(err["msg"]) for err in e.errors()]) from e

    violations = validate_document(document, allow_action_fanout=allow_action_fanout)
    if violations:
        raise InvalidDocumentError("Document violates workflow invariants", violations)

    logger.debug(f"[Export] Loaded document with {len(document.nodes)} nodes")
    return document


def load_document(text: str, allow_action_fanout: bool = True) -> WorkflowDocument:
    """Parse JSON text produced by ``dump_document``."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidDocumentError(f"Invalid JSON: {e}") from e
    return document_from_dict(data, allow_action_fanout=allow_action_fanout)
