"""Workflow Engine - owns one document and its undo/redo history."""

import logging
from typing import Callable, Optional

from ..config import settings
from ..models import NodeType, WorkflowDocument
from .commands import AddNode, Command, DeleteNode, Redo, Undo, UpdateLabel
from .reducer import CommandResult, EditorState, reduce
from .rules import generate_node_id

logger = logging.getLogger(__name__)

StateListener = Callable[[WorkflowDocument], None]


class WorkflowEngine:
    """
    Command interface to a single workflow document.

    Every command runs to completion and replaces the current EditorState
    with the reducer's result. Callers only ever receive immutable
    snapshots. One engine per document; commands are not thread-safe and
    must be serialized by the caller.
    """

    def __init__(
        self,
        document: Optional[WorkflowDocument] = None,
        history_limit: Optional[int] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        """
        Initialize the engine.

        Args:
            document: Starting document (defaults to the single start node)
            history_limit: Max snapshots per history stack (defaults to settings)
            id_factory: Generator for new node ids
        """
        self._state = EditorState(document=document) if document is not None else EditorState()
        self.history_limit = history_limit if history_limit is not None else settings.history_limit
        self.id_factory = id_factory or generate_node_id
        self._listeners: list[StateListener] = []

    # ── State access ──

    def get_state(self) -> WorkflowDocument:
        """Current document snapshot."""
        return self._state.document

    @property
    def editor_state(self) -> EditorState:
        return self._state

    @property
    def can_undo(self) -> bool:
        return self._state.can_undo

    @property
    def can_redo(self) -> bool:
        return self._state.can_redo

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with each new document; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ── Commands ──

    def add_node(
        self,
        parent_id: str,
        node_type: NodeType,
        branch_label: Optional[str] = None,
    ) -> CommandResult:
        return self.dispatch(AddNode(parent_id=parent_id, node_type=node_type, branch_label=branch_label))

    def delete_node(self, node_id: str) -> CommandResult:
        return self.dispatch(DeleteNode(node_id=node_id))

    def update_label(self, node_id: str, label: str) -> CommandResult:
        return self.dispatch(UpdateLabel(node_id=node_id, label=label))

    def undo(self) -> CommandResult:
        return self.dispatch(Undo())

    def redo(self) -> CommandResult:
        return self.dispatch(Redo())

    def dispatch(self, command: Command) -> CommandResult:
        """Apply a command and publish the new document if it was applied."""
        result = reduce(
            self._state,
            command,
            history_limit=self.history_limit,
            id_factory=self.id_factory,
        )

        if result.error is not None:
            logger.warning(f"[Engine] {command.kind} rejected ({result.error.value}): {result.message}")
            return result

        if not result.applied:
            logger.debug(f"[Engine] {command.kind} ignored: {result.message}")
            return result

        self._state = result.state
        logger.info(
            f"[Engine] {result.message} - nodes: {len(self._state.document.nodes)}, "
            f"undo: {len(self._state.undo_stack)}, redo: {len(self._state.redo_stack)}"
        )
        self._publish()
        return result

    def _publish(self):
        document = self._state.document
        for listener in list(self._listeners):
            listener(document)
