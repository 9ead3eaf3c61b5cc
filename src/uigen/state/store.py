"""
Application State
Explicit state container for the chat, editor, preview and checkpoint views.
"""

from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field

from uigen.agents.models import Checkpoint, Iteration, Message
from uigen.core import get_logger
from uigen.core.id import new_message_id
from uigen.storage import CheckpointStore

logger = get_logger(__name__)

Listener = Callable[["AppState", frozenset[str]], None]


class AppState(BaseModel):
    """Snapshot of everything the views render."""

    model_config = ConfigDict(validate_assignment=True)

    current_checkpoint: Checkpoint | None = None
    checkpoints: list[Checkpoint] = Field(default_factory=list)
    iterations: list[Iteration] = Field(default_factory=list)
    messages: list[Message] = Field(default_factory=list)
    is_generating: bool = False
    code: str = ""
    is_code_manually_edited: bool = False
    preview_error: str | None = None
    seed_prompt: str | None = None


class AppStore:
    """
    Owns AppState and applies commands to it.

    Persistent commands write through to the CheckpointStore and then reload
    the affected list. Listeners are called after every change with the new
    state and the names of the fields that changed.
    """

    def __init__(self, checkpoints: CheckpointStore) -> None:
        self.db = checkpoints
        self.state = AppState()
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes: Any) -> None:
        for name, value in changes.items():
            setattr(self.state, name, value)
        changed = frozenset(changes)
        for listener in list(self._listeners):
            listener(self.state, changed)

    # ------------------------------------------------------------------
    # Checkpoints
    # ------------------------------------------------------------------

    def set_current_checkpoint(self, checkpoint: Checkpoint | None) -> None:
        self._set(current_checkpoint=checkpoint)

    def load_checkpoints(self) -> None:
        self._set(checkpoints=self.db.get_all_checkpoints())

    def add_checkpoint(self, checkpoint: Checkpoint) -> None:
        self.db.create_checkpoint(checkpoint)
        self._set(
            checkpoints=self.db.get_all_checkpoints(),
            current_checkpoint=checkpoint,
            code=checkpoint.code,
        )

    def delete_checkpoint(self, checkpoint_id: str) -> None:
        self.db.delete_checkpoint(checkpoint_id)
        current = self.state.current_checkpoint
        self._set(
            checkpoints=self.db.get_all_checkpoints(),
            current_checkpoint=None if current and current.id == checkpoint_id else current,
        )

    def update_checkpoint_label(self, checkpoint_id: str, label: str) -> None:
        self.db.update_checkpoint(checkpoint_id, {"label": label})
        self._set(checkpoints=self.db.get_all_checkpoints())

    def toggle_checkpoint_marker(self, checkpoint_id: str) -> None:
        checkpoint = self.db.get_checkpoint(checkpoint_id)
        if checkpoint is None:
            return
        self.db.update_checkpoint(checkpoint_id, {"is_marked": not checkpoint.is_marked})
        self._set(checkpoints=self.db.get_all_checkpoints())

    def restore_checkpoint(self, checkpoint_id: str) -> bool:
        """Load a checkpoint's code into the editor."""
        checkpoint = self.db.get_checkpoint(checkpoint_id)
        if checkpoint is None:
            logger.warning("restore_missing_checkpoint", checkpoint_id=checkpoint_id)
            return False
        self._set(
            current_checkpoint=checkpoint,
            code=checkpoint.code,
            is_code_manually_edited=False,
            preview_error=None,
        )
        self.add_message("system", f"Restored checkpoint: {checkpoint.label}")
        return True

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def add_message(self, role: Literal["user", "assistant", "system"], content: str) -> Message:
        message = Message(id=new_message_id(), role=role, content=content)
        self._set(messages=[*self.state.messages, message])
        return message

    def clear_messages(self) -> None:
        self._set(messages=[])

    # ------------------------------------------------------------------
    # Editor / preview
    # ------------------------------------------------------------------

    def set_code(self, code: str, is_manual_edit: bool = False) -> None:
        self._set(code=code, is_code_manually_edited=is_manual_edit, preview_error=None)

    def set_is_generating(self, is_generating: bool) -> None:
        self._set(is_generating=is_generating)

    def set_preview_error(self, error: str | None) -> None:
        self._set(preview_error=error)

    # ------------------------------------------------------------------
    # Iterations
    # ------------------------------------------------------------------

    def add_iteration(self, iteration: Iteration) -> None:
        self.db.create_iteration(iteration)
        self._set(iterations=self.db.get_iterations(iteration.parent_checkpoint_id))

    def load_iterations(self, checkpoint_id: str) -> None:
        self._set(iterations=self.db.get_iterations(checkpoint_id))

    # ------------------------------------------------------------------
    # Seed prompt
    # ------------------------------------------------------------------

    def set_seed_prompt(self, prompt: str | None) -> None:
        self._set(seed_prompt=prompt)

    def consume_seed_prompt(self) -> str | None:
        """Return the pending seed prompt once; later calls get None."""
        prompt = self.state.seed_prompt
        if prompt is not None:
            self._set(seed_prompt=None)
        return prompt
