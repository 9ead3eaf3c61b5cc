"""
Chat Session
Turns a chat submission into an orchestration run and applies the outcome
to the application state.
"""

import time

from uigen.agents.models import (
    Checkpoint,
    CodeChanges,
    Complexity,
    GenerationSession,
    Iteration,
    OrchestrationResult,
)
from uigen.agents.orchestrator import Orchestrator
from uigen.core import get_logger, sanitize_user_input
from uigen.core.id import new_checkpoint_id, new_iteration_id, new_session_id
from uigen.core.validate import extract_used_components

from .store import AppStore

logger = get_logger(__name__)

CONNECTION_ERROR_MESSAGE = (
    "❌ **Connection Error**\n\n"
    "Failed to communicate with the AI service.\n\n"
    "💡 **Please check:**\n"
    "- Your internet connection\n"
    "- The model provider's status\n"
    "- Rate limits on your API key"
)


def complexity_for(component_count: int) -> Complexity:
    if component_count <= 3:
        return "simple"
    if component_count <= 7:
        return "moderate"
    return "complex"


def diff_components(old_code: str, new_code: str) -> CodeChanges:
    """Component-level change summary between two versions."""
    before = extract_used_components(old_code)
    after = extract_used_components(new_code)
    kept = [name for name in after if name in before]
    return CodeChanges(
        added=[name for name in after if name not in before],
        removed=[name for name in before if name not in after],
        modified=kept if old_code.strip() != new_code.strip() else [],
    )


def failure_message(result: OrchestrationResult) -> str:
    if result.explanation:
        return result.explanation
    if result.validation_error:
        return f"⚠️ Validation Error: {', '.join(result.errors or [])}"
    first = (result.errors or ["Generation failed"])[0]
    return f"❌ Error: {first}"


class ChatSession:
    """The chat collaborator: one submission at a time."""

    def __init__(self, store: AppStore, orchestrator: Orchestrator, create_checkpoints: bool = True) -> None:
        self.store = store
        self.orchestrator = orchestrator
        self.create_checkpoints = create_checkpoints

    async def submit(self, text: str, create_checkpoint: bool | None = None) -> OrchestrationResult | None:
        """
        Submit a chat message.

        Returns:
            The orchestration result, or None if the message was ignored
            (blank, or a generation is already running)
        """
        state = self.store.state
        user_message = text.strip()
        if not user_message or state.is_generating:
            logger.debug("chat_submit_ignored", generating=state.is_generating)
            return None

        self.store.add_message("user", user_message)
        current_code = state.code
        is_modification = bool(current_code)
        previous_checkpoint = state.current_checkpoint
        started = int(time.time() * 1000)

        self.store.set_is_generating(True)
        try:
            result = await self.orchestrator.orchestrate(
                sanitize_user_input(user_message),
                current_code if is_modification else None,
            )
        except Exception as e:
            logger.error("chat_generation_failed", error=str(e))
            self.store.add_message("assistant", CONNECTION_ERROR_MESSAGE)
            return None
        finally:
            self.store.set_is_generating(False)

        self._record_session(started, result)

        if result.validation_error or not result.success:
            # preview keeps the previous code
            self.store.add_message("assistant", failure_message(result))
            return result

        self.store.add_message("assistant", result.explanation)
        self.store.set_code(result.code)

        if previous_checkpoint is not None and is_modification:
            self.store.add_iteration(Iteration(
                id=new_iteration_id(),
                parent_checkpoint_id=previous_checkpoint.id,
                user_message=user_message,
                ai_response=result.explanation,
                code_changes=diff_components(current_code, result.code),
            ))

        if self.create_checkpoints if create_checkpoint is None else create_checkpoint:
            self.store.add_checkpoint(self._checkpoint_for(user_message, result))
        return result

    @staticmethod
    def _checkpoint_for(user_message: str, result: OrchestrationResult) -> Checkpoint:
        components = result.plan.components
        return Checkpoint(
            id=new_checkpoint_id(),
            label=result.checkpoint_label,
            user_intent=user_message,
            is_marked=True,
            code=result.code,
            plan=result.plan,
            explanation=result.explanation,
            component_count=len(components),
            complexity=complexity_for(len(components)),
            tags=[component.name.lower() for component in components],
        )

    def _record_session(self, started: int, result: OrchestrationResult) -> None:
        session = GenerationSession(
            id=new_session_id(),
            start_time=started,
            end_time=int(time.time() * 1000),
            steps=result.steps,
            result=result,
        )
        self.store.db.create_session(session)
