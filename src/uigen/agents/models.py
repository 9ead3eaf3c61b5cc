"""UI Generation Data Models."""

import time
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from uigen.core.validate import ValidationResult
from uigen.models import AgentRole


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire aliases."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


# ============================================================================
# Plan
# ============================================================================


class PlanLayout(BaseModel):
    """Layout section of a plan."""

    type: str
    structure: str


class PlannedComponent(BaseModel):
    """One component the planner intends to use."""

    name: str
    props: dict[str, Any] = Field(default_factory=dict)
    purpose: str = ""


class ComponentPlan(WireModel):
    """Structured plan produced by the planner."""

    layout: PlanLayout
    components: list[PlannedComponent] = Field(default_factory=list)
    data_flow: str = Field(default="", alias="dataFlow")

    @classmethod
    def placeholder(cls, structure: str, data_flow: str = "Error") -> "ComponentPlan":
        """Plan stand-in for failed runs."""
        return cls(
            layout=PlanLayout(type="error", structure=structure),
            components=[],
            data_flow=data_flow,
        )


# ============================================================================
# Orchestration
# ============================================================================


class AgentStep(WireModel):
    """Audit record of one model call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, use_enum_values=True)

    agent: AgentRole
    input: str
    output: str
    timestamp: int = Field(default_factory=now_ms)
    duration_ms: int = Field(default=0, alias="durationMs")


class OrchestrationResult(WireModel):
    """Outcome of one pipeline run."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    plan: ComponentPlan
    code: str
    explanation: str
    checkpoint_label: str = Field(alias="checkpointLabel")
    success: bool
    validation_error: bool | None = Field(default=None, alias="validationError")
    errors: list[str] | None = None
    steps: list[AgentStep] = Field(default_factory=list)
    total_duration_ms: int = Field(default=0, alias="totalDurationMs")


class CheckpointClassification(str, Enum):
    """Classifier verdict on an intent."""

    MAJOR = "major"
    MINOR = "minor"


class AutoCheckpointDecision(WireModel):
    """Whether an intent warrants a checkpoint."""

    should_checkpoint: bool = Field(alias="shouldCheckpoint")
    reasoning: str = ""
    classification: str = "major"


# ============================================================================
# Persisted records
# ============================================================================


Complexity = Literal["simple", "moderate", "complex"]


class Checkpoint(WireModel):
    """Named snapshot of accepted code plus its metadata."""

    id: str
    timestamp: int = Field(default_factory=now_ms)
    label: str
    user_intent: str = Field(alias="userIntent")
    is_marked: bool = Field(default=False, alias="isMarked")
    code: str
    plan: ComponentPlan
    explanation: str = ""
    component_count: int = Field(default=0, ge=0, alias="componentCount")
    complexity: Complexity = "simple"
    tags: list[str] = Field(default_factory=list)


class CodeChanges(BaseModel):
    """Component-level diff between two generated versions."""

    added: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)


class Iteration(WireModel):
    """One refinement turn recorded against a parent checkpoint."""

    id: str
    timestamp: int = Field(default_factory=now_ms)
    parent_checkpoint_id: str = Field(alias="parentCheckpointId")
    user_message: str = Field(alias="userMessage")
    ai_response: str = Field(alias="aiResponse")
    code_changes: CodeChanges | None = Field(default=None, alias="codeChanges")


class GenerationSession(WireModel):
    """Persisted audit record of one orchestration run."""

    id: str
    start_time: int = Field(alias="startTime")
    end_time: int | None = Field(default=None, alias="endTime")
    steps: list[AgentStep] = Field(default_factory=list)
    result: OrchestrationResult


class Message(WireModel):
    """Chat transcript entry."""

    id: str
    role: Literal["user", "assistant", "system"]
    content: str
    timestamp: int = Field(default_factory=now_ms)


__all__ = [
    "AgentStep",
    "AutoCheckpointDecision",
    "Checkpoint",
    "CheckpointClassification",
    "CodeChanges",
    "ComponentPlan",
    "Complexity",
    "GenerationSession",
    "Iteration",
    "Message",
    "OrchestrationResult",
    "PlanLayout",
    "PlannedComponent",
    "ValidationResult",
    "WireModel",
    "now_ms",
]
