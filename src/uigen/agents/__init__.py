"""Generation agents: prompts, role client and the orchestrator."""

from .llm_client import AgentClient
from .messages import format_generation_error, format_validation_error
from .models import (
    AgentStep,
    AutoCheckpointDecision,
    Checkpoint,
    CodeChanges,
    ComponentPlan,
    GenerationSession,
    Iteration,
    Message,
    OrchestrationResult,
)
from .orchestrator import Orchestrator, PlanParseError, Stage, TRANSITIONS

__all__ = [
    "AgentClient",
    "AgentStep",
    "AutoCheckpointDecision",
    "Checkpoint",
    "CodeChanges",
    "ComponentPlan",
    "GenerationSession",
    "Iteration",
    "Message",
    "OrchestrationResult",
    "Orchestrator",
    "PlanParseError",
    "Stage",
    "TRANSITIONS",
    "format_generation_error",
    "format_validation_error",
]
