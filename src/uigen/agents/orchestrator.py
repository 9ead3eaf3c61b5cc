"""
Generation Orchestrator
Plan -> generate -> validate/retry -> explain -> label, driven by an
explicit state machine. Every model call is recorded as an AgentStep.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable

from pydantic import ValidationError as PydanticValidationError

from uigen.core import (
    JSONParseError,
    LogContext,
    extract_json,
    get_logger,
    safe_json_dumps,
    strip_code_fences,
    strip_wrapping_quotes,
    trace_operation_async,
    validate_generated_code,
)
from uigen.core.id import new_generation_id
from uigen.core.validate import ValidationResult
from uigen.models import AgentRole, LLMResponse
from uigen.monitoring import metrics_collector
from uigen.registry import DEFAULT_REGISTRY, ComponentRegistry

from .llm_client import AgentClient
from .messages import format_generation_error, format_validation_error
from .models import (
    AgentStep,
    AutoCheckpointDecision,
    ComponentPlan,
    OrchestrationResult,
    now_ms,
)
from .prompts import (
    get_checkpoint_name_prompt,
    get_explainer_prompt,
    get_generator_prompt,
    get_modification_classifier_prompt,
    get_planner_prompt,
    get_retry_prompt,
)

logger = get_logger(__name__)

DEFAULT_MAX_RETRIES = 2
CLASSIFICATION_FALLBACK_REASON = "Auto-checkpoint on classification error"


class PlanParseError(Exception):
    """Planner output could not be read as a ComponentPlan."""

    pass


class Stage(str, Enum):
    """Pipeline states."""

    PLANNING = "planning"
    GENERATING = "generating"
    VALIDATING = "validating"
    RETRYING = "retrying"
    EXPLAINING = "explaining"
    LABELING = "labeling"
    DONE = "done"
    FAILED = "failed"


class Outcome(str, Enum):
    """Result of running one stage."""

    OK = "ok"
    INVALID = "invalid"
    EXHAUSTED = "exhausted"


TRANSITIONS: dict[tuple[Stage, Outcome], Stage] = {
    (Stage.PLANNING, Outcome.OK): Stage.GENERATING,
    (Stage.GENERATING, Outcome.OK): Stage.VALIDATING,
    (Stage.VALIDATING, Outcome.OK): Stage.EXPLAINING,
    (Stage.VALIDATING, Outcome.INVALID): Stage.RETRYING,
    (Stage.VALIDATING, Outcome.EXHAUSTED): Stage.FAILED,
    (Stage.RETRYING, Outcome.OK): Stage.VALIDATING,
    (Stage.EXPLAINING, Outcome.OK): Stage.LABELING,
    (Stage.LABELING, Outcome.OK): Stage.DONE,
}

TERMINAL_STAGES = frozenset({Stage.DONE, Stage.FAILED})


@dataclass
class RunContext:
    """Mutable state of one orchestration run."""

    user_intent: str
    current_code: str | None
    started: float = field(default_factory=time.time)
    steps: list[AgentStep] = field(default_factory=list)
    plan: ComponentPlan | None = None
    generator_prompt: str = ""
    code: str = ""
    validation: ValidationResult | None = None
    retries: int = 0
    explanation: str = ""
    label: str = ""

    @property
    def is_modification(self) -> bool:
        return bool(self.current_code)

    @property
    def elapsed_ms(self) -> int:
        return int((time.time() - self.started) * 1000)


def parse_plan(content: str) -> ComponentPlan:
    """
    Read planner output as a ComponentPlan.

    Raises:
        PlanParseError: If the output is not a JSON object of the plan shape
    """
    try:
        return ComponentPlan.model_validate(extract_json(content))
    except (JSONParseError, PydanticValidationError) as e:
        raise PlanParseError(f"Failed to parse plan: {e}") from e


class Orchestrator:
    """
    Runs the multi-role generation pipeline.

    orchestrate() never raises: validation exhaustion and any pipeline fault
    both come back as unsuccessful results that keep the caller's code.
    """

    def __init__(
        self,
        client: AgentClient,
        registry: ComponentRegistry | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        self.client = client
        self.registry = registry or DEFAULT_REGISTRY
        self.max_retries = max_retries
        self._handlers: dict[Stage, Callable[[RunContext], Awaitable[Outcome]]] = {
            Stage.PLANNING: self._plan,
            Stage.GENERATING: self._generate,
            Stage.VALIDATING: self._validate,
            Stage.RETRYING: self._retry,
            Stage.EXPLAINING: self._explain,
            Stage.LABELING: self._label,
        }

    async def orchestrate(self, user_intent: str, current_code: str | None = None) -> OrchestrationResult:
        """
        Run the pipeline for one request.

        Args:
            user_intent: Sanitized natural-language request
            current_code: Code being refined; treated as a read-only snapshot

        Returns:
            OrchestrationResult; success=False on validation or generation errors
        """
        run = RunContext(user_intent=user_intent, current_code=current_code)

        with LogContext(generation_id=new_generation_id()):
            logger.info("generation_started", modification=run.is_modification)
            try:
                async with trace_operation_async("orchestrate", modification=run.is_modification):
                    stage = await self._drive(run)
            except Exception as e:
                logger.error("generation_failed", error=str(e), error_type=type(e).__name__)
                metrics_collector.record_error(type(e).__name__, "orchestrator")
                return self._finish(run, self._generation_error(run, e), "generation_error")

            if stage is Stage.FAILED:
                logger.warning("validation_exhausted", retries=run.retries, errors=run.validation.errors)
                return self._finish(run, self._validation_failure(run), "validation_error")

            logger.info("generation_completed", retries=run.retries, duration_ms=run.elapsed_ms)
            return self._finish(run, self._success(run), "success")

    async def _drive(self, run: RunContext) -> Stage:
        stage = Stage.PLANNING
        while stage not in TERMINAL_STAGES:
            outcome = await self._handlers[stage](run)
            next_stage = TRANSITIONS[(stage, outcome)]
            logger.debug("stage_transition", stage=stage.value, outcome=outcome.value, next=next_stage.value)
            stage = next_stage
        return stage

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _plan(self, run: RunContext) -> Outcome:
        prompt = get_planner_prompt(run.user_intent, run.current_code, self.registry)
        response = await self._call(run, AgentRole.PLANNER, prompt, run.user_intent)
        run.plan = parse_plan(response.content)
        return Outcome.OK

    async def _generate(self, run: RunContext) -> Outcome:
        run.generator_prompt = get_generator_prompt(run.plan, run.user_intent, run.current_code)
        step_input = safe_json_dumps(run.plan.to_wire())
        response = await self._call(run, AgentRole.GENERATOR, run.generator_prompt, step_input)
        run.code = strip_code_fences(response.content)
        return Outcome.OK

    async def _validate(self, run: RunContext) -> Outcome:
        run.validation = validate_generated_code(run.code)
        if run.validation.valid:
            return Outcome.OK
        if run.retries < self.max_retries:
            return Outcome.INVALID
        return Outcome.EXHAUSTED

    async def _retry(self, run: RunContext) -> Outcome:
        run.retries += 1
        metrics_collector.record_validation_retry()
        logger.info(
            "validation_retry",
            attempt=run.retries,
            max_retries=self.max_retries,
            errors=run.validation.errors,
        )
        prompt = get_retry_prompt(run.generator_prompt, run.validation.errors)
        response = await self._call(
            run, AgentRole.GENERATOR, prompt, "; ".join(run.validation.errors)
        )
        run.code = strip_code_fences(response.content)
        return Outcome.OK

    async def _explain(self, run: RunContext) -> Outcome:
        prompt = get_explainer_prompt(run.user_intent, run.plan, run.code, run.is_modification)
        response = await self._call(run, AgentRole.EXPLAINER, prompt, "Generate explanation")
        run.explanation = response.content.strip()
        return Outcome.OK

    async def _label(self, run: RunContext) -> Outcome:
        prompt = get_checkpoint_name_prompt(run.user_intent, run.validation.used_components)
        response = await self._call(run, AgentRole.CLASSIFIER, prompt, "Generate checkpoint name")
        run.label = strip_wrapping_quotes(response.content)
        return Outcome.OK

    async def _call(self, run: RunContext, role: AgentRole, prompt: str, step_input: str) -> LLMResponse:
        started = time.time()
        response = await self.client.call(role, prompt)
        run.steps.append(
            AgentStep(
                agent=role,
                input=step_input,
                output=response.content,
                timestamp=now_ms(),
                duration_ms=int((time.time() - started) * 1000),
            )
        )
        return response

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def _success(self, run: RunContext) -> OrchestrationResult:
        return OrchestrationResult(
            plan=run.plan,
            code=run.code,
            explanation=run.explanation,
            checkpoint_label=run.label,
            success=True,
            steps=run.steps,
            total_duration_ms=run.elapsed_ms,
        )

    def _validation_failure(self, run: RunContext) -> OrchestrationResult:
        return OrchestrationResult(
            plan=ComponentPlan.placeholder("Validation failed"),
            code=run.current_code or "",
            explanation=format_validation_error(run.validation.errors, run.user_intent),
            checkpoint_label="Validation Error",
            success=False,
            validation_error=True,
            errors=list(run.validation.errors),
            steps=run.steps,
            total_duration_ms=run.elapsed_ms,
        )

    def _generation_error(self, run: RunContext, error: Exception) -> OrchestrationResult:
        message = str(error) or type(error).__name__
        return OrchestrationResult(
            plan=ComponentPlan.placeholder("Error occurred"),
            code=run.current_code or "",
            explanation=format_generation_error(message),
            checkpoint_label="Error",
            success=False,
            validation_error=False,
            errors=[message],
            steps=run.steps,
            total_duration_ms=run.elapsed_ms,
        )

    def _finish(self, run: RunContext, result: OrchestrationResult, outcome: str) -> OrchestrationResult:
        metrics_collector.record_generation(outcome, time.time() - run.started)
        return result

    # ------------------------------------------------------------------
    # Auto-checkpoint
    # ------------------------------------------------------------------

    async def should_auto_checkpoint(self, user_intent: str) -> AutoCheckpointDecision:
        """
        Ask the classifier whether an intent is a major change.

        Any fault (model call, JSON, shape) defaults to creating a checkpoint.
        """
        try:
            response = await self.client.call_classifier(get_modification_classifier_prompt(user_intent))
            parsed = extract_json(response.content)
            should_checkpoint = parsed["shouldCreateCheckpoint"]
            if not isinstance(should_checkpoint, bool):
                raise TypeError("shouldCreateCheckpoint must be a boolean")
            return AutoCheckpointDecision(
                should_checkpoint=should_checkpoint,
                reasoning=str(parsed.get("reasoning", "")),
                classification=str(parsed.get("classification", "major")),
            )
        except Exception as e:
            logger.warning("classification_failed", error=str(e))
            return AutoCheckpointDecision(
                should_checkpoint=True,
                reasoning=CLASSIFICATION_FALLBACK_REASON,
                classification="major",
            )
