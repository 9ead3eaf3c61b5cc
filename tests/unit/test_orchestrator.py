"""Orchestrator pipeline tests."""

import pytest

from uigen.agents import Orchestrator, PlanParseError, Stage, TRANSITIONS
from uigen.agents.orchestrator import CLASSIFICATION_FALLBACK_REASON, Outcome, parse_plan
from uigen.core.validate import INLINE_STYLE_ERROR
from uigen.models import AgentRole, LLMError, ROLE_TEMPERATURES

from tests.conftest import (
    CHART3D_CODE,
    DASHBOARD_CODE,
    DASHBOARD_PLAN,
    EXPLANATION,
    INLINE_STYLE_CODE,
    successful_run,
)

PREVIOUS_CODE = "function GeneratedUI() { return React.createElement(Card, null, 'old'); }"


# ============================================================================
# Plan parsing and transitions
# ============================================================================

@pytest.mark.unit
def test_parse_plan_from_fenced_json():
    plan = parse_plan(DASHBOARD_PLAN)

    assert plan.layout.type == "single-column"
    assert [c.name for c in plan.components] == ["Container", "Card", "Table"]
    assert plan.data_flow == "Static sample rows"


@pytest.mark.unit
@pytest.mark.parametrize("content", ["not json", '{"components": []}', "[1, 2]"])
def test_parse_plan_rejects_bad_output(content):
    with pytest.raises(PlanParseError):
        parse_plan(content)


@pytest.mark.unit
def test_transition_table_covers_retry_loop():
    assert TRANSITIONS[(Stage.VALIDATING, Outcome.INVALID)] is Stage.RETRYING
    assert TRANSITIONS[(Stage.RETRYING, Outcome.OK)] is Stage.VALIDATING
    assert TRANSITIONS[(Stage.VALIDATING, Outcome.EXHAUSTED)] is Stage.FAILED
    assert TRANSITIONS[(Stage.LABELING, Outcome.OK)] is Stage.DONE


# ============================================================================
# End-to-end runs
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_fresh_generation_succeeds(orchestrator, backend):
    backend.queue(*successful_run())

    result = await orchestrator.orchestrate("Create a dashboard with a data table")

    assert result.success is True
    assert result.validation_error is None
    assert result.code == DASHBOARD_CODE
    assert result.explanation == EXPLANATION
    assert result.checkpoint_label == "Dashboard Table"
    assert [c.name for c in result.plan.components] == ["Container", "Card", "Table"]
    assert [step.agent for step in result.steps] == ["planner", "generator", "explainer", "classifier"]
    assert "validationError" not in result.to_wire()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_role_temperatures_applied(orchestrator, backend):
    backend.queue(*successful_run())

    await orchestrator.orchestrate("Create a dashboard")

    temperatures = [call["temperature"] for call in backend.calls]
    assert temperatures == [
        ROLE_TEMPERATURES[AgentRole.PLANNER],
        ROLE_TEMPERATURES[AgentRole.GENERATOR],
        ROLE_TEMPERATURES[AgentRole.EXPLAINER],
        ROLE_TEMPERATURES[AgentRole.CLASSIFIER],
    ]
    assert all(call["max_tokens"] == 1000 for call in backend.calls)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_retries_until_valid(orchestrator, backend):
    backend.queue(DASHBOARD_PLAN, CHART3D_CODE, CHART3D_CODE, DASHBOARD_CODE, EXPLANATION, "Dashboard")

    result = await orchestrator.orchestrate("Create a 3D chart dashboard")

    assert result.success is True
    generator_steps = [step for step in result.steps if step.agent == "generator"]
    assert len(generator_steps) == 3
    assert "Unauthorized components used: Chart3D" in generator_steps[1].input
    assert "PREVIOUS ATTEMPT FAILED VALIDATION" in backend.calls[2]["prompt"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_validation_exhausted_keeps_current_code(orchestrator, backend):
    backend.queue(DASHBOARD_PLAN, INLINE_STYLE_CODE, INLINE_STYLE_CODE, INLINE_STYLE_CODE)

    result = await orchestrator.orchestrate("Make the button red", PREVIOUS_CODE)

    assert result.success is False
    assert result.validation_error is True
    assert INLINE_STYLE_ERROR in result.errors
    assert result.code == PREVIOUS_CODE
    assert result.checkpoint_label == "Validation Error"
    assert "Inline Styles Not Allowed" in result.explanation
    assert len(backend.calls) == 4
    assert not backend.responses


@pytest.mark.unit
@pytest.mark.asyncio
async def test_validation_exhausted_without_current_code(orchestrator, backend):
    backend.queue(DASHBOARD_PLAN, CHART3D_CODE, CHART3D_CODE, CHART3D_CODE)

    result = await orchestrator.orchestrate("A 3D chart")

    assert result.code == ""
    assert "Component Not Available" in result.explanation
    assert "Chart3D" in result.explanation


@pytest.mark.unit
@pytest.mark.asyncio
async def test_zero_retries(agent_client, backend):
    orchestrator = Orchestrator(agent_client, max_retries=0)
    backend.queue(DASHBOARD_PLAN, CHART3D_CODE)

    result = await orchestrator.orchestrate("A 3D chart")

    assert result.validation_error is True
    assert len(backend.calls) == 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_modification_prompt_includes_current_code(orchestrator, backend):
    backend.queue(*successful_run())

    result = await orchestrator.orchestrate("Add a badge", PREVIOUS_CODE)

    assert result.success
    assert PREVIOUS_CODE in backend.calls[0]["prompt"]
    assert PREVIOUS_CODE in backend.calls[1]["prompt"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_provider_fault_becomes_generation_error(orchestrator, backend):
    backend.queue(LLMError("LLM Error: HTTP 503"))

    result = await orchestrator.orchestrate("Anything", PREVIOUS_CODE)

    assert result.success is False
    assert result.validation_error is False
    assert result.errors == ["LLM Error: HTTP 503"]
    assert result.code == PREVIOUS_CODE
    assert result.checkpoint_label == "Error"
    assert result.plan.layout.type == "error"
    assert "Generation Error" in result.explanation


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unparseable_plan_becomes_generation_error(orchestrator, backend):
    backend.queue("I think you should use a table.")

    result = await orchestrator.orchestrate("Anything")

    assert result.success is False
    assert result.errors[0].startswith("Failed to parse plan")
    assert len(result.steps) == 1


# ============================================================================
# Auto-checkpoint classification
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_auto_checkpoint_minor(orchestrator, backend):
    backend.queue('{"shouldCreateCheckpoint": false, "reasoning": "Color tweak", "classification": "minor"}')

    decision = await orchestrator.should_auto_checkpoint("Make the button blue")

    assert decision.should_checkpoint is False
    assert decision.classification == "minor"
    assert decision.to_wire() == {
        "shouldCheckpoint": False,
        "reasoning": "Color tweak",
        "classification": "minor",
    }


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        "garbage",
        '{"reasoning": "missing flag"}',
        '{"shouldCreateCheckpoint": "no"}',
        LLMError("LLM Error: timeout"),
    ],
)
async def test_auto_checkpoint_fails_safe(orchestrator, backend, response):
    backend.queue(response)

    decision = await orchestrator.should_auto_checkpoint("Anything")

    assert decision.should_checkpoint is True
    assert decision.reasoning == CLASSIFICATION_FALLBACK_REASON
    assert decision.classification == "major"
