"""Generate handler tests."""

import pytest
from unittest.mock import AsyncMock

from uigen.handlers import GenerateHandler, INTENT_REQUIRED_ERROR

from tests.conftest import DASHBOARD_CODE, successful_run


@pytest.fixture
def handler(orchestrator):
    return GenerateHandler(orchestrator)


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [None, [], {}, {"userIntent": 42}, {"userIntent": ""}])
async def test_missing_intent_is_400(handler, payload):
    response = await handler.handle(payload)

    assert response.status == 400
    assert response.body == {"error": INTENT_REQUIRED_ERROR}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_blank_intent_is_400(handler):
    response = await handler.handle({"userIntent": "   "})

    assert response.status == 400
    assert "userIntent cannot be empty" in response.body["error"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invalid_field_is_400(handler):
    response = await handler.handle({"userIntent": "x", "currentCode": 5})

    assert response.status == 400


@pytest.mark.unit
@pytest.mark.asyncio
async def test_success_is_200(handler, backend):
    backend.queue(*successful_run())

    response = await handler.handle({"userIntent": "Create a dashboard with a data table"})

    assert response.status == 200
    assert response.body["success"] is True
    assert response.body["code"] == DASHBOARD_CODE
    assert response.body["checkpointLabel"] == "Dashboard Table"
    assert len(response.body["steps"]) == 4
    assert "totalDurationMs" in response.body


@pytest.mark.unit
@pytest.mark.asyncio
async def test_current_code_only_used_for_modifications():
    orchestrator = AsyncMock()
    handler = GenerateHandler(orchestrator)
    orchestrator.orchestrate.side_effect = RuntimeError("stop")

    await handler.handle({"userIntent": "x", "currentCode": "old", "isModification": False})
    assert orchestrator.orchestrate.await_args.args == ("x", None)

    await handler.handle({"userIntent": "x", "currentCode": "old", "isModification": True})
    assert orchestrator.orchestrate.await_args.args == ("x", "old")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_intent_is_sanitized_and_truncated():
    orchestrator = AsyncMock()
    orchestrator.orchestrate.side_effect = RuntimeError("stop")
    handler = GenerateHandler(orchestrator, max_intent_length=10)

    await handler.handle({"userIntent": "```<script>make a very long form"})

    assert orchestrator.orchestrate.await_args.args[0] == "make a ver..."


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unexpected_fault_is_500():
    orchestrator = AsyncMock()
    orchestrator.orchestrate.side_effect = RuntimeError("database on fire")

    response = await GenerateHandler(orchestrator).handle({"userIntent": "x"})

    assert response.status == 500
    assert response.body == {"success": False, "error": "database on fire"}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failed_generation_is_still_200(handler, backend):
    backend.queue(RuntimeError("provider exploded"))

    response = await handler.handle({"userIntent": "x"})

    assert response.status == 200
    assert response.body["success"] is False
    assert response.body["validationError"] is False
    assert response.body["errors"] == ["provider exploded"]
