"""Generate Handler."""

import time
from typing import Any

from pydantic import BaseModel, Field

from uigen.agents.orchestrator import Orchestrator
from uigen.core import (
    RequestValidationError,
    get_logger,
    parse_generation_request,
    sanitize_user_input,
)
from uigen.core.validate import MAX_INTENT_LENGTH
from uigen.monitoring import metrics_collector, trace_operation_async

logger = get_logger(__name__)

INTENT_REQUIRED_ERROR = "userIntent is required and must be a string"


class HandlerResponse(BaseModel):
    """Status code plus JSON body, independent of the web framework."""

    status: int = Field(ge=100, le=599)
    body: dict[str, Any]


class GenerateHandler:
    """Handles generation requests."""

    def __init__(self, orchestrator: Orchestrator, max_intent_length: int = MAX_INTENT_LENGTH) -> None:
        self.orchestrator = orchestrator
        self.max_intent_length = max_intent_length

    async def handle(self, payload: Any) -> HandlerResponse:
        """
        Validate, sanitize and run one generation request.

        Returns:
            400 for malformed requests, 500 for unexpected faults, otherwise
            200 with the orchestration result whether or not it succeeded
        """
        start_time = time.time()

        intent = payload.get("userIntent") if isinstance(payload, dict) else None
        if not isinstance(intent, str) or not intent:
            logger.warning("generate_rejected", reason="missing_intent")
            return self._respond(400, {"error": INTENT_REQUIRED_ERROR})

        try:
            request = parse_generation_request(payload)
        except RequestValidationError as e:
            logger.warning("generate_rejected", reason="invalid_request", error=str(e))
            return self._respond(400, {"error": str(e)})

        try:
            sanitized = sanitize_user_input(request.user_intent, self.max_intent_length)
            logger.info("generate", intent=sanitized[:50], modification=request.is_modification)

            async with trace_operation_async("generate_request", modification=request.is_modification):
                result = await self.orchestrator.orchestrate(
                    sanitized,
                    request.current_code if request.is_modification else None,
                )
        except Exception as e:
            logger.error("generate_failed", error=str(e), exc_info=True)
            return self._respond(500, {"success": False, "error": str(e) or "Unknown error occurred"})

        logger.info("generate_complete", success=result.success, duration_ms=(time.time() - start_time) * 1000)
        return self._respond(200, result.to_wire())

    @staticmethod
    def _respond(status: int, body: dict[str, Any]) -> HandlerResponse:
        metrics_collector.record_http_request("/api/generate", status)
        return HandlerResponse(status=status, body=body)
