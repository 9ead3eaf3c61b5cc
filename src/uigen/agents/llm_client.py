"""Role-specific LLM calls over a provider backend."""

import asyncio
import time
from functools import partial

from uigen.core import get_logger
from uigen.models import AgentRole, LLMBackend, LLMResponse, ROLE_TEMPERATURES
from uigen.monitoring import metrics_collector

logger = get_logger(__name__)


class AgentClient:
    """
    Issues one completion per pipeline role at that role's temperature.
    Blocking backends run in the default executor.
    """

    def __init__(self, backend: LLMBackend, max_tokens: int | None = None) -> None:
        self.backend = backend
        self.max_tokens = max_tokens

    async def call(self, role: AgentRole, prompt: str) -> LLMResponse:
        """Send a prompt as the given role."""
        role = AgentRole(role)
        temperature = ROLE_TEMPERATURES[role]
        loop = asyncio.get_event_loop()
        start = time.time()

        try:
            response = await loop.run_in_executor(
                None,
                partial(
                    self.backend.complete,
                    prompt,
                    temperature=temperature,
                    max_tokens=self.max_tokens,
                ),
            )
        except Exception as e:
            metrics_collector.record_llm_call(role.value, "error", time.time() - start)
            logger.error("llm_call_failed", role=role.value, error=str(e))
            raise

        metrics_collector.record_llm_call(
            role.value, "success", time.time() - start, response.tokens_used
        )
        logger.debug(
            "llm_call",
            role=role.value,
            temperature=temperature,
            tokens=response.tokens_used,
            duration_ms=response.duration_ms,
        )
        return response

    async def call_planner(self, prompt: str) -> LLMResponse:
        return await self.call(AgentRole.PLANNER, prompt)

    async def call_generator(self, prompt: str) -> LLMResponse:
        return await self.call(AgentRole.GENERATOR, prompt)

    async def call_explainer(self, prompt: str) -> LLMResponse:
        return await self.call(AgentRole.EXPLAINER, prompt)

    async def call_classifier(self, prompt: str) -> LLMResponse:
        return await self.call(AgentRole.CLASSIFIER, prompt)
