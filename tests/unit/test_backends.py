"""Provider backend tests."""

import json

import httpx
import pybreaker
import pytest
import respx
from unittest.mock import patch

from uigen.agents import AgentClient
from uigen.models import AgentRole, GroqBackend, LLMConfig, LLMError, ModelLoader

BASE_URL = "https://llm.test/v1"


@pytest.fixture
def config():
    return LLMConfig(model_name="test-model", api_key="secret", base_url=BASE_URL, max_tokens=256)


def completion(content: str, tokens: int = 12) -> dict:
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"total_tokens": tokens},
    }


@pytest.mark.unit
@respx.mock
def test_groq_completion(config):
    route = respx.post(f"{BASE_URL}/chat/completions").mock(
        return_value=httpx.Response(200, json=completion("hello"))
    )
    backend = GroqBackend(config)

    response = backend.complete("Say hi", temperature=0.2)

    assert response.content == "hello"
    assert response.tokens_used == 12
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer secret"
    payload = json.loads(request.content)
    assert payload == {
        "model": "test-model",
        "messages": [{"role": "user", "content": "Say hi"}],
        "temperature": 0.2,
        "max_tokens": 256,
    }


@pytest.mark.unit
@respx.mock
def test_groq_max_tokens_override(config):
    route = respx.post(f"{BASE_URL}/chat/completions").mock(
        return_value=httpx.Response(200, json=completion("ok"))
    )

    GroqBackend(config).complete("x", temperature=0.1, max_tokens=50)

    assert json.loads(route.calls.last.request.content)["max_tokens"] == 50


@pytest.mark.unit
@respx.mock
def test_groq_http_error(config):
    respx.post(f"{BASE_URL}/chat/completions").mock(return_value=httpx.Response(429))

    with pytest.raises(LLMError, match="LLM Error: HTTP 429"):
        GroqBackend(config).complete("x", temperature=0.1)


@pytest.mark.unit
@respx.mock
def test_groq_transport_error(config):
    respx.post(f"{BASE_URL}/chat/completions").mock(side_effect=httpx.ConnectError("refused"))

    with pytest.raises(LLMError, match="LLM Error: refused"):
        GroqBackend(config).complete("x", temperature=0.1)


@pytest.mark.unit
@respx.mock
def test_groq_empty_choices(config):
    respx.post(f"{BASE_URL}/chat/completions").mock(return_value=httpx.Response(200, json={"choices": []}))

    response = GroqBackend(config).complete("x", temperature=0.1)

    assert response.content == ""
    assert response.tokens_used == 0


@pytest.mark.unit
@respx.mock
def test_groq_breaker_opens(config):
    respx.post(f"{BASE_URL}/chat/completions").mock(return_value=httpx.Response(503))
    backend = GroqBackend(config)

    for _ in range(4):
        with pytest.raises(LLMError, match="HTTP 503"):
            backend.complete("x", temperature=0.1)

    with pytest.raises(LLMError, match="circuit open"):
        backend.complete("x", temperature=0.1)
    assert backend._breaker.current_state == pybreaker.STATE_OPEN


@pytest.mark.unit
def test_breaker_listener_logs(config):
    backend = GroqBackend(config)
    listener = backend._breaker.listeners[0]

    with patch("uigen.models.backends.logger") as mock_logger:
        listener.state_change(backend._breaker, "closed", "open")

    mock_logger.warning.assert_called_once()
    assert mock_logger.warning.call_args[0][0] == "breaker_state_change"


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_agent_client_over_groq(config):
    route = respx.post(f"{BASE_URL}/chat/completions").mock(
        return_value=httpx.Response(200, json=completion("planned"))
    )
    client = AgentClient(GroqBackend(config), max_tokens=100)

    response = await client.call_planner("plan this")

    assert response.content == "planned"
    payload = json.loads(route.calls.last.request.content)
    assert payload["temperature"] == 0.2
    assert payload["max_tokens"] == 100


@pytest.mark.unit
@pytest.mark.asyncio
async def test_agent_client_rejects_unknown_role(config):
    client = AgentClient(GroqBackend(config))

    with pytest.raises(ValueError):
        await client.call("critic", "x")


# ============================================================================
# Loader
# ============================================================================

@pytest.mark.unit
def test_loader_builds_groq_backend(config):
    backend = ModelLoader.load(config)

    assert isinstance(backend, GroqBackend)
    assert ModelLoader.is_loaded()

    ModelLoader.unload()
    assert not ModelLoader.is_loaded()


@pytest.mark.unit
def test_config_reads_provider_key_from_env(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "from-env")
    monkeypatch.setenv("GOOGLE_API_KEY", "google-key")

    assert LLMConfig().api_key == "from-env"
    assert LLMConfig(provider="gemini").api_key == "google-key"
    assert LLMConfig().temperature_for(AgentRole.EXPLAINER) == 0.5
