"""Pytest configuration and fixtures."""

import os
from collections import deque
from typing import Iterable

import pytest
from injector import Injector, Module, provider, singleton

from uigen.agents import AgentClient, Orchestrator
from uigen.core import Settings
from uigen.core.container import CoreModule
from uigen.models import LLMBackend, LLMResponse
from uigen.state import AppStore
from uigen.storage import CheckpointStore


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ["UIGEN_LOG_LEVEL"] = "DEBUG"
    os.environ["UIGEN_DATABASE_URL"] = "sqlite://"
    os.environ["GROQ_API_KEY"] = "test-api-key"


# ============================================================================
# Canned model output
# ============================================================================

DASHBOARD_PLAN = """```json
{
  "layout": {"type": "single-column", "structure": "Card containing a data table"},
  "components": [
    {"name": "Container", "props": {"maxWidth": "xl"}, "purpose": "Page wrapper"},
    {"name": "Card", "props": {}, "purpose": "Groups the table"},
    {"name": "Table", "props": {"columns": [], "data": []}, "purpose": "Shows the rows"}
  ],
  "dataFlow": "Static sample rows"
}
```"""

DASHBOARD_CODE = """function GeneratedUI() {
  const columns = [{ key: 'name', label: 'Name' }, { key: 'status', label: 'Status' }];
  const data = [
    { name: 'Alpha', status: 'Active' },
    { name: 'Beta', status: 'Paused' },
  ];
  return React.createElement(Container, { maxWidth: 'xl' },
    React.createElement(Card, { padding: 'lg' },
      React.createElement(Table, { columns, data, striped: true })
    )
  );
}"""

CHART3D_CODE = """function GeneratedUI() {
  return React.createElement(Container, null, React.createElement(Chart3D, { data: [] }));
}"""

INLINE_STYLE_CODE = """function GeneratedUI() {
  return React.createElement(Button, { style: { color: 'red' } }, 'Go');
}"""

BUTTON_CODE = "function GeneratedUI(){ return React.createElement(Button,null,'Hi') }"

EXPLANATION = "This dashboard shows your records in a striped table inside a card."
LABEL = '"Dashboard Table"'


class ScriptedBackend:
    """LLMBackend fake that answers from a queue of canned responses."""

    def __init__(self, responses: Iterable[str | Exception] = ()) -> None:
        self.responses: deque[str | Exception] = deque(responses)
        self.calls: list[dict] = []

    def queue(self, *responses: str | Exception) -> "ScriptedBackend":
        self.responses.extend(responses)
        return self

    def complete(self, prompt: str, *, temperature: float, max_tokens: int | None = None) -> LLMResponse:
        self.calls.append({"prompt": prompt, "temperature": temperature, "max_tokens": max_tokens})
        if not self.responses:
            raise AssertionError("ScriptedBackend ran out of responses")
        response = self.responses.popleft()
        if isinstance(response, Exception):
            raise response
        return LLMResponse(content=response, tokens_used=len(response.split()))


def successful_run(code: str = DASHBOARD_CODE) -> list[str]:
    """Planner, generator, explainer and label responses for one clean run."""
    return [DASHBOARD_PLAN, code, EXPLANATION, LABEL]


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings."""
    return Settings(database_url="sqlite://", llm_api_key="test-api-key")


@pytest.fixture
def backend():
    """Scripted fake backend with an empty queue."""
    return ScriptedBackend()


@pytest.fixture
def agent_client(backend):
    return AgentClient(backend, max_tokens=1000)


@pytest.fixture
def orchestrator(agent_client):
    """Orchestrator over the scripted backend."""
    return Orchestrator(agent_client, max_retries=2)


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def checkpoint_store():
    """In-memory checkpoint store."""
    store = CheckpointStore("sqlite://")
    yield store
    store.close()


@pytest.fixture
def app_store(checkpoint_store):
    return AppStore(checkpoint_store)


# ============================================================================
# Container Fixtures
# ============================================================================

@pytest.fixture
def di_container(settings, backend):
    """Injector whose LLM backend is the scripted fake."""

    class FakeBackendModule(Module):
        @singleton
        @provider
        def provide_backend(self) -> LLMBackend:
            return backend

    return Injector([CoreModule(settings), FakeBackendModule()])
