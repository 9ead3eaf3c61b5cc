"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from uigen.agents.llm_client import AgentClient
from uigen.agents.orchestrator import Orchestrator
from uigen.handlers.generate import GenerateHandler
from uigen.models.backends import LLMBackend
from uigen.models.config import LLMConfig
from uigen.models.loader import ModelLoader
from uigen.registry import DEFAULT_REGISTRY, ComponentRegistry
from uigen.storage import CheckpointStore

from .config import Settings, get_settings


class CoreModule(Module):
    """Core dependencies."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        return self.settings

    @singleton
    @provider
    def provide_registry(self) -> ComponentRegistry:
        """Provide the fixed component registry."""
        return DEFAULT_REGISTRY

    @singleton
    @provider
    def provide_llm_config(self) -> LLMConfig:
        return LLMConfig.from_settings(self.settings)

    @singleton
    @provider
    def provide_backend(self, config: LLMConfig) -> LLMBackend:
        """Provide the configured provider backend."""
        return ModelLoader.load(config)

    @singleton
    @provider
    def provide_agent_client(self, backend: LLMBackend, config: LLMConfig) -> AgentClient:
        return AgentClient(backend, max_tokens=config.max_tokens)

    @singleton
    @provider
    def provide_orchestrator(self, client: AgentClient, registry: ComponentRegistry) -> Orchestrator:
        """Provide orchestrator with all dependencies."""
        return Orchestrator(client, registry=registry, max_retries=self.settings.max_retries)

    @singleton
    @provider
    def provide_generate_handler(self, orchestrator: Orchestrator) -> GenerateHandler:
        return GenerateHandler(orchestrator, max_intent_length=self.settings.max_intent_length)

    @singleton
    @provider
    def provide_checkpoint_store(self) -> CheckpointStore:
        """Provide checkpoint store on the configured database."""
        return CheckpointStore(self.settings.database_url)


def create_container(settings: Settings | None = None) -> Injector:
    """Create configured injector."""
    return Injector([CoreModule(settings or get_settings())])
