"""Model configuration and provider backends."""

from .config import AgentRole, LLMConfig, Provider, ROLE_TEMPERATURES
from .backends import (
    GeminiBackend,
    GroqBackend,
    LLMBackend,
    LLMError,
    LLMResponse,
)
from .loader import ModelLoader, ModelLoadError

__all__ = [
    "AgentRole",
    "LLMConfig",
    "Provider",
    "ROLE_TEMPERATURES",
    "GeminiBackend",
    "GroqBackend",
    "LLMBackend",
    "LLMError",
    "LLMResponse",
    "ModelLoader",
    "ModelLoadError",
]
