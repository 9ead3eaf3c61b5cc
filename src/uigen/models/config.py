"""
Model configuration with strong typing.
Provider settings and per-role sampling temperatures.
"""

from enum import Enum
import os

from pydantic import BaseModel, ConfigDict, Field


class Provider(str, Enum):
    """Supported LLM providers."""

    GROQ = "groq"
    GEMINI = "gemini"


class AgentRole(str, Enum):
    """Pipeline roles; each is one model call with its own prompt and temperature."""

    PLANNER = "planner"
    GENERATOR = "generator"
    EXPLAINER = "explainer"
    CLASSIFIER = "classifier"


# Low for structured output, lowest for code, higher for prose
ROLE_TEMPERATURES: dict[AgentRole, float] = {
    AgentRole.PLANNER: 0.2,
    AgentRole.GENERATOR: 0.1,
    AgentRole.EXPLAINER: 0.5,
    AgentRole.CLASSIFIER: 0.1,
}

DEFAULT_MODEL = "llama-3.3-70b-versatile"
DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"


class LLMConfig(BaseModel):
    """Type-safe provider configuration."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    provider: Provider = Field(default=Provider.GROQ)
    model_name: str = Field(default=DEFAULT_MODEL)
    api_key: str | None = Field(default=None)
    base_url: str = Field(default=DEFAULT_BASE_URL)
    max_tokens: int = Field(default=4000, ge=1, le=32768)
    timeout: float = Field(default=60.0, gt=0)

    def __init__(self, **data):
        """Initialize config with API key from environment if not provided."""
        if data.get("api_key") is None:
            provider = data.get("provider", Provider.GROQ)
            env_var = "GOOGLE_API_KEY" if provider in (Provider.GEMINI, "gemini") else "GROQ_API_KEY"
            data["api_key"] = os.getenv(env_var)
        super().__init__(**data)

    @classmethod
    def from_settings(cls, settings) -> "LLMConfig":
        """Build from application Settings."""
        return cls(
            provider=settings.llm_provider,
            model_name=settings.llm_model,
            api_key=settings.llm_api_key or None,
            base_url=settings.llm_base_url,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout,
        )

    def temperature_for(self, role: AgentRole) -> float:
        """Sampling temperature for a pipeline role."""
        return ROLE_TEMPERATURES[AgentRole(role)]
