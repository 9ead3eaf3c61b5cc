"""Model Loader - builds the configured provider backend."""

from typing import Optional

from uigen.core import get_logger
from .backends import GeminiBackend, GroqBackend, LLMBackend
from .config import LLMConfig, Provider

logger = get_logger(__name__)


class ModelLoadError(Exception):
    """Model loading failed."""

    pass


class ModelLoader:
    """Backend lifecycle manager."""

    _instance: Optional[LLMBackend] = None

    @classmethod
    def load(cls, config: LLMConfig) -> LLMBackend:
        """Load backend for the configured provider."""
        logger.info("loading", provider=config.provider, model=config.model_name)
        try:
            if config.provider == Provider.GEMINI.value:
                backend: LLMBackend = GeminiBackend(config)
            else:
                backend = GroqBackend(config)
        except Exception as e:
            logger.error("load_failed", error=str(e))
            raise ModelLoadError(f"Failed to load {config.model_name}") from e

        cls._instance = backend
        return backend

    @classmethod
    def unload(cls) -> None:
        """Drop the cached backend, closing it when possible."""
        if cls._instance is not None:
            logger.info("unloading")
            close = getattr(cls._instance, "close", None)
            if callable(close):
                close()
            cls._instance = None

    @classmethod
    def is_loaded(cls) -> bool:
        return cls._instance is not None
