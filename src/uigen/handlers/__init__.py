"""Framework-agnostic request handlers."""

from .generate import GenerateHandler, HandlerResponse, INTENT_REQUIRED_ERROR

__all__ = ["GenerateHandler", "HandlerResponse", "INTENT_REQUIRED_ERROR"]
