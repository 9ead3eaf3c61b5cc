"""Application state container and the chat session that drives it."""

from .chat import ChatSession, complexity_for, diff_components
from .store import AppState, AppStore

__all__ = ["AppState", "AppStore", "ChatSession", "complexity_for", "diff_components"]
