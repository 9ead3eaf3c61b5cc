"""Persistence for checkpoints, iterations and generation sessions."""

from .models import Base, CheckpointRow, IterationRow, SessionRow
from .store import SESSION_HISTORY_LIMIT, CheckpointStore, create_store_engine

__all__ = [
    "Base",
    "CheckpointRow",
    "IterationRow",
    "SessionRow",
    "CheckpointStore",
    "create_store_engine",
    "SESSION_HISTORY_LIMIT",
]
