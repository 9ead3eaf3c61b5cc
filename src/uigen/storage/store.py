"""
Checkpoint Store
Persistence for checkpoints, iterations and generation sessions.
"""

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import Engine, create_engine, delete, func, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from uigen.agents.models import Checkpoint, GenerationSession, Iteration
from uigen.core import get_logger

from .models import Base, CheckpointRow, IterationRow, SessionRow

logger = get_logger(__name__)

SESSION_HISTORY_LIMIT = 50
IN_MEMORY_URLS = frozenset({"sqlite://", "sqlite:///:memory:"})


def create_store_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine; sqlite connections are shareable across threads."""
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo)
    if url in IN_MEMORY_URLS:
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo, connect_args={"check_same_thread": False})


class CheckpointStore:
    """
    Stores checkpoints, the iterations recorded against them, and the audit
    trail of generation sessions.

    Listing order:
        checkpoints newest first, marked checkpoints oldest first,
        iterations of one checkpoint oldest first, all iterations newest
        first, sessions newest first (capped).
    """

    def __init__(self, url: str = "sqlite://", engine: Engine | None = None) -> None:
        self.engine = engine or create_store_engine(url)
        Base.metadata.create_all(self.engine)
        self._session_factory = sessionmaker(self.engine, expire_on_commit=False)
        logger.info("checkpoint_store_ready", url=self.engine.url.render_as_string(hide_password=True))

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Transactional session scope."""
        with self._session_factory() as session:
            with session.begin():
                yield session

    def close(self) -> None:
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Checkpoints
    # ------------------------------------------------------------------

    def create_checkpoint(self, checkpoint: Checkpoint) -> str:
        with self.session() as session:
            session.add(CheckpointRow(
                id=checkpoint.id,
                timestamp=checkpoint.timestamp,
                label=checkpoint.label,
                is_marked=checkpoint.is_marked,
                payload=checkpoint.to_wire(),
            ))
        logger.info("checkpoint_created", checkpoint_id=checkpoint.id, label=checkpoint.label)
        return checkpoint.id

    def get_all_checkpoints(self) -> list[Checkpoint]:
        query = select(CheckpointRow).order_by(CheckpointRow.timestamp.desc(), CheckpointRow.seq.desc())
        with self.session() as session:
            return [Checkpoint.model_validate(row.payload) for row in session.scalars(query)]

    def get_checkpoint(self, checkpoint_id: str) -> Checkpoint | None:
        with self.session() as session:
            row = self._checkpoint_row(session, checkpoint_id)
            return Checkpoint.model_validate(row.payload) if row else None

    def update_checkpoint(self, checkpoint_id: str, updates: dict[str, Any]) -> Checkpoint | None:
        """
        Apply a partial update; keys may be attribute names or wire aliases.

        Returns:
            The updated checkpoint, or None if the id is unknown
        """
        with self.session() as session:
            row = self._checkpoint_row(session, checkpoint_id)
            if row is None:
                logger.warning("checkpoint_update_missing", checkpoint_id=checkpoint_id)
                return None
            merged = Checkpoint.model_validate(row.payload).model_dump(by_alias=True)
            merged.update(_to_aliases(Checkpoint, updates))
            merged["id"] = checkpoint_id
            checkpoint = Checkpoint.model_validate(merged)
            row.timestamp = checkpoint.timestamp
            row.label = checkpoint.label
            row.is_marked = checkpoint.is_marked
            row.payload = checkpoint.to_wire()
        logger.info("checkpoint_updated", checkpoint_id=checkpoint_id, fields=sorted(updates))
        return checkpoint

    def delete_checkpoint(self, checkpoint_id: str) -> bool:
        """Delete a checkpoint together with its iterations."""
        with self.session() as session:
            removed = session.execute(
                delete(IterationRow).where(IterationRow.parent_checkpoint_id == checkpoint_id)
            ).rowcount
            deleted = session.execute(
                delete(CheckpointRow).where(CheckpointRow.id == checkpoint_id)
            ).rowcount
        logger.info("checkpoint_deleted", checkpoint_id=checkpoint_id, iterations_removed=removed)
        return bool(deleted)

    def get_marked_checkpoints(self) -> list[Checkpoint]:
        query = (
            select(CheckpointRow)
            .where(CheckpointRow.is_marked.is_(True))
            .order_by(CheckpointRow.timestamp.asc(), CheckpointRow.seq.asc())
        )
        with self.session() as session:
            return [Checkpoint.model_validate(row.payload) for row in session.scalars(query)]

    def count_checkpoints(self) -> int:
        with self.session() as session:
            return session.scalar(select(func.count()).select_from(CheckpointRow)) or 0

    @staticmethod
    def _checkpoint_row(session: Session, checkpoint_id: str) -> CheckpointRow | None:
        return session.scalar(select(CheckpointRow).where(CheckpointRow.id == checkpoint_id))

    # ------------------------------------------------------------------
    # Iterations
    # ------------------------------------------------------------------

    def create_iteration(self, iteration: Iteration) -> str:
        with self.session() as session:
            session.add(IterationRow(
                id=iteration.id,
                parent_checkpoint_id=iteration.parent_checkpoint_id,
                timestamp=iteration.timestamp,
                payload=iteration.to_wire(),
            ))
        logger.debug("iteration_created", iteration_id=iteration.id, checkpoint_id=iteration.parent_checkpoint_id)
        return iteration.id

    def get_iterations(self, checkpoint_id: str) -> list[Iteration]:
        query = (
            select(IterationRow)
            .where(IterationRow.parent_checkpoint_id == checkpoint_id)
            .order_by(IterationRow.timestamp.asc(), IterationRow.seq.asc())
        )
        with self.session() as session:
            return [Iteration.model_validate(row.payload) for row in session.scalars(query)]

    def get_all_iterations(self) -> list[Iteration]:
        query = select(IterationRow).order_by(IterationRow.timestamp.desc(), IterationRow.seq.desc())
        with self.session() as session:
            return [Iteration.model_validate(row.payload) for row in session.scalars(query)]

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, generation: GenerationSession) -> str:
        with self.session() as session:
            session.add(SessionRow(
                id=generation.id,
                start_time=generation.start_time,
                payload=generation.to_wire(),
            ))
        logger.debug("session_recorded", session_id=generation.id, success=generation.result.success)
        return generation.id

    def get_sessions(self, limit: int = SESSION_HISTORY_LIMIT) -> list[GenerationSession]:
        query = select(SessionRow).order_by(SessionRow.start_time.desc(), SessionRow.seq.desc()).limit(limit)
        with self.session() as session:
            return [GenerationSession.model_validate(row.payload) for row in session.scalars(query)]

    def get_session(self, session_id: str) -> GenerationSession | None:
        with self.session() as session:
            row = session.scalar(select(SessionRow).where(SessionRow.id == session_id))
            return GenerationSession.model_validate(row.payload) if row else None


def _to_aliases(model: type[Checkpoint], updates: dict[str, Any]) -> dict[str, Any]:
    """Map attribute-name keys to wire aliases; alias keys pass through."""
    mapped = {}
    for key, value in updates.items():
        field = model.model_fields.get(key)
        if field is not None and field.alias:
            key = field.alias
        if hasattr(value, "model_dump"):
            value = value.model_dump(by_alias=True)
        mapped[key] = value
    return mapped
