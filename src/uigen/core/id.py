"""ID Generation System.

ULID-based ids for persisted and in-flight records.

Design:
- ULIDs only: single, k-sortable id format
- Prefixed: type-specific prefixes keep logs readable (ckpt_*, iter_*, ...)
"""

from datetime import datetime
from typing import NewType

from ulid import ULID

# ============================================================================
# Type-Safe ID Wrappers
# ============================================================================

CheckpointID = NewType("CheckpointID", str)
IterationID = NewType("IterationID", str)
SessionID = NewType("SessionID", str)
MessageID = NewType("MessageID", str)
GenerationID = NewType("GenerationID", str)

# ============================================================================
# ID Prefixes
# ============================================================================


class Prefix:
    """ID prefix constants."""

    CHECKPOINT = "ckpt"
    ITERATION = "iter"
    SESSION = "sess"
    MESSAGE = "msg"
    GENERATION = "gen"


class Generator:
    """ULID generator."""

    def generate(self) -> str:
        """Generate a new ULID."""
        return str(ULID())

    def generate_with_prefix(self, prefix: str) -> str:
        """Generate ULID with type prefix."""
        return f"{prefix}_{self.generate()}"

    def timestamp(self, id_str: str) -> int:
        """Extract timestamp (milliseconds) from ULID."""
        try:
            ulid_str = id_str.split("_")[1] if "_" in id_str else id_str
            return int(ULID.from_str(ulid_str).timestamp * 1000)
        except (ValueError, IndexError):
            return 0


_generator = Generator()

# ============================================================================
# Typed ID Generators
# ============================================================================


def new_checkpoint_id() -> CheckpointID:
    """Generate new checkpoint ID."""
    return CheckpointID(_generator.generate_with_prefix(Prefix.CHECKPOINT))


def new_iteration_id() -> IterationID:
    """Generate new iteration ID."""
    return IterationID(_generator.generate_with_prefix(Prefix.ITERATION))


def new_session_id() -> SessionID:
    """Generate new generation session ID."""
    return SessionID(_generator.generate_with_prefix(Prefix.SESSION))


def new_message_id() -> MessageID:
    """Generate new chat message ID."""
    return MessageID(_generator.generate_with_prefix(Prefix.MESSAGE))


def new_generation_id() -> GenerationID:
    """Generate new orchestration run ID."""
    return GenerationID(_generator.generate_with_prefix(Prefix.GENERATION))


# ============================================================================
# Parsing
# ============================================================================


def is_valid(id_str: str) -> bool:
    """Check if string is a (optionally prefixed) ULID."""
    try:
        ulid_part = id_str.split("_")[1] if "_" in id_str else id_str
        if len(ulid_part) != 26:
            return False
        ULID.from_str(ulid_part)
        return True
    except (ValueError, IndexError):
        return False


def extract_timestamp(id_str: str) -> datetime | None:
    """Extract creation time from an id, or None if invalid."""
    timestamp_ms = _generator.timestamp(id_str)
    return datetime.fromtimestamp(timestamp_ms / 1000.0) if timestamp_ms > 0 else None


def extract_prefix(id_str: str) -> str | None:
    """Extract prefix from prefixed ID."""
    parts = id_str.split("_")
    return parts[0] if len(parts) == 2 else None
