"""Checkpoint store tests."""

import pytest

from uigen.agents.models import (
    Checkpoint,
    CodeChanges,
    ComponentPlan,
    GenerationSession,
    Iteration,
    OrchestrationResult,
)
from uigen.storage import CheckpointStore


def make_checkpoint(checkpoint_id: str, timestamp: int, marked: bool = False, label: str = "Label") -> Checkpoint:
    return Checkpoint(
        id=checkpoint_id,
        timestamp=timestamp,
        label=label,
        user_intent="Create a form",
        is_marked=marked,
        code="function GeneratedUI() { return null; }",
        plan=ComponentPlan.placeholder("form", "none"),
        component_count=2,
        complexity="simple",
        tags=["card", "input"],
    )


def make_iteration(iteration_id: str, checkpoint_id: str, timestamp: int) -> Iteration:
    return Iteration(
        id=iteration_id,
        timestamp=timestamp,
        parent_checkpoint_id=checkpoint_id,
        user_message="Add a button",
        ai_response="Added it",
        code_changes=CodeChanges(added=["Button"]),
    )


# ============================================================================
# Checkpoints
# ============================================================================

@pytest.mark.unit
def test_create_and_get(checkpoint_store):
    checkpoint = make_checkpoint("cp_1", 1000)

    assert checkpoint_store.create_checkpoint(checkpoint) == "cp_1"
    assert checkpoint_store.get_checkpoint("cp_1") == checkpoint
    assert checkpoint_store.get_checkpoint("missing") is None


@pytest.mark.unit
def test_listing_newest_first_with_insertion_tie_break(checkpoint_store):
    checkpoint_store.create_checkpoint(make_checkpoint("a", 1000))
    checkpoint_store.create_checkpoint(make_checkpoint("b", 3000))
    checkpoint_store.create_checkpoint(make_checkpoint("c", 3000))
    checkpoint_store.create_checkpoint(make_checkpoint("d", 2000))

    assert [c.id for c in checkpoint_store.get_all_checkpoints()] == ["c", "b", "d", "a"]
    assert checkpoint_store.count_checkpoints() == 4


@pytest.mark.unit
def test_marked_oldest_first(checkpoint_store):
    checkpoint_store.create_checkpoint(make_checkpoint("a", 3000, marked=True))
    checkpoint_store.create_checkpoint(make_checkpoint("b", 1000, marked=True))
    checkpoint_store.create_checkpoint(make_checkpoint("c", 2000, marked=False))

    assert [c.id for c in checkpoint_store.get_marked_checkpoints()] == ["b", "a"]


@pytest.mark.unit
def test_update_accepts_names_and_aliases(checkpoint_store):
    checkpoint_store.create_checkpoint(make_checkpoint("a", 1000))

    updated = checkpoint_store.update_checkpoint("a", {"label": "Renamed", "isMarked": True})

    assert updated.label == "Renamed"
    assert updated.is_marked is True
    stored = checkpoint_store.get_checkpoint("a")
    assert stored.label == "Renamed"
    assert stored.tags == ["card", "input"]
    assert [c.id for c in checkpoint_store.get_marked_checkpoints()] == ["a"]


@pytest.mark.unit
def test_update_cannot_change_id(checkpoint_store):
    checkpoint_store.create_checkpoint(make_checkpoint("a", 1000))

    updated = checkpoint_store.update_checkpoint("a", {"id": "b"})

    assert updated.id == "a"
    assert checkpoint_store.get_checkpoint("b") is None


@pytest.mark.unit
def test_update_with_id_named_keys(checkpoint_store):
    checkpoint_store.create_checkpoint(make_checkpoint("a", 1000))

    updated = checkpoint_store.update_checkpoint("a", {"checkpoint_id": "b", "updates": {}, "label": "Kept"})

    assert updated.id == "a"
    assert updated.label == "Kept"
    assert checkpoint_store.get_checkpoint("a").label == "Kept"


@pytest.mark.unit
def test_update_missing(checkpoint_store):
    assert checkpoint_store.update_checkpoint("nope", {"label": "x"}) is None


@pytest.mark.unit
def test_update_validates(checkpoint_store):
    checkpoint_store.create_checkpoint(make_checkpoint("a", 1000))

    with pytest.raises(Exception):
        checkpoint_store.update_checkpoint("a", {"complexity": "enormous"})
    assert checkpoint_store.get_checkpoint("a").complexity == "simple"


@pytest.mark.unit
def test_delete_cascades_to_iterations(checkpoint_store):
    checkpoint_store.create_checkpoint(make_checkpoint("a", 1000))
    checkpoint_store.create_checkpoint(make_checkpoint("b", 2000))
    checkpoint_store.create_iteration(make_iteration("i1", "a", 1100))
    checkpoint_store.create_iteration(make_iteration("i2", "a", 1200))
    checkpoint_store.create_iteration(make_iteration("i3", "b", 2100))

    assert checkpoint_store.delete_checkpoint("a") is True

    assert checkpoint_store.get_checkpoint("a") is None
    assert checkpoint_store.get_iterations("a") == []
    assert [i.id for i in checkpoint_store.get_all_iterations()] == ["i3"]
    assert checkpoint_store.delete_checkpoint("a") is False


# ============================================================================
# Iterations
# ============================================================================

@pytest.mark.unit
def test_iteration_ordering(checkpoint_store):
    checkpoint_store.create_checkpoint(make_checkpoint("a", 1000))
    checkpoint_store.create_iteration(make_iteration("late", "a", 5000))
    checkpoint_store.create_iteration(make_iteration("early", "a", 2000))

    assert [i.id for i in checkpoint_store.get_iterations("a")] == ["early", "late"]
    assert [i.id for i in checkpoint_store.get_all_iterations()] == ["late", "early"]
    assert checkpoint_store.get_iterations("a")[0].code_changes.added == ["Button"]


# ============================================================================
# Sessions
# ============================================================================

def make_session(session_id: str, start: int) -> GenerationSession:
    result = OrchestrationResult(
        plan=ComponentPlan.placeholder("x"),
        code="",
        explanation="",
        checkpoint_label="Error",
        success=False,
        errors=["boom"],
    )
    return GenerationSession(id=session_id, start_time=start, end_time=start + 10, result=result)


@pytest.mark.unit
def test_sessions_newest_first_and_capped(checkpoint_store):
    for index in range(5):
        checkpoint_store.create_session(make_session(f"s{index}", 1000 + index))

    sessions = checkpoint_store.get_sessions(limit=3)

    assert [s.id for s in sessions] == ["s4", "s3", "s2"]
    assert checkpoint_store.get_session("s0").result.errors == ["boom"]
    assert checkpoint_store.get_session("nope") is None


@pytest.mark.unit
def test_file_backed_store_persists(tmp_path):
    url = f"sqlite:///{tmp_path / 'history.db'}"
    first = CheckpointStore(url)
    first.create_checkpoint(make_checkpoint("a", 1000))
    first.close()

    second = CheckpointStore(url)
    assert second.get_checkpoint("a").label == "Label"
    second.close()
