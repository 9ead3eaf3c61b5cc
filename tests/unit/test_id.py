"""ID generation tests."""

import time

import pytest

from uigen.core.id import (
    extract_prefix,
    extract_timestamp,
    is_valid,
    new_checkpoint_id,
    new_iteration_id,
    new_message_id,
    new_session_id,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "factory,prefix",
    [(new_checkpoint_id, "ckpt"), (new_iteration_id, "iter"), (new_session_id, "sess"), (new_message_id, "msg")],
)
def test_prefixed_ids(factory, prefix):
    value = factory()

    assert value.startswith(f"{prefix}_")
    assert is_valid(value)
    assert extract_prefix(value) == prefix


@pytest.mark.unit
def test_ids_are_unique():
    ids = {new_checkpoint_id() for _ in range(200)}
    assert len(ids) == 200


@pytest.mark.unit
def test_timestamp_roundtrip():
    before = time.time()
    created = extract_timestamp(new_checkpoint_id())

    assert created is not None
    assert abs(created.timestamp() - before) < 5


@pytest.mark.unit
@pytest.mark.parametrize("value", ["", "ckpt_short", "not-a-ulid", "ckpt_" + "!" * 26])
def test_invalid_ids(value):
    assert not is_valid(value)
    assert extract_timestamp(value) is None
