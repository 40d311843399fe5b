"""Tests for procspy data models."""

import dataclasses

import pytest

from procspy.models import ProcessRecord, Snapshot


def test_process_record_creation():
    """Test ProcessRecord dataclass creation."""
    record = ProcessRecord(pid=123, owner="testuser", command="/usr/bin/test --flag")

    assert record.pid == 123
    assert record.owner == "testuser"
    assert record.command == "/usr/bin/test --flag"


def test_process_record_is_frozen():
    """Test that ProcessRecord is immutable (frozen)."""
    record = ProcessRecord(pid=1, owner="root", command="/sbin/init")

    with pytest.raises(dataclasses.FrozenInstanceError):
        record.pid = 999


def test_process_record_uses_slots():
    """Test that ProcessRecord uses __slots__ for memory efficiency."""
    record = ProcessRecord(pid=1, owner="root", command="/sbin/init")

    # Slots-based dataclasses don't have __dict__
    assert not hasattr(record, "__dict__")


class TestSnapshot:
    """Tests for Snapshot dataclass."""

    def test_empty_by_default(self):
        """Test a default Snapshot holds no records and is not truncated."""
        snapshot = Snapshot()

        assert len(snapshot) == 0
        assert list(snapshot) == []
        assert snapshot.truncated is False

    def test_sequence_access(self, make_snapshot):
        """Test Snapshot supports len, iteration and indexing in order."""
        snapshot = make_snapshot(3)

        assert len(snapshot) == 3
        assert [r.pid for r in snapshot] == [100, 101, 102]
        assert snapshot[1].pid == 101
        assert snapshot[-1].pid == 102

    def test_preserves_enumeration_order(self):
        """Test records are kept in the given order, not sorted by pid."""
        records = (
            ProcessRecord(pid=30, owner="a", command="x"),
            ProcessRecord(pid=10, owner="b", command="y"),
        )
        snapshot = Snapshot(records=records)

        assert [r.pid for r in snapshot] == [30, 10]

    def test_snapshot_is_frozen(self, make_snapshot):
        """Test that Snapshot cannot be modified after creation."""
        snapshot = make_snapshot(2)

        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.truncated = True

    def test_equal_snapshots_compare_equal(self, make_snapshot):
        """Test snapshots with identical records are equal."""
        assert make_snapshot(4) == make_snapshot(4)
        assert make_snapshot(4) != make_snapshot(4, truncated=True)
