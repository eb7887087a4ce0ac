"""Unit tests for keyed entity reconciliation."""

from datetime import UTC, datetime
from types import SimpleNamespace

import pytest

from flowdex.utils.entity_diff import (
    compute_entities_diff,
    merge_entity,
    process_entities_diff,
)

PRIMARY_KEY = ("address", "index")


def key(index, public_key="aa", **extra):
    """Build a key entity dict."""
    return {
        "id": f"0x01.{public_key}",
        "address": "0x01",
        "index": index,
        "public_key": public_key,
        **extra,
    }


class TestComputeEntitiesDiff:
    """Tests for compute_entities_diff."""

    def test_empty_old_creates_everything(self):
        """All new entities should be created."""
        new = [key(0, "aa"), key(1, "bb")]

        diff = compute_entities_diff([], new, PRIMARY_KEY)

        assert diff.create == new
        assert diff.update == []
        assert diff.delete == []

    def test_identical_snapshots_are_empty(self):
        """Unchanged entities should produce no operations."""
        entities = [key(0, "aa"), key(1, "bb")]

        diff = compute_entities_diff(entities, [dict(e) for e in entities], PRIMARY_KEY)

        assert diff.is_empty

    def test_empty_new_deletes_everything(self):
        """All old entities should be deleted."""
        old = [key(0, "aa"), key(1, "bb")]

        diff = compute_entities_diff(old, [], PRIMARY_KEY)

        assert diff.delete == old
        assert diff.create == []
        assert diff.update == []

    def test_mixed_changes(self):
        """Entities should be split by primary key membership."""
        old = [key(0, "aa"), key(1, "bb", weight=1000)]
        new = [key(1, "bb", weight=500), key(2, "cc")]

        diff = compute_entities_diff(old, new, PRIMARY_KEY)

        assert diff.create == [key(2, "cc")]
        assert diff.update == [key(1, "bb", weight=500)]
        assert diff.delete == [key(0, "aa")]

    def test_revoked_key_kept_while_listed(self):
        """A revoked key still in the snapshot should be updated, not deleted."""
        old = [key(0, "aa", revoked=False)]
        new = [key(0, "aa", revoked=True)]

        diff = compute_entities_diff(old, new, PRIMARY_KEY)

        assert diff.delete == []
        assert diff.update[0]["revoked"] is True

    def test_works_with_objects(self):
        """Stored entities may be ORM-like objects."""
        old = [SimpleNamespace(**key(0, "aa", weight=1))]
        new = [key(0, "aa", weight=2)]

        diff = compute_entities_diff(old, new, PRIMARY_KEY)

        assert diff.update == [key(0, "aa", weight=2)]

    def test_timestamps_alone_do_not_trigger_update(self):
        """Bookkeeping fields should be ignored when comparing."""
        old = [key(0, "aa", updated_at=datetime(2026, 1, 1, tzinfo=UTC))]
        new = [key(0, "aa", updated_at=datetime(2026, 2, 1, tzinfo=UTC))]

        diff = compute_entities_diff(old, new, PRIMARY_KEY)

        assert diff.update == []

    def test_empty_primary_key_rejected(self):
        """An empty primary key cannot identify entities."""
        with pytest.raises(ValueError):
            compute_entities_diff([], [], ())

    def test_duplicate_keys_rejected(self):
        """Repeated primary keys should be reported."""
        with pytest.raises(ValueError, match="Duplicate"):
            compute_entities_diff([], [key(0, "aa"), key(0, "bb")], PRIMARY_KEY)


class TestMergePolicy:
    """Tests for sensitive and preserved field handling."""

    def test_empty_sensitive_field_keeps_stored_value(self):
        """Stored private key should survive an empty incoming value."""
        existing = key(0, private_key="secret")

        for incoming_value in (None, ""):
            merged = merge_entity(
                existing,
                key(0, private_key=incoming_value),
                sensitive_fields=("private_key",),
            )
            assert merged["private_key"] == "secret"

    def test_absent_sensitive_field_keeps_stored_value(self):
        """A snapshot without the field should not drop the stored value."""
        merged = merge_entity(
            key(0, private_key="secret"), key(0), sensitive_fields=("private_key",)
        )

        assert merged["private_key"] == "secret"

    def test_new_sensitive_value_wins(self):
        """A non-empty incoming value should replace the stored one."""
        merged = merge_entity(
            key(0, private_key="old"),
            key(0, private_key="new"),
            sensitive_fields=("private_key",),
        )

        assert merged["private_key"] == "new"

    def test_creation_timestamp_preserved(self):
        """created_at should always keep the stored value."""
        created = datetime(2025, 1, 1, tzinfo=UTC)

        merged = merge_entity(
            key(0, created_at=created),
            key(0, created_at=datetime(2026, 1, 1, tzinfo=UTC)),
        )

        assert merged["created_at"] == created

    def test_diff_update_applies_merge_policy(self):
        """Update entries should carry the merged record."""
        created = datetime(2025, 1, 1, tzinfo=UTC)
        old = [key(0, weight=1, private_key="secret", created_at=created)]
        new = [key(0, weight=2)]

        diff = compute_entities_diff(
            old, new, PRIMARY_KEY, sensitive_fields=("private_key",)
        )

        assert diff.update == [
            key(0, weight=2, private_key="secret", created_at=created)
        ]


class TestProcessEntitiesDiff:
    """Tests for applying a diff."""

    @pytest.mark.asyncio
    async def test_applies_each_list_with_its_operation(self):
        """Each operation should receive the entities of its list."""
        diff = compute_entities_diff(
            [key(0, "aa"), key(1, "bb", weight=1)],
            [key(1, "bb", weight=2), key(2, "cc")],
            PRIMARY_KEY,
        )
        applied = []

        async def record(kind, entity):
            applied.append((kind, entity["index"]))
            return kind

        created, updated, deleted = await process_entities_diff(
            diff,
            create=lambda e: record("create", e),
            update=lambda e: record("update", e),
            delete=lambda e: record("delete", e),
        )

        assert sorted(applied) == [("create", 2), ("delete", 0), ("update", 1)]
        assert (created, updated, deleted) == (["create"], ["update"], ["delete"])
