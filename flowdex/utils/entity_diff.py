"""
Keyed entity reconciliation.

Computes the create/update/delete delta between a stored collection of
entities and a fresh snapshot, matching entities by an ordered primary key.

Entities may be plain dicts or objects (e.g. ORM models); fields are read
with item access for dicts and attribute access otherwise. Update entries
are always returned as dicts produced by the merge policy:

- a sensitive field that is present on the stored entity is never
  overwritten with an empty/absent incoming value
- preserved fields (the creation timestamp by default) always keep the
  stored value

Example:
    diff = compute_entities_diff(
        old_entities=stored_keys,
        new_entities=fresh_keys,
        primary_key=("address", "index"),
        sensitive_fields=("private_key",),
    )
    await process_entities_diff(
        diff,
        create=lambda e: repo.create(**e),
        update=lambda e: repo.upsert(**e),
        delete=lambda e: repo.delete(e.id),
    )
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

DEFAULT_PRESERVED_FIELDS = ("created_at",)
# Bookkeeping columns that never make two snapshots differ
IGNORED_COMPARE_FIELDS = frozenset({"created_at", "updated_at"})


@dataclass
class EntitiesDiff(Generic[T]):
    """Result of reconciling two entity collections."""

    create: list[T] = field(default_factory=list)
    update: list[dict[str, Any]] = field(default_factory=list)
    delete: list[T] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Check if applying the diff would change nothing."""
        return not (self.create or self.update or self.delete)


def get_field(entity: Any, name: str, default: Any = None) -> Any:
    """Read a field from a dict or an object."""
    if isinstance(entity, dict):
        return entity.get(name, default)
    return getattr(entity, name, default)


def has_field(entity: Any, name: str) -> bool:
    """Check if a dict or an object carries a field."""
    if isinstance(entity, dict):
        return name in entity
    return hasattr(entity, name)


def _key_of(entity: Any, primary_key: Sequence[str]) -> tuple[Any, ...]:
    return tuple(get_field(entity, name) for name in primary_key)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def merge_entity(
    existing: Any,
    incoming: Any,
    sensitive_fields: Iterable[str] = (),
    preserved_fields: Iterable[str] = DEFAULT_PRESERVED_FIELDS,
) -> dict[str, Any]:
    """
    Merge an incoming snapshot of an entity over its stored version.

    Args:
        existing: Stored entity
        incoming: Fresh entity for the same primary key
        sensitive_fields: Fields never overwritten by empty incoming values
        preserved_fields: Fields always kept from the stored entity

    Returns:
        Merged entity as a dict (incoming fields plus merge policy)
    """
    if isinstance(incoming, dict):
        merged = dict(incoming)
    else:
        merged = {
            name: value
            for name, value in vars(incoming).items()
            if not name.startswith("_")
        }

    for name in sensitive_fields:
        stored = get_field(existing, name)
        if _is_empty(merged.get(name)) and not _is_empty(stored):
            merged[name] = stored

    for name in preserved_fields:
        if has_field(existing, name):
            stored = get_field(existing, name)
            if stored is not None:
                merged[name] = stored

    return merged


def _differs(existing: Any, merged: dict[str, Any]) -> bool:
    for name, value in merged.items():
        if name in IGNORED_COMPARE_FIELDS:
            continue
        if get_field(existing, name) != value:
            return True
    return False


def compute_entities_diff(
    old_entities: Iterable[T],
    new_entities: Iterable[T],
    primary_key: Sequence[str],
    sensitive_fields: Iterable[str] = (),
    preserved_fields: Iterable[str] = DEFAULT_PRESERVED_FIELDS,
) -> EntitiesDiff[T]:
    """
    Compute the delta that turns old_entities into new_entities.

    Entities only in new_entities are created, entities only in
    old_entities are deleted, and entities in both are updated when the
    merged record differs from the stored one.

    Args:
        old_entities: Currently stored entities
        new_entities: Fresh snapshot
        primary_key: Ordered tuple of field names identifying an entity
        sensitive_fields: See merge_entity
        preserved_fields: See merge_entity

    Returns:
        EntitiesDiff with disjoint create/update/delete key sets

    Raises:
        ValueError: If primary_key is empty or a collection repeats a key
    """
    if not primary_key:
        raise ValueError("primary_key must name at least one field")

    sensitive_fields = tuple(sensitive_fields)
    preserved_fields = tuple(preserved_fields)

    old_by_key: dict[tuple[Any, ...], T] = {}
    for entity in old_entities:
        key = _key_of(entity, primary_key)
        if key in old_by_key:
            raise ValueError(f"Duplicate primary key in old entities: {key}")
        old_by_key[key] = entity

    diff: EntitiesDiff[T] = EntitiesDiff()
    seen: set[tuple[Any, ...]] = set()

    for entity in new_entities:
        key = _key_of(entity, primary_key)
        if key in seen:
            raise ValueError(f"Duplicate primary key in new entities: {key}")
        seen.add(key)

        existing = old_by_key.get(key)
        if existing is None:
            diff.create.append(entity)
            continue

        merged = merge_entity(existing, entity, sensitive_fields, preserved_fields)
        if _differs(existing, merged):
            diff.update.append(merged)

    diff.delete.extend(
        entity for key, entity in old_by_key.items() if key not in seen
    )
    return diff


async def process_entities_diff(
    diff: EntitiesDiff[T],
    create: Callable[[T], Awaitable[Any]],
    update: Callable[[dict[str, Any]], Awaitable[Any]],
    delete: Callable[[T], Awaitable[Any]],
) -> tuple[list[Any], list[Any], list[Any]]:
    """
    Apply a diff with the given async operations.

    Entities within one list are applied concurrently; the three lists
    target disjoint keys, so they are applied concurrently as well.

    Returns:
        Tuple of (create results, update results, delete results)
    """

    async def apply_all(
        operation: Callable[[Any], Awaitable[Any]], entities: list[Any]
    ) -> list[Any]:
        return list(await asyncio.gather(*(operation(e) for e in entities)))

    created, updated, deleted = await asyncio.gather(
        apply_all(create, diff.create),
        apply_all(update, diff.update),
        apply_all(delete, diff.delete),
    )
    return created, updated, deleted
