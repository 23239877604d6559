"""
Summary: Change-tracking containers backing the metadata model.
Why: Keep pending edits separate from the values read from disk so saves, reverts and diffs stay cheap.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Mapping, MutableMapping, MutableSet
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, override

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")

__all__ = [
    "ChangeKind",
    "PendingChange",
    "ChangeTrackingDictionary",
    "ChangeTrackingSet",
]


class ChangeKind(enum.Enum):
    """Kind of an overlay entry; a key missing from the overlay is unset."""

    DELETED = "deleted"
    VALUE = "value"


@dataclass(frozen=True, slots=True)
class PendingChange(Generic[V]):
    """A single overlay entry: either an explicit deletion or a new value."""

    kind: ChangeKind
    value: V | None = None

    @classmethod
    def deleted(cls) -> PendingChange[Any]:
        return cls(ChangeKind.DELETED)

    @classmethod
    def of(cls, value: V) -> PendingChange[V]:
        return cls(ChangeKind.VALUE, value)

    @property
    def is_deleted(self) -> bool:
        return self.kind is ChangeKind.DELETED


class ChangeTrackingDictionary(MutableMapping[K, V]):
    """Dictionary that records edits in an overlay on top of a baseline.

    ``None`` is never stored: assigning ``None`` removes the key. Reads see the
    merged view (baseline with the overlay applied); the baseline only changes
    through :meth:`merge_changes` or :meth:`reset`.
    """

    def __init__(self, initial: Mapping[K, V] | None = None) -> None:
        self._initial: dict[K, V] = {k: v for k, v in (initial or {}).items() if v is not None}
        self._changes: dict[K, PendingChange[V]] = {}

    # Mapping protocol ---------------------------------------------------------

    @override
    def __getitem__(self, key: K) -> V:
        change = self._changes.get(key)
        if change is not None:
            if change.is_deleted:
                raise KeyError(key)
            return change.value  # type: ignore[return-value]
        return self._initial[key]

    @override
    def __setitem__(self, key: K, value: V | None) -> None:
        self.set(key, value)

    @override
    def __delitem__(self, key: K) -> None:
        self.remove(key)

    @override
    def __iter__(self) -> Iterator[K]:
        for key in self._initial:
            change = self._changes.get(key)
            if change is None or not change.is_deleted:
                yield key
        for key, change in self._changes.items():
            if key not in self._initial and not change.is_deleted:
                yield key

    @override
    def __len__(self) -> int:
        return self.count()

    @override
    def __contains__(self, key: object) -> bool:
        change = self._changes.get(key)  # type: ignore[arg-type]
        if change is not None:
            return not change.is_deleted
        return key in self._initial

    @override
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(initial={self._initial!r}, changes={self._changes!r})"

    # Tracking operations ------------------------------------------------------

    @override
    def get(self, key: K, default: V | None = None) -> V | None:  # type: ignore[override]
        try:
            return self[key]
        except KeyError:
            return default

    def set(self, key: K, value: V | None) -> None:
        """Record ``value`` for ``key``; ``None`` deletes the key."""
        if value is None:
            if key in self._initial:
                self._changes[key] = PendingChange.deleted()
            else:
                self._changes.pop(key, None)
            return

        if key in self._initial and self._initial[key] == value:
            self._changes.pop(key, None)
        else:
            self._changes[key] = PendingChange.of(value)

    def remove(self, key: K) -> None:
        self.set(key, None)

    def remove_all(self) -> None:
        """Hide every baseline key without touching the baseline itself."""
        self._changes.clear()
        for key in self._initial:
            self._changes[key] = PendingChange.deleted()

    def count(self) -> int:
        total = len(self._initial)
        for key, change in self._changes.items():
            if change.is_deleted:
                total -= 1
            elif key not in self._initial:
                total += 1
        return total

    @property
    def initial_values(self) -> dict[K, V]:
        return dict(self._initial)

    def merged_values(self) -> dict[K, V]:
        merged = dict(self._initial)
        for key, change in self._changes.items():
            if change.is_deleted:
                _ = merged.pop(key, None)
            else:
                merged[key] = change.value  # type: ignore[assignment]
        return merged

    def added_values(self) -> dict[K, V]:
        """Overlay values for keys the baseline does not hold."""
        return {
            key: change.value  # type: ignore[misc]
            for key, change in self._changes.items()
            if not change.is_deleted and key not in self._initial
        }

    def removed_keys(self) -> set[K]:
        return {key for key, change in self._changes.items() if change.is_deleted}

    def updated_values(self) -> dict[K, V]:
        """Overlay values replacing an existing baseline value."""
        return {
            key: change.value  # type: ignore[misc]
            for key, change in self._changes.items()
            if not change.is_deleted and key in self._initial
        }

    def changed_keys(self) -> set[K]:
        return set(self._changes)

    def has_changes(self) -> bool:
        return bool(self._changes)

    def has_changes_for_key(self, key: K) -> bool:
        return key in self._changes

    def merge_changes(self) -> None:
        self._initial = self.merged_values()
        self._changes.clear()

    def revert_changes(self) -> None:
        self._changes.clear()

    def reset(self, initial: Mapping[K, V] | None = None) -> None:
        """Replace the baseline and drop every pending change."""
        self._initial = {k: v for k, v in (initial or {}).items() if v is not None}
        self._changes.clear()

    def copy(self) -> ChangeTrackingDictionary[K, V]:
        clone: ChangeTrackingDictionary[K, V] = ChangeTrackingDictionary(self._initial)
        clone._changes = dict(self._changes)
        return clone


class ChangeTrackingSet(MutableSet[T]):
    """Set that tracks added and removed elements relative to an initial set.

    Membership follows element equality, so two distinct objects that compare
    equal are the same element.
    """

    def __init__(self, initial: Iterable[T] | None = None) -> None:
        self._initial: frozenset[T] = frozenset(initial or ())
        self._added: set[T] = set()
        self._removed: set[T] = set()

    @override
    def __contains__(self, item: object) -> bool:
        if item in self._removed:
            return False
        return item in self._added or item in self._initial

    @override
    def __iter__(self) -> Iterator[T]:
        return iter(self.merged_objects())

    @override
    def __len__(self) -> int:
        return len(self.merged_objects())

    @override
    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(initial={set(self._initial)!r}, "
            f"added={self._added!r}, removed={self._removed!r})"
        )

    @override
    def add(self, value: T) -> None:
        if value in self._removed:
            self._removed.discard(value)
        elif value not in self._initial:
            self._added.add(value)

    @override
    def discard(self, value: T) -> None:
        if value in self._added:
            self._added.discard(value)
        elif value in self._initial:
            self._removed.add(value)

    @override
    def remove(self, value: T) -> None:
        """Remove ``value``; unlike ``set.remove`` a missing element is ignored."""
        self.discard(value)

    def contains(self, value: T) -> bool:
        return value in self

    def remove_all(self) -> None:
        self._added.clear()
        self._removed = set(self._initial)

    @property
    def initial_objects(self) -> frozenset[T]:
        return self._initial

    @property
    def added_objects(self) -> frozenset[T]:
        return frozenset(self._added)

    @property
    def removed_objects(self) -> frozenset[T]:
        return frozenset(self._removed)

    def merged_objects(self) -> frozenset[T]:
        return (self._initial | self._added) - self._removed

    def has_changes(self) -> bool:
        return bool(self._added or self._removed)

    def merge_changes(self) -> None:
        self._initial = self.merged_objects()
        self._added.clear()
        self._removed.clear()

    def revert_changes(self) -> None:
        self._added.clear()
        self._removed.clear()

    def reset(self, initial: Iterable[T] | None = None) -> None:
        self._initial = frozenset(initial or ())
        self._added.clear()
        self._removed.clear()

    def copy(self) -> ChangeTrackingSet[T]:
        clone: ChangeTrackingSet[T] = ChangeTrackingSet(self._initial)
        clone._added = set(self._added)
        clone._removed = set(self._removed)
        return clone
