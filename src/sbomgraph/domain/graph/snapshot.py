"""Immutable, versioned view of the graph.

A snapshot maps entity ids to their attributes (predicate to a tuple of resolved
values) and keeps an index of identity-unique ``(predicate, value)`` pairs. Values
are compared with their type, so ``True`` and ``1`` are different values. Merges
never touch an existing snapshot; ``GraphStore.merge`` builds a successor with
``basis_t`` one higher.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from .statements import EntityId

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from .statements import StoredValue

type Attributes = Mapping[str, tuple[StoredValue, ...]]
type ValueKey = tuple[type, StoredValue]

_EMPTY_ATTRIBUTES: Mapping[str, tuple[object, ...]] = MappingProxyType({})


def value_key(value: StoredValue) -> ValueKey:
    return (type(value), value)


def _empty_entities() -> Mapping[EntityId, Attributes]:
    return MappingProxyType({})


def _empty_unique() -> Mapping[tuple[str, ValueKey], EntityId]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class GraphSnapshot:
    basis_t: int = 0
    entities: Mapping[EntityId, Attributes] = field(default_factory=_empty_entities, repr=False)
    unique_index: Mapping[tuple[str, ValueKey], EntityId] = field(
        default_factory=_empty_unique,
        repr=False,
    )
    next_id: int = 1

    @classmethod
    def empty(cls) -> GraphSnapshot:
        return cls()

    def __contains__(self, entity: object) -> bool:
        return entity in self.entities

    def __len__(self) -> int:
        return len(self.entities)

    def entity_ids(self) -> tuple[EntityId, ...]:
        return tuple(sorted(self.entities))

    def attributes(self, entity: EntityId) -> Attributes:
        return self.entities.get(entity, _EMPTY_ATTRIBUTES)  # type: ignore[return-value]

    def values(self, entity: EntityId, predicate: str) -> tuple[StoredValue, ...]:
        return self.attributes(entity).get(predicate, ())

    def value(self, entity: EntityId, predicate: str) -> StoredValue | None:
        values = self.values(entity, predicate)
        return values[0] if values else None

    def resolve_unique(self, predicate: str, value: StoredValue) -> EntityId | None:
        return self.unique_index.get((predicate, value_key(value)))

    def datoms(self) -> Iterator[tuple[EntityId, str, StoredValue]]:
        """Every ``(entity, predicate, value)`` triple, in entity order."""

        for entity in self.entity_ids():
            for predicate, values in self.entities[entity].items():
                for value in values:
                    yield entity, predicate, value
