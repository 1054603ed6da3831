"""Graph statements: ``(subject, predicate, value)`` assertions.

Subjects are one of

- ``TempId``: a transaction-local label, resolved at merge time by identity
  upsert or by allocating a fresh entity
- ``EntityId``: an entity already present in a snapshot
- ``LookupRef``: ``(identity predicate, value)`` resolved against the snapshot

Values are scalars or any of the three reference kinds.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping


@dataclass(frozen=True, slots=True)
class TempId:
    label: str

    def __str__(self) -> str:
        return f"#{self.label}"


@dataclass(frozen=True, slots=True, order=True)
class EntityId:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class LookupRef:
    predicate: str
    value: Scalar

    def __str__(self) -> str:
        return f"[{self.predicate} {self.value!r}]"


type Scalar = str | bool | int | float | datetime
type Reference = TempId | EntityId | LookupRef
type Value = Scalar | Reference
type StoredValue = Scalar | EntityId
"""A value after merge: references are resolved to entity ids."""

REFERENCE_TYPES = (TempId, EntityId, LookupRef)


def is_reference(value: object) -> bool:
    return isinstance(value, REFERENCE_TYPES)


@dataclass(frozen=True, slots=True)
class Statement:
    """One assertion to merge into the graph."""

    subject: Reference
    predicate: str
    value: Value

    def __str__(self) -> str:
        return f"({self.subject} {self.predicate} {self.value!r})"


def entity_statements(
    subject: Reference,
    attributes: Mapping[str, Value | Iterable[Value] | None],
) -> Iterator[Statement]:
    """Expand an attribute mapping into statements, skipping ``None`` values.

    Tuples and lists yield one statement per item; strings are scalars.
    """

    for predicate, value in attributes.items():
        if value is None:
            continue
        if isinstance(value, (tuple, list)):
            for item in value:
                yield Statement(subject, predicate, item)
        else:
            yield Statement(subject, predicate, value)
