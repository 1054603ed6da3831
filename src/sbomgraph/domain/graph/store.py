"""Merge statements into a snapshot, producing its successor.

``GraphStore.merge`` works like a speculative transaction: it validates and
applies one batch of statements against ``snapshot`` and returns a report holding
both the untouched input and the new snapshot. Nothing is ever written back.

Resolution order within one merge:

1. every value is checked against the predicate's declared type
2. temporary ids are resolved; temp ids that assert the same identity-unique
   value are one entity, and an identity value already in the snapshot makes the
   temp id upsert onto that entity
3. statements are applied in order; a cardinality-one predicate may receive only
   one distinct value per entity per merge, and an identity value may be owned by
   only one entity
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING

from sbomgraph.domain.errors import MergeConflictError
from sbomgraph.domain.schema import ValueType

from .snapshot import GraphSnapshot, value_key
from .statements import EntityId, LookupRef, TempId, is_reference

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from sbomgraph.domain.schema import SchemaRegistry

    from .snapshot import Attributes, ValueKey
    from .statements import Reference, Statement, StoredValue, Value

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransactionReport:
    """Outcome of one merge: the snapshot before, after, and temp id bindings."""

    db_before: GraphSnapshot
    db_after: GraphSnapshot
    tempids: Mapping[str, EntityId] = field(default_factory=lambda: MappingProxyType({}))
    statements: tuple[Statement, ...] = ()


class GraphStore:
    """Schema-aware merge of statement batches into immutable snapshots."""

    def __init__(self, registry: SchemaRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    def merge(self, snapshot: GraphSnapshot, statements: Iterable[Statement]) -> TransactionReport:
        """Apply ``statements`` to ``snapshot``.

        Raises ``MergeConflictError`` carrying the offending statements when a
        value has the wrong type, a reference cannot be resolved, or a
        cardinality or uniqueness constraint is violated. ``snapshot`` is left
        untouched either way.
        """

        transaction = _Transaction(snapshot, self._registry, tuple(statements))
        report = transaction.run()
        log.debug(
            "Merged %s statements at t=%s (%s new entities)",
            len(report.statements),
            report.db_after.basis_t,
            report.db_after.next_id - snapshot.next_id,
        )
        return report


def value_matches(value_type: ValueType, value: Value) -> bool:
    """Whether ``value`` is acceptable for a predicate declared as ``value_type``."""

    if value_type is ValueType.REF:
        return is_reference(value)
    if is_reference(value):
        return False
    match value_type:
        case ValueType.STRING | ValueType.KEYWORD | ValueType.URI:
            return isinstance(value, str)
        case ValueType.BOOLEAN:
            return isinstance(value, bool)
        case ValueType.LONG:
            return isinstance(value, int) and not isinstance(value, bool)
        case ValueType.DOUBLE:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        case ValueType.INSTANT:
            return isinstance(value, datetime)
        case ValueType.REF:
            return False


class _Transaction:
    def __init__(
        self,
        snapshot: GraphSnapshot,
        registry: SchemaRegistry,
        statements: tuple[Statement, ...],
    ) -> None:
        self._snapshot = snapshot
        self._registry = registry
        self._statements = statements
        self._next_id = snapshot.next_id
        self._tempids: dict[str, EntityId] = {}
        self._entities: dict[EntityId, Attributes] = dict(snapshot.entities)
        self._touched: dict[EntityId, dict[str, tuple[StoredValue, ...]]] = {}
        self._unique: dict[tuple[str, ValueKey], EntityId] = dict(snapshot.unique_index)
        self._asserted: dict[tuple[EntityId, str], tuple[StoredValue, Statement]] = {}

    def run(self) -> TransactionReport:
        for statement in self._statements:
            self._check_value_type(statement)
        self._resolve_tempids()
        for statement in self._statements:
            self._apply(statement)

        for entity, attributes in self._touched.items():
            self._entities[entity] = MappingProxyType(attributes)
        db_after = GraphSnapshot(
            basis_t=self._snapshot.basis_t + 1,
            entities=MappingProxyType(self._entities),
            unique_index=MappingProxyType(self._unique),
            next_id=self._next_id,
        )
        return TransactionReport(
            db_before=self._snapshot,
            db_after=db_after,
            tempids=MappingProxyType(dict(self._tempids)),
            statements=self._statements,
        )

    # Validation ----------------------------------------------------------------

    def _check_value_type(self, statement: Statement) -> None:
        if not statement.predicate:
            raise MergeConflictError(
                f"Statement without predicate: {statement}",
                statements=(statement,),
            )
        declared = self._registry.value_type(statement.predicate)
        if declared is None or value_matches(declared, statement.value):
            return
        raise MergeConflictError(
            f"Value {statement.value!r} does not match type {declared} of {statement.predicate}",
            statements=(statement,),
        )

    # Temp id resolution --------------------------------------------------------

    def _resolve_tempids(self) -> None:
        labels: dict[str, None] = {}
        subjects: set[str] = set()
        for statement in self._statements:
            if isinstance(statement.subject, TempId):
                labels.setdefault(statement.subject.label)
                subjects.add(statement.subject.label)
            if isinstance(statement.value, TempId):
                labels.setdefault(statement.value.label)

        for label in labels:
            if label not in subjects:
                offending = tuple(
                    statement
                    for statement in self._statements
                    if isinstance(statement.value, TempId) and statement.value.label == label
                )
                raise MergeConflictError(
                    f"Temporary id {label!r} is referenced but never asserted",
                    statements=offending,
                )

        parent: dict[str, str] = {label: label for label in labels}

        def find(label: str) -> str:
            while parent[label] != label:
                parent[label] = parent[parent[label]]
                label = parent[label]
            return label

        claims: dict[tuple[str, ValueKey], tuple[str, Statement]] = {}
        for statement in self._statements:
            subject = statement.subject
            if not isinstance(subject, TempId) or is_reference(statement.value):
                continue
            if not self._registry.is_identity(statement.predicate):
                continue
            key = (statement.predicate, value_key(statement.value))  # type: ignore[arg-type]
            previous = claims.get(key)
            if previous is None:
                claims[key] = (subject.label, statement)
            else:
                parent[find(subject.label)] = find(previous[0])

        resolved: dict[str, tuple[EntityId, Statement]] = {}
        for key, (label, statement) in claims.items():
            existing = self._snapshot.unique_index.get(key)
            if existing is None:
                continue
            root = find(label)
            bound = resolved.get(root)
            if bound is not None and bound[0] != existing:
                raise MergeConflictError(
                    f"Temporary id {label!r} resolves to both entity {bound[0]} and {existing}",
                    statements=(bound[1], statement),
                )
            resolved[root] = (existing, statement)

        allocated: dict[str, EntityId] = {}
        for label in labels:
            root = find(label)
            if root in resolved:
                self._tempids[label] = resolved[root][0]
                continue
            entity = allocated.get(root)
            if entity is None:
                entity = EntityId(self._next_id)
                self._next_id += 1
                allocated[root] = entity
            self._tempids[label] = entity

    def _resolve(self, reference: Reference, statement: Statement) -> EntityId:
        match reference:
            case TempId(label=label):
                return self._tempids[label]
            case EntityId(value=number):
                if reference in self._snapshot or self._snapshot.next_id <= number < self._next_id:
                    return reference
                raise MergeConflictError(f"Unknown entity {reference}", statements=(statement,))
            case LookupRef(predicate=predicate, value=value):
                if not self._registry.is_identity(predicate):
                    raise MergeConflictError(
                        f"Lookup ref {reference} does not use an identity predicate",
                        statements=(statement,),
                    )
                entity = self._snapshot.resolve_unique(predicate, value)
                if entity is None:
                    raise MergeConflictError(
                        f"Lookup ref {reference} matches no entity", statements=(statement,)
                    )
                return entity

    # Application ---------------------------------------------------------------

    def _attributes(self, entity: EntityId) -> dict[str, tuple[StoredValue, ...]]:
        attributes = self._touched.get(entity)
        if attributes is None:
            attributes = dict(self._snapshot.attributes(entity))
            self._touched[entity] = attributes
        return attributes

    def _apply(self, statement: Statement) -> None:
        entity = self._resolve(statement.subject, statement)
        value: StoredValue
        if is_reference(statement.value):
            value = self._resolve(statement.value, statement)  # type: ignore[arg-type]
        else:
            value = statement.value  # type: ignore[assignment]
        predicate = statement.predicate
        identity = self._registry.is_identity(predicate)
        attributes = self._attributes(entity)

        if self._registry.is_many(predicate):
            current = attributes.get(predicate, ())
            if value_key(value) not in {value_key(item) for item in current}:
                attributes[predicate] = (*current, value)
        else:
            prior = self._asserted.get((entity, predicate))
            if prior is not None:
                if value_key(prior[0]) != value_key(value):
                    raise MergeConflictError(
                        f"Conflicting values for cardinality-one {predicate} on entity {entity}",
                        statements=(prior[1], statement),
                    )
                return
            self._asserted[(entity, predicate)] = (value, statement)
            if identity:
                for old in attributes.get(predicate, ()):
                    if value_key(old) == value_key(value):
                        continue
                    old_key = (predicate, value_key(old))
                    if self._unique.get(old_key) == entity:
                        del self._unique[old_key]
            attributes[predicate] = (value,)

        if identity:
            owner = self._unique.get((predicate, value_key(value)))
            if owner is not None and owner != entity:
                raise MergeConflictError(
                    f"{predicate} {value!r} already belongs to entity {owner}",
                    statements=(statement,),
                )
            self._unique[(predicate, value_key(value))] = entity
