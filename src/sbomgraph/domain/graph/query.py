"""Read-only helpers over a ``GraphSnapshot``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .statements import EntityId

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sbomgraph.domain.schema import SchemaRegistry

    from .snapshot import GraphSnapshot
    from .statements import StoredValue

DEPENDS_ON = "spdx/relationshipType_dependsOn"
LICENSE_PREDICATES = ("spdx/licenseConcluded", "spdx/licenseDeclared")

_ANY = object()


@dataclass(frozen=True, slots=True)
class Dependency:
    """One ``package -> related element`` relationship edge."""

    package: EntityId
    package_name: str | None
    dependency: EntityId
    name: str | None
    version: str | None


def pull(
    snapshot: GraphSnapshot,
    entity: EntityId,
    registry: SchemaRegistry | None = None,
) -> dict[str, object]:
    """Attributes of ``entity`` as a plain dict, with ``db/id`` included.

    With a registry, cardinality-one predicates map to a single value; otherwise
    every predicate maps to a tuple.
    """

    result: dict[str, object] = {"db/id": entity}
    for predicate, values in snapshot.attributes(entity).items():
        if registry is not None and not registry.is_many(predicate) and len(values) == 1:
            result[predicate] = values[0]
        else:
            result[predicate] = values
    return result


def lookup(snapshot: GraphSnapshot, predicate: str, value: StoredValue) -> EntityId | None:
    """Entity owning an identity-unique ``(predicate, value)``."""

    return snapshot.resolve_unique(predicate, value)


def entities_with(
    snapshot: GraphSnapshot,
    predicate: str,
    value: object = _ANY,
) -> tuple[EntityId, ...]:
    """Entities asserting ``predicate``, optionally with a specific value."""

    return tuple(
        entity
        for entity in snapshot.entity_ids()
        if (values := snapshot.values(entity, predicate))
        and (value is _ANY or value in values)
    )


def referrers(
    snapshot: GraphSnapshot,
    target: EntityId,
    predicates: Iterable[str] | None = None,
) -> tuple[EntityId, ...]:
    """Entities holding a reference to ``target``."""

    wanted = frozenset(predicates) if predicates is not None else None
    found: list[EntityId] = []
    for entity in snapshot.entity_ids():
        for predicate, values in snapshot.attributes(entity).items():
            if wanted is not None and predicate not in wanted:
                continue
            if target in values:
                found.append(entity)
                break
    return tuple(found)


def dependencies(
    snapshot: GraphSnapshot,
    relationship_type: str = DEPENDS_ON,
) -> tuple[Dependency, ...]:
    """Every element related to another through ``relationship_type``."""

    edges: list[Dependency] = []
    for package in entities_with(snapshot, "spdx/relationship"):
        for relationship in snapshot.values(package, "spdx/relationship"):
            if not isinstance(relationship, EntityId):
                continue
            if snapshot.value(relationship, "spdx/relationshipType") != relationship_type:
                continue
            related = snapshot.value(relationship, "spdx/relatedSpdxElement")
            if not isinstance(related, EntityId):
                continue
            edges.append(
                Dependency(
                    package=package,
                    package_name=_string(snapshot.value(package, "spdx/name")),
                    dependency=related,
                    name=_string(snapshot.value(related, "spdx/name")),
                    version=_string(snapshot.value(related, "spdx/versionInfo")),
                )
            )
    return tuple(edges)


def license_closure(snapshot: GraphSnapshot, license_entity: EntityId) -> frozenset[EntityId]:
    """``license_entity`` plus every license set containing it, transitively."""

    closure = {license_entity}
    frontier = [license_entity]
    while frontier:
        current = frontier.pop()
        for container in referrers(snapshot, current, ("spdx/member",)):
            if container not in closure:
                closure.add(container)
                frontier.append(container)
    return frozenset(closure)


def elements_with_license(
    snapshot: GraphSnapshot,
    license_id: str,
    predicates: Iterable[str] = LICENSE_PREDICATES,
) -> tuple[EntityId, ...]:
    """Elements licensed under ``license_id`` directly or through license sets."""

    license_entity = lookup(snapshot, "spdx/licenseId", license_id)
    if license_entity is None:
        return ()
    closure = license_closure(snapshot, license_entity)
    wanted = tuple(predicates)
    return tuple(
        entity
        for entity in snapshot.entity_ids()
        if any(
            value in closure for predicate in wanted for value in snapshot.values(entity, predicate)
        )
    )


def license_ids_in_use(
    snapshot: GraphSnapshot,
    predicates: Iterable[str] = LICENSE_PREDICATES,
) -> tuple[str, ...]:
    """Sorted license identifiers referenced by any element, sets expanded."""

    wanted = tuple(predicates)
    pending: list[EntityId] = [
        value
        for _, predicate, value in snapshot.datoms()
        if predicate in wanted and isinstance(value, EntityId)
    ]
    seen: set[EntityId] = set()
    identifiers: set[str] = set()
    while pending:
        entity = pending.pop()
        if entity in seen:
            continue
        seen.add(entity)
        license_id = snapshot.value(entity, "spdx/licenseId")
        if isinstance(license_id, str):
            identifiers.add(license_id)
        pending.extend(
            member
            for member in snapshot.values(entity, "spdx/member")
            if isinstance(member, EntityId)
        )
    return tuple(sorted(identifiers))


def _string(value: StoredValue | None) -> str | None:
    return value if isinstance(value, str) else None
