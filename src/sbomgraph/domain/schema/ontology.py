"""Derive schema entries from an ontology description.

Two record shapes are accepted:

- explicit entries: ``{"predicate": "spdx/name", "cardinality": "one", ...}``
- OWL restrictions: ``{"onProperty": "http://spdx.org/rdf/terms#name",
  "qualifiedCardinality": 1}`` (``owl:``-prefixed keys work too)

A restriction of exactly or at most one value on a property of the target
namespace yields a ``cardinality: one`` entry.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, cast

from sbomgraph.domain.errors import SchemaSourceError

from .entries import Cardinality, SchemaEntry, Uniqueness, ValueType

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

NAMESPACE_IRIS: dict[str, str] = {
    "http://spdx.org/rdf/terms#": "spdx",
    "http://www.w3.org/2000/01/rdf-schema#": "rdfs",
    "http://www.w3.org/1999/02/22-rdf-syntax-ns#": "rdf",
}

DEFAULT_EXCLUDED = frozenset({"spdx/member", "spdx/checksum"})

EXPLICIT_SPDX_ENTRIES: tuple[SchemaEntry, ...] = (
    SchemaEntry(
        "spdx/referenceLocator",
        cardinality=Cardinality.ONE,
        value_type=ValueType.STRING,
    ),
    SchemaEntry(
        "spdx/licenseId",
        cardinality=Cardinality.ONE,
        value_type=ValueType.STRING,
        unique=Uniqueness.IDENTITY,
    ),
    SchemaEntry(
        "spdx/licenseExceptionId",
        cardinality=Cardinality.ONE,
        value_type=ValueType.STRING,
        unique=Uniqueness.IDENTITY,
    ),
)


def predicate_ident(name: str) -> str:
    """Turn an IRI, CURIE or ``ns/name`` ident into the ``ns/name`` form."""

    for iri, prefix in NAMESPACE_IRIS.items():
        if name.startswith(iri):
            return f"{prefix}/{name[len(iri) :]}"
    if ":" in name and "/" not in name:
        prefix, local = name.split(":", 1)
        return f"{prefix}/{local}"
    return name


def entries_from_ontology(
    restrictions: Iterable[Mapping[str, object]],
    *,
    namespace: str = "spdx",
    excluded: frozenset[str] = DEFAULT_EXCLUDED,
    explicit: tuple[SchemaEntry, ...] = EXPLICIT_SPDX_ENTRIES,
) -> tuple[SchemaEntry, ...]:
    """Return ``explicit`` followed by one entry per single-valued property."""

    entries: list[SchemaEntry] = list(explicit)
    seen = {entry.predicate for entry in explicit}
    for restriction in restrictions:
        on_property = _get(restriction, "onProperty")
        if not isinstance(on_property, str):
            raise SchemaSourceError(f"Restriction without onProperty: {dict(restriction)!r}")
        predicate = predicate_ident(on_property)
        if not predicate.startswith(f"{namespace}/"):
            continue
        if predicate in excluded or predicate in seen:
            continue
        if not _is_single_valued(restriction):
            continue
        seen.add(predicate)
        entries.append(SchemaEntry(predicate, cardinality=Cardinality.ONE))
    return tuple(entries)


def entries_from_records(records: Iterable[Mapping[str, object]]) -> tuple[SchemaEntry, ...]:
    """Parse records of either accepted shape into schema entries."""

    materialized = list(records)
    if not materialized:
        return ()
    if all(_get(record, "onProperty") is not None for record in materialized):
        return entries_from_ontology(materialized)

    entries: list[SchemaEntry] = []
    for record in materialized:
        predicate = record.get("predicate")
        if not isinstance(predicate, str) or not predicate:
            raise SchemaSourceError(f"Schema record without predicate: {dict(record)!r}")
        try:
            entries.append(
                SchemaEntry(
                    predicate_ident(predicate),
                    cardinality=_enum_or_none(Cardinality, record.get("cardinality")),
                    value_type=_enum_or_none(ValueType, record.get("value_type")),
                    unique=_enum_or_none(Uniqueness, record.get("unique")),
                )
            )
        except ValueError as exc:
            raise SchemaSourceError(f"Invalid schema record {dict(record)!r}: {exc}") from exc
    return tuple(entries)


def _get(record: Mapping[str, object], key: str) -> object | None:
    value = record.get(key)
    if value is None:
        value = record.get(f"owl:{key}")
    return value


def _is_single_valued(restriction: Mapping[str, object]) -> bool:
    for key in ("qualifiedCardinality", "maxQualifiedCardinality"):
        value = _get(restriction, key)
        if value is None:
            continue
        try:
            if int(cast(int | str, value)) == 1:
                return True
        except (TypeError, ValueError) as exc:
            raise SchemaSourceError(f"Invalid {key} value: {value!r}") from exc
    return False


def _enum_or_none[TEnum: (Cardinality, ValueType, Uniqueness)](
    enum_type: type[TEnum],
    value: object,
) -> TEnum | None:
    if value is None:
        return None
    return enum_type(str(value))


def load_ontology_entries(path: Path | str) -> tuple[SchemaEntry, ...]:
    """Read a JSON array of schema records or OWL restrictions from ``path``."""

    source = Path(path)
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SchemaSourceError(f"Cannot read ontology file {source}: {exc}") from exc
    if not isinstance(payload, list):
        raise SchemaSourceError(f"Ontology file {source} must contain a JSON array")
    records: list[Mapping[str, object]] = []
    for item in cast(list[object], payload):
        if not isinstance(item, dict):
            raise SchemaSourceError(f"Ontology record is not an object: {item!r}")
        records.append(cast(dict[str, object], item))
    return entries_from_records(records)
