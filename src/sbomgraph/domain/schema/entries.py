"""Storage metadata describing how a predicate is typed and stored."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class Cardinality(StrEnum):
    ONE = "one"
    MANY = "many"


class ValueType(StrEnum):
    STRING = "string"
    BOOLEAN = "boolean"
    LONG = "long"
    DOUBLE = "double"
    INSTANT = "instant"
    KEYWORD = "keyword"
    URI = "uri"
    REF = "ref"


class Uniqueness(StrEnum):
    NONE = "none"
    IDENTITY = "identity"


class SchemaField(StrEnum):
    """Metadata fields an entry may carry; each maps to one lookup rule."""

    CARDINALITY = "cardinality"
    VALUE_TYPE = "value_type"
    UNIQUE = "unique"


type SchemaValue = Cardinality | ValueType | Uniqueness


@dataclass(frozen=True, slots=True)
class SchemaEntry:
    """Metadata for one predicate; absent fields fall back to inference."""

    predicate: str
    cardinality: Cardinality | None = None
    value_type: ValueType | None = None
    unique: Uniqueness | None = None

    def __post_init__(self) -> None:
        if not self.predicate:
            raise ValueError("Schema entry requires a predicate identifier")

    def fields(self) -> Iterator[tuple[SchemaField, SchemaValue]]:
        """Yield ``(field, value)`` for every field present on the entry."""

        if self.cardinality is not None:
            yield SchemaField.CARDINALITY, self.cardinality
        if self.value_type is not None:
            yield SchemaField.VALUE_TYPE, self.value_type
        if self.unique is not None:
            yield SchemaField.UNIQUE, self.unique


BOOTSTRAP_SCHEMA: tuple[SchemaEntry, ...] = (
    SchemaEntry(
        "db/ident",
        cardinality=Cardinality.ONE,
        value_type=ValueType.KEYWORD,
        unique=Uniqueness.IDENTITY,
    ),
    SchemaEntry(
        "rdfa/uri",
        cardinality=Cardinality.ONE,
        value_type=ValueType.URI,
        unique=Uniqueness.IDENTITY,
    ),
    SchemaEntry("rdf/type", cardinality=Cardinality.MANY, value_type=ValueType.KEYWORD),
)
"""Rules every registry starts with; they are never uninstalled."""
