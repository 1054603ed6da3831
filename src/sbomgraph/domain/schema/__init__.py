"""Predicate storage metadata and the registry that serves it."""

from __future__ import annotations

from .entries import (
    BOOTSTRAP_SCHEMA,
    Cardinality,
    SchemaEntry,
    SchemaField,
    Uniqueness,
    ValueType,
)
from .ontology import (
    entries_from_ontology,
    entries_from_records,
    load_ontology_entries,
    predicate_ident,
)
from .registry import SchemaInstallation, SchemaRegistry
from .spdx import SPDX_SCHEMA

__all__ = [
    "BOOTSTRAP_SCHEMA",
    "SPDX_SCHEMA",
    "Cardinality",
    "SchemaEntry",
    "SchemaField",
    "SchemaInstallation",
    "SchemaRegistry",
    "Uniqueness",
    "ValueType",
    "entries_from_ontology",
    "entries_from_records",
    "load_ontology_entries",
    "predicate_ident",
]
