"""Immutable graph snapshots, statement merge and read queries."""

from __future__ import annotations

from .query import (
    Dependency,
    dependencies,
    elements_with_license,
    entities_with,
    license_ids_in_use,
    lookup,
    pull,
    referrers,
)
from .snapshot import GraphSnapshot
from .statements import EntityId, LookupRef, Statement, TempId, entity_statements, is_reference
from .store import GraphStore, TransactionReport

__all__ = [
    "Dependency",
    "EntityId",
    "GraphSnapshot",
    "GraphStore",
    "LookupRef",
    "Statement",
    "TempId",
    "TransactionReport",
    "dependencies",
    "elements_with_license",
    "entities_with",
    "entity_statements",
    "is_reference",
    "license_ids_in_use",
    "lookup",
    "pull",
    "referrers",
]
