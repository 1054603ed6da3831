"""Mutable lookup from predicate identifier to storage metadata.

The registry is shared by statement conversion and the graph store for the
duration of one pipeline run. Rules are layered:

- bootstrap rules passed to the constructor, never removed
- installed rules, reference counted so nested or repeated installs of the same
  metadata are safe and ``uninstall`` only removes what ``install`` added

``install`` is all-or-nothing: a conflicting rule aborts the call and leaves the
registry exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Literal

from sbomgraph.domain.errors import RegistryStateError

from .entries import (
    BOOTSTRAP_SCHEMA,
    Cardinality,
    SchemaEntry,
    SchemaField,
    Uniqueness,
    ValueType,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from types import TracebackType

    from .entries import SchemaValue

type RuleKey = tuple[SchemaField, str]

log = logging.getLogger(__name__)


@dataclass(slots=True)
class _InstalledRule:
    value: SchemaValue
    refcount: int = 1


class SchemaRegistry:
    """Predicate metadata consulted by conversion and merge."""

    def __init__(self, bootstrap: Iterable[SchemaEntry] = BOOTSTRAP_SCHEMA) -> None:
        self._bootstrap: dict[RuleKey, SchemaValue] = {}
        for entry in bootstrap:
            for schema_field, value in entry.fields():
                self._bootstrap[(schema_field, entry.predicate)] = value
        self._installed: dict[RuleKey, _InstalledRule] = {}

    # Lifecycle -----------------------------------------------------------------

    def install(self, entries: Iterable[SchemaEntry]) -> SchemaInstallation:
        """Register a rule for every field present on ``entries``.

        Raises ``RegistryStateError`` when a predicate already carries a different
        value for the same field; nothing from this call is kept in that case.
        """

        materialized = tuple(entries)
        applied: list[RuleKey] = []
        try:
            for entry in materialized:
                for schema_field, value in entry.fields():
                    key = (schema_field, entry.predicate)
                    if self._acquire(key, value):
                        applied.append(key)
        except RegistryStateError:
            for key in reversed(applied):
                self._release(key)
            raise

        log.debug("Installed %s schema rules for %s entries", len(applied), len(materialized))
        return SchemaInstallation(registry=self, entries=materialized)

    def uninstall(self, entries: Iterable[SchemaEntry]) -> None:
        """Undo one ``install`` of ``entries``; unknown rules are ignored."""

        removed = 0
        for entry in entries:
            for schema_field, value in entry.fields():
                key = (schema_field, entry.predicate)
                rule = self._installed.get(key)
                if rule is None or rule.value != value:
                    continue
                if self._release(key):
                    removed += 1
        log.debug("Uninstalled %s schema rules", removed)

    def _acquire(self, key: RuleKey, value: SchemaValue) -> bool:
        schema_field, predicate = key
        existing = self._installed.get(key)
        if existing is not None:
            if existing.value != value:
                raise _conflict(predicate, schema_field, existing.value, value)
            existing.refcount += 1
            return True

        bootstrap_value = self._bootstrap.get(key)
        if bootstrap_value is not None:
            if bootstrap_value != value:
                raise _conflict(predicate, schema_field, bootstrap_value, value)
            return False

        self._installed[key] = _InstalledRule(value=value)
        return True

    def _release(self, key: RuleKey) -> bool:
        rule = self._installed[key]
        rule.refcount -= 1
        if rule.refcount > 0:
            return False
        del self._installed[key]
        return True

    # Lookups -------------------------------------------------------------------

    def _lookup(self, schema_field: SchemaField, predicate: str) -> SchemaValue | None:
        key = (schema_field, predicate)
        rule = self._installed.get(key)
        if rule is not None:
            return rule.value
        return self._bootstrap.get(key)

    def cardinality(self, predicate: str) -> Cardinality:
        value = self._lookup(SchemaField.CARDINALITY, predicate)
        return Cardinality(value) if value is not None else Cardinality.MANY

    def value_type(self, predicate: str) -> ValueType | None:
        value = self._lookup(SchemaField.VALUE_TYPE, predicate)
        return ValueType(value) if value is not None else None

    def uniqueness(self, predicate: str) -> Uniqueness:
        value = self._lookup(SchemaField.UNIQUE, predicate)
        return Uniqueness(value) if value is not None else Uniqueness.NONE

    def is_identity(self, predicate: str) -> bool:
        return self.uniqueness(predicate) is Uniqueness.IDENTITY

    def is_many(self, predicate: str) -> bool:
        return self.cardinality(predicate) is Cardinality.MANY

    def entry(self, predicate: str) -> SchemaEntry:
        """Effective metadata for ``predicate`` with defaults applied."""

        return SchemaEntry(
            predicate,
            cardinality=self.cardinality(predicate),
            value_type=self.value_type(predicate),
            unique=self.uniqueness(predicate),
        )

    def is_installed(self, predicate: str) -> bool:
        return any(key[1] == predicate for key in self._installed)

    def rules(self) -> Mapping[RuleKey, SchemaValue]:
        """Read-only copy of every effective rule."""

        merged: dict[RuleKey, SchemaValue] = dict(self._bootstrap)
        merged.update({key: rule.value for key, rule in self._installed.items()})
        return MappingProxyType(merged)


@dataclass(slots=True)
class SchemaInstallation:
    """Handle for one ``install`` call; releasing it uninstalls exactly once."""

    registry: SchemaRegistry
    entries: tuple[SchemaEntry, ...]
    _released: bool = False

    @property
    def active(self) -> bool:
        return not self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self.registry.uninstall(self.entries)

    def __enter__(self) -> SchemaInstallation:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self.release()
        return False


def _conflict(
    predicate: str,
    schema_field: SchemaField,
    current: SchemaValue,
    requested: SchemaValue,
) -> RegistryStateError:
    return RegistryStateError(
        f"Predicate {predicate!r} already has {schema_field}={current}, cannot install {requested}",
        predicate=predicate,
        field=str(schema_field),
    )
