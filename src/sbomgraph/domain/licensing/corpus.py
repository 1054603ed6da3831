"""Canonical license vocabulary."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sbomgraph.domain.errors import CorpusLoadError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


@dataclass(frozen=True, slots=True)
class LicenseRecord:
    """One listed license as published in the license list."""

    license_id: str
    name: str | None = None
    reference: str | None = None
    is_osi_approved: bool | None = None
    is_deprecated: bool = False
    see_also: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ExceptionRecord:
    """One listed license exception (the right-hand side of ``WITH``)."""

    exception_id: str
    name: str | None = None
    reference: str | None = None
    is_deprecated: bool = False


@dataclass(frozen=True, slots=True)
class LicenseCorpus:
    """Immutable set of canonical license identifiers.

    Iteration yields identifiers in lexicographic order, which is the order the
    resolver scans and therefore its tie-break.
    """

    licenses: tuple[LicenseRecord, ...] = ()
    exceptions: tuple[ExceptionRecord, ...] = ()
    license_list_version: str | None = None
    _identifiers: tuple[str, ...] = field(init=False, repr=False)
    _identifier_set: frozenset[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        identifiers = [record.license_id for record in self.licenses]
        duplicates = sorted(item for item, count in Counter(identifiers).items() if count > 1)
        if duplicates:
            raise CorpusLoadError(f"Duplicate license identifiers: {', '.join(duplicates)}")
        exception_ids = [record.exception_id for record in self.exceptions]
        if len(set(exception_ids)) != len(exception_ids):
            raise CorpusLoadError("Duplicate license exception identifiers")
        object.__setattr__(self, "_identifiers", tuple(sorted(identifiers)))
        object.__setattr__(self, "_identifier_set", frozenset(identifiers))

    @classmethod
    def of(cls, *license_ids: str) -> LicenseCorpus:
        """Build a corpus from bare identifiers."""

        return cls(licenses=tuple(LicenseRecord(license_id=item) for item in license_ids))

    @classmethod
    def from_records(
        cls,
        licenses: Iterable[LicenseRecord],
        exceptions: Iterable[ExceptionRecord] = (),
        *,
        license_list_version: str | None = None,
    ) -> LicenseCorpus:
        return cls(
            licenses=tuple(licenses),
            exceptions=tuple(exceptions),
            license_list_version=license_list_version,
        )

    @property
    def identifiers(self) -> tuple[str, ...]:
        return self._identifiers

    @property
    def exception_ids(self) -> tuple[str, ...]:
        return tuple(sorted(record.exception_id for record in self.exceptions))

    def __contains__(self, item: object) -> bool:
        return item in self._identifier_set

    def __iter__(self) -> Iterator[str]:
        return iter(self._identifiers)

    def __len__(self) -> int:
        return len(self._identifiers)
