"""Rewrite loose license strings in a parsed document to canonical identifiers.

The document is walked as a generic tree of mappings, sequences and scalars.
Only string values found under one of the target keys are touched; every other
value is copied through. Values the resolver passes through (corpus members,
compound expressions, sentinels and references) stay as they are.

Normalization is lossy and never fails: the chosen identifier replaces the
original string and the score is only kept on the ``LicenseRewrite`` record.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import singledispatch
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sbomgraph.domain.licensing import LicenseResolver

log = logging.getLogger(__name__)

DEFAULT_LICENSE_FIELDS = ("licenseConcluded",)
DEFAULT_LOW_CONFIDENCE_THRESHOLD = 0.85

type PathItem = str | int


@dataclass(frozen=True, slots=True)
class LicenseRewrite:
    """One replaced license string and where it was found."""

    path: tuple[PathItem, ...]
    original: str
    replacement: str
    score: float
    low_confidence: bool = False

    @property
    def location(self) -> str:
        return format_path(self.path)


@dataclass(frozen=True, slots=True)
class NormalizedDocument:
    document: Mapping[str, object]
    rewrites: tuple[LicenseRewrite, ...] = ()

    @property
    def low_confidence(self) -> tuple[LicenseRewrite, ...]:
        return tuple(rewrite for rewrite in self.rewrites if rewrite.low_confidence)


def format_path(path: Iterable[PathItem]) -> str:
    return "/" + "/".join(str(item) for item in path)


@dataclass(slots=True)
class _Walk:
    resolver: LicenseResolver
    fields: frozenset[str]
    threshold: float
    rewrites: list[LicenseRewrite] = field(default_factory=list[LicenseRewrite])

    def rewrite(self, value: str, path: tuple[PathItem, ...]) -> str:
        match = self.resolver.resolve(value)
        if match.passthrough or match.identifier is None or match.identifier == value:
            return value
        low_confidence = match.score < self.threshold
        if low_confidence:
            log.warning(
                "Low-confidence license match at %s: %r -> %r (score %.3f)",
                format_path(path),
                value,
                match.identifier,
                match.score,
            )
        else:
            log.debug(
                "License %r resolved to %r (score %.3f)", value, match.identifier, match.score
            )
        self.rewrites.append(
            LicenseRewrite(
                path=path,
                original=value,
                replacement=match.identifier,
                score=match.score,
                low_confidence=low_confidence,
            )
        )
        return match.identifier


def normalize_document(
    document: Mapping[str, object],
    resolver: LicenseResolver,
    *,
    fields: Iterable[str] = DEFAULT_LICENSE_FIELDS,
    low_confidence_threshold: float = DEFAULT_LOW_CONFIDENCE_THRESHOLD,
) -> NormalizedDocument:
    """Return a copy of ``document`` with license strings under ``fields`` resolved."""

    walk = _Walk(
        resolver=resolver,
        fields=frozenset(fields),
        threshold=low_confidence_threshold,
    )
    normalized = _visit(document, (), walk, False)
    return NormalizedDocument(
        document=normalized,  # type: ignore[arg-type]
        rewrites=tuple(walk.rewrites),
    )


@singledispatch
def _visit(node: object, _path: tuple[PathItem, ...], _walk: _Walk, _target: bool) -> object:
    return node


@_visit.register(Mapping)
def _(
    node: Mapping[str, object],
    path: tuple[PathItem, ...],
    walk: _Walk,
    _target: bool,
) -> object:
    return {
        key: _visit(value, (*path, key), walk, key in walk.fields)
        for key, value in node.items()
    }


@_visit.register(list)
@_visit.register(tuple)
def _(
    node: list[object] | tuple[object, ...],
    path: tuple[PathItem, ...],
    walk: _Walk,
    target: bool,
) -> object:
    return [_visit(item, (*path, index), walk, target) for index, item in enumerate(node)]


@_visit.register(str)
def _(node: str, path: tuple[PathItem, ...], walk: _Walk, target: bool) -> object:
    if not target:
        return node
    return walk.rewrite(node, path)
