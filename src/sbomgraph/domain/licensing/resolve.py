"""Best-match resolution of free-text license strings against the corpus.

Resolution is a linear scan over the corpus; the corpus is small and fixed, so no
index is kept. Identifiers are scanned in lexicographic order and only a strictly
greater score replaces the current best, so ties go to the lexicographically
smallest identifier.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .similarity import DEFAULT_DAMPENING_WEIGHT, license_similarity

if TYPE_CHECKING:
    from .corpus import LicenseCorpus

_COMPOUND_OPERATOR = re.compile(r"\s+(AND|OR|WITH)\s+")

SPDX_SENTINELS = frozenset({"NOASSERTION", "NONE"})
REFERENCE_PREFIXES = ("LicenseRef-", "DocumentRef-")


@dataclass(frozen=True, slots=True)
class LicenseMatch:
    """Best canonical identifier for an expression and its score."""

    identifier: str | None
    score: float
    passthrough: bool = False


def is_compound_expression(expression: str) -> bool:
    """Whether ``expression`` combines licenses with ``AND``/``OR``/``WITH``."""

    return _COMPOUND_OPERATOR.search(expression) is not None


def is_passthrough(expression: str, corpus: LicenseCorpus) -> bool:
    """Whether ``expression`` is already valid and must not be rewritten."""

    return (
        expression in corpus
        or is_compound_expression(expression)
        or expression in SPDX_SENTINELS
        or expression.startswith(REFERENCE_PREFIXES)
    )


def best_match(
    expression: str,
    corpus: LicenseCorpus,
    *,
    weight: float = DEFAULT_DAMPENING_WEIGHT,
) -> LicenseMatch:
    """Scan the whole corpus and return the highest scoring identifier."""

    best_identifier: str | None = None
    best_score = 0.0
    for identifier in corpus:
        score = license_similarity(identifier, expression, weight=weight)
        if best_identifier is None or score > best_score:
            best_identifier = identifier
            best_score = score
    return LicenseMatch(identifier=best_identifier, score=best_score)


def resolve_license(
    expression: str,
    corpus: LicenseCorpus,
    *,
    weight: float = DEFAULT_DAMPENING_WEIGHT,
) -> LicenseMatch:
    """Return ``expression`` unchanged when valid, else its best corpus match."""

    if is_passthrough(expression, corpus):
        return LicenseMatch(identifier=expression, score=1.0, passthrough=True)
    return best_match(expression, corpus, weight=weight)


@dataclass(slots=True)
class LicenseResolver:
    """Corpus-bound resolver that memoizes results per expression."""

    corpus: LicenseCorpus
    weight: float = DEFAULT_DAMPENING_WEIGHT
    _cache: dict[str, LicenseMatch] = field(default_factory=dict[str, LicenseMatch], repr=False)

    def resolve(self, expression: str) -> LicenseMatch:
        cached = self._cache.get(expression)
        if cached is not None:
            return cached
        match = resolve_license(expression, self.corpus, weight=self.weight)
        self._cache[expression] = match
        return match

    def is_passthrough(self, expression: str) -> bool:
        return is_passthrough(expression, self.corpus)

    def __call__(self, expression: str) -> LicenseMatch:
        return self.resolve(expression)
