from __future__ import annotations

import pytest

from sbomgraph.domain.errors import CorpusLoadError
from sbomgraph.domain.licensing import (
    LicenseCorpus,
    LicenseRecord,
    LicenseResolver,
    best_match,
    is_compound_expression,
    resolve_license,
)


def test_every_corpus_member_resolves_to_itself(corpus: LicenseCorpus) -> None:
    for identifier in corpus:
        match = resolve_license(identifier, corpus)

        assert match.identifier == identifier
        assert match.passthrough
        assert match.score == pytest.approx(1.0)


def test_best_match_of_a_versioned_member_is_itself(corpus: LicenseCorpus) -> None:
    for identifier in ("Apache-2.0", "GPL-2.0-only", "GPL-3.0-only", "BSD-3-Clause"):
        assert best_match(identifier, corpus).identifier == identifier


@pytest.mark.parametrize(
    "expression",
    [
        "GPL-2.0-only WITH Classpath-exception-2.0",
        "MIT OR Apache-2.0",
        "(MIT AND BSD-3-Clause)",
        "NOASSERTION",
        "NONE",
        "LicenseRef-custom",
        "DocumentRef-other:LicenseRef-custom",
    ],
)
def test_valid_expressions_pass_through(corpus: LicenseCorpus, expression: str) -> None:
    match = resolve_license(expression, corpus)

    assert match.passthrough
    assert match.identifier == expression


def test_compound_detection_requires_spaced_operators() -> None:
    assert is_compound_expression("MIT AND Apache-2.0")
    assert not is_compound_expression("MITANDApache")
    assert not is_compound_expression("MIT License")


def test_free_text_resolves_to_closest_identifier(corpus: LicenseCorpus) -> None:
    match = resolve_license("MIT License", corpus)

    assert match.identifier == "MIT"
    assert not match.passthrough
    assert 0.0 < match.score < 1.0


def test_versioned_free_text_prefers_matching_version(corpus: LicenseCorpus) -> None:
    assert resolve_license("GPL 3.0", corpus).identifier == "GPL-3.0-only"
    assert resolve_license("GPL v2.0 only", corpus).identifier == "GPL-2.0-only"


def test_ties_go_to_the_smallest_identifier() -> None:
    corpus = LicenseCorpus.of("LIC-2", "LIC-1")

    match = best_match("LIC", corpus)

    assert match.identifier == "LIC-1"


def test_empty_corpus_yields_no_identifier() -> None:
    match = resolve_license("MIT License", LicenseCorpus())

    assert match.identifier is None
    assert match.score == 0.0


def test_duplicate_identifiers_are_rejected() -> None:
    with pytest.raises(CorpusLoadError):
        LicenseCorpus.from_records([LicenseRecord("MIT"), LicenseRecord("MIT")])


def test_resolver_memoizes_results(corpus: LicenseCorpus) -> None:
    resolver = LicenseResolver(corpus)

    first = resolver.resolve("MIT License")
    second = resolver("MIT License")

    assert first is second
    assert resolver.is_passthrough("MIT")
    assert not resolver.is_passthrough("MIT License")
