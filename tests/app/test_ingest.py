from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from sbomgraph.app import GitHubRepository, LocalDocument, ingest_sboms
from sbomgraph.config import GitHubConfig, LicenseListConfig, LoaderConfig, ResolverConfig
from sbomgraph.config.http_resilience import ResilienceConfig
from sbomgraph.domain.errors import AcquisitionError, AuthenticationError, ConversionFormatError
from sbomgraph.domain.graph import dependencies, elements_with_license, license_ids_in_use, lookup
from sbomgraph.domain.ingest import LoadAborted
from tests.helpers.http import RecordingHandler, make_client_factory
from tests.helpers.spdx import SpdxPayload, minimal_document

if TYPE_CHECKING:
    from pathlib import Path

    from sbomgraph.domain.licensing import LicenseCorpus


@pytest.fixture
def app_path(data_dir: Path) -> LocalDocument:
    return LocalDocument(data_dir / "app_sbom.json")


@pytest.fixture
def lib_path(data_dir: Path) -> LocalDocument:
    return LocalDocument(data_dir / "lib_sbom.json")


def _write(path: Path, payload: SpdxPayload | str) -> LocalDocument:
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    return LocalDocument(path)


def test_github_repository_parse() -> None:
    assert GitHubRepository.parse("example/app") == GitHubRepository("example", "app")
    assert GitHubRepository.parse(" example/app ").document_id == "example/app"
    for value in ("example", "/app", "example/", "example/app/extra"):
        with pytest.raises(ValueError, match="OWNER/REPO"):
            GitHubRepository.parse(value)


def test_ingest_local_documents(
    corpus: LicenseCorpus, app_path: LocalDocument, lib_path: LocalDocument
) -> None:
    result = ingest_sboms([app_path, lib_path], corpus=corpus)

    assert result.merged == (app_path.document_id, lib_path.document_id)
    assert result.failures == ()
    assert result.unavailable == ()

    snapshot = result.snapshot
    edges = {(edge.package_name, edge.name, edge.version) for edge in dependencies(snapshot)}
    assert edges == {
        ("com.github.example/app", "pypi:requests", "2.31.0"),
        ("com.github.example/app", "maven:org.example/classpath-lib", "1.0"),
        ("com.github.example/lib", "pypi:six", "1.16.0"),
    }
    assert license_ids_in_use(snapshot) == ("Apache-2.0", "GPL-2.0-only", "MIT")

    (rewrite,) = result.rewrites[app_path.document_id]
    assert rewrite.location == "/packages/0/licenseConcluded"
    assert rewrite.original == "MIT License"
    assert rewrite.replacement == "MIT"
    assert result.low_confidence_rewrites == (rewrite,)

    mit = lookup(snapshot, "spdx/licenseId", "MIT")
    assert mit is not None
    assert snapshot.value(mit, "spdx/isOsiApproved") is True
    licensed = {
        snapshot.value(entity, "spdx/name") for entity in elements_with_license(snapshot, "MIT")
    }
    assert licensed == {"com.github.example/app", "com.github.example/lib", "pypi:six"}


def test_ingest_onto_existing_snapshot_is_idempotent(
    corpus: LicenseCorpus, app_path: LocalDocument
) -> None:
    first = ingest_sboms([app_path], corpus=corpus)
    second = ingest_sboms([app_path], corpus=corpus, snapshot=first.snapshot)

    assert len(dependencies(second.snapshot)) == len(dependencies(first.snapshot)) == 2
    assert second.merged == (app_path.document_id,)


def test_unreadable_sources_are_reported(
    corpus: LicenseCorpus, tmp_path: Path, lib_path: LocalDocument
) -> None:
    missing = LocalDocument(tmp_path / "missing.json")

    result = ingest_sboms([missing, lib_path], corpus=corpus)

    assert result.merged == (lib_path.document_id,)
    (unavailable,) = result.unavailable
    assert unavailable.document_id == missing.document_id
    assert isinstance(unavailable.error, AcquisitionError)
    assert result.failures == ()


def test_undecodable_documents_are_load_failures(
    corpus: LicenseCorpus, tmp_path: Path, lib_path: LocalDocument
) -> None:
    garbled = _write(tmp_path / "garbled.json", "{not json")
    listed = _write(tmp_path / "listed.json", "[1, 2]")

    result = ingest_sboms([lib_path, garbled, listed], corpus=corpus)

    assert result.merged == (lib_path.document_id,)
    assert result.unavailable == ()
    assert [failure.document_id for failure in result.failures] == [
        garbled.document_id,
        listed.document_id,
    ]
    for failure in result.failures:
        assert isinstance(failure.error.cause, ConversionFormatError)
        assert failure.error.statements == ()


def test_invalid_documents_are_failures(
    corpus: LicenseCorpus, tmp_path: Path, lib_path: LocalDocument
) -> None:
    invalid = _write(tmp_path / "invalid.json", {"SPDXID": "SPDXRef-DOCUMENT"})

    result = ingest_sboms([invalid, lib_path], corpus=corpus)

    assert result.merged == (lib_path.document_id,)
    (failure,) = result.failures
    assert failure.document_id == invalid.document_id
    assert isinstance(failure.error.cause, ConversionFormatError)


def test_fail_fast_stops_on_unavailable_source(corpus: LicenseCorpus, tmp_path: Path) -> None:
    with pytest.raises(AcquisitionError):
        ingest_sboms([LocalDocument(tmp_path / "missing.json")], corpus=corpus, fail_fast=True)


def test_fail_fast_stops_on_invalid_document(
    corpus: LicenseCorpus, tmp_path: Path, lib_path: LocalDocument
) -> None:
    invalid = _write(tmp_path / "invalid.json", {"SPDXID": "SPDXRef-DOCUMENT"})

    with pytest.raises(LoadAborted) as excinfo:
        ingest_sboms([lib_path, invalid], corpus=corpus, fail_fast=True)

    assert excinfo.value.result.merged == (lib_path.document_id,)


def test_fail_fast_keeps_documents_merged_before_an_undecodable_one(
    corpus: LicenseCorpus, tmp_path: Path, app_path: LocalDocument, lib_path: LocalDocument
) -> None:
    garbled = _write(tmp_path / "garbled.json", "{not json")

    with pytest.raises(LoadAborted) as excinfo:
        ingest_sboms([app_path, lib_path, garbled], corpus=corpus, fail_fast=True)

    partial = excinfo.value.result
    assert partial.merged == (app_path.document_id, lib_path.document_id)
    assert excinfo.value.error.document_id == garbled.document_id
    assert isinstance(excinfo.value.error.cause, ConversionFormatError)
    assert len(dependencies(partial.snapshot)) == 3


def test_retries_do_not_hide_failures(corpus: LicenseCorpus, tmp_path: Path) -> None:
    invalid = _write(tmp_path / "invalid.json", {"SPDXID": "SPDXRef-DOCUMENT"})

    result = ingest_sboms([invalid], corpus=corpus, loader_config=LoaderConfig(max_attempts=3))

    (failure,) = result.failures
    assert failure.error.attempts == 3


def test_resolver_threshold_controls_low_confidence(
    corpus: LicenseCorpus, app_path: LocalDocument
) -> None:
    result = ingest_sboms(
        [app_path], corpus=corpus, resolver_config=ResolverConfig(low_confidence_threshold=0.5)
    )

    assert result.rewrites[app_path.document_id][0].replacement == "MIT"
    assert result.low_confidence_rewrites == ()


def test_ingest_github_and_local_sources_in_order(
    corpus: LicenseCorpus, lib_path: LocalDocument
) -> None:
    handler = RecordingHandler(
        {
            "/repos/example/app/dependency-graph/sbom": (
                200,
                {"sbom": minimal_document("app")},
            ),
        }
    )
    github = GitHubConfig(
        token="token",
        resilience=ResilienceConfig(
            name="github-test", base_url="https://github.example.com", cache=None
        ),
    )

    result = ingest_sboms(
        [GitHubRepository("example", "private"), lib_path, GitHubRepository("example", "app")],
        github_config=github,
        corpus=corpus,
        client_factory=make_client_factory(handler),
    )

    assert result.merged == (lib_path.document_id, "example/app")
    (unavailable,) = result.unavailable
    assert unavailable.document_id == "example/private"
    assert isinstance(unavailable.error, AuthenticationError)


def test_corpus_is_loaded_from_config(data_dir: Path, lib_path: LocalDocument) -> None:
    config = LicenseListConfig(
        licenses=str(data_dir / "licenses.json"),
        exceptions=str(data_dir / "exceptions.json"),
        resilience=ResilienceConfig(name="license-list-test", cache=None),
    )

    result = ingest_sboms([lib_path], license_config=config)

    assert lookup(result.snapshot, "spdx/licenseExceptionId", "LLVM-exception") is not None
    assert result.merged == (lib_path.document_id,)
