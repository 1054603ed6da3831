from __future__ import annotations

import json
from collections.abc import Mapping

import pytest

from sbomgraph.domain.errors import ConversionFormatError, DocumentLoadError, MergeConflictError
from sbomgraph.domain.graph import GraphSnapshot, GraphStore, Statement, TempId
from sbomgraph.domain.ingest import (
    ErrorAction,
    LoadAborted,
    SourceDocument,
    TransactionalGraphLoader,
    abort_on_failure,
    retry_failures,
)
from sbomgraph.domain.ports import StatementConverter
from sbomgraph.domain.schema import SchemaRegistry


class FakeConverter:
    """Turns ``{"uri": ..., "name": ...}`` payloads into two statements."""

    def __init__(self, *, flaky: int = 0) -> None:
        self.calls: list[str] = []
        self._flaky = flaky

    def convert(self, document: Mapping[str, object]) -> tuple[Statement, ...]:
        uri = str(document.get("uri"))
        self.calls.append(uri)
        if document.get("broken"):
            raise ConversionFormatError(f"cannot convert {uri}")
        if self._flaky:
            self._flaky -= 1
            raise ConversionFormatError("transient")
        subject = TempId("element")
        statements = [Statement(subject, "rdfa/uri", uri)]
        for name in document.get("names", [document.get("name")]):  # type: ignore[union-attr]
            statements.append(Statement(subject, "spdx/name", str(name)))
        return tuple(statements)


def _doc(document_id: str, **payload: object) -> SourceDocument:
    payload = {"uri": f"urn:{document_id}", "name": document_id, **payload}
    return SourceDocument(document_id, payload)


@pytest.fixture
def store(spdx_registry: SchemaRegistry) -> GraphStore:
    return GraphStore(spdx_registry)


def test_fake_converter_satisfies_port() -> None:
    assert isinstance(FakeConverter(), StatementConverter)


def test_documents_merge_in_order(store: GraphStore) -> None:
    loader = TransactionalGraphLoader(FakeConverter(), store)

    result = loader.load(GraphSnapshot.empty(), [_doc("a"), _doc("b"), _doc("c")])

    assert result.merged == ("a", "b", "c")
    assert result.failures == ()
    assert result.snapshot.basis_t == 3
    assert len(result.snapshot) == 3


def test_failing_document_is_isolated(store: GraphStore) -> None:
    loader = TransactionalGraphLoader(FakeConverter(), store)

    result = loader.load(
        GraphSnapshot.empty(),
        [_doc("a"), _doc("b", names=["x", "y"]), _doc("c")],
    )

    assert result.merged == ("a", "c")
    assert [failure.document_id for failure in result.failures] == ["b"]
    error = result.failures[0].error
    assert isinstance(error, DocumentLoadError)
    assert isinstance(error.cause, MergeConflictError)
    assert error.statements
    assert result.snapshot.resolve_unique("rdfa/uri", "urn:b") is None
    assert result.snapshot.resolve_unique("rdfa/uri", "urn:c") is not None


def test_failed_document_leaves_the_snapshot_of_its_predecessor(store: GraphStore) -> None:
    first, second = _doc("a"), _doc("b", broken=True)
    expected = store.merge(
        GraphSnapshot.empty(), FakeConverter().convert(first.payload)  # type: ignore[arg-type]
    ).db_after

    result = TransactionalGraphLoader(FakeConverter(), store).load(
        GraphSnapshot.empty(), [first, second]
    )

    assert result.snapshot == expected
    assert len(result.failures) == 1
    assert result.failures[0].document_id == "b"
    assert result.merged == ("a",)


def test_raw_documents_are_rejected_without_a_preparer(store: GraphStore) -> None:
    loader = TransactionalGraphLoader(FakeConverter(), store)

    result = loader.load(GraphSnapshot.empty(), [SourceDocument("raw", b"{}"), _doc("b")])

    assert result.merged == ("b",)
    (failure,) = result.failures
    assert failure.document_id == "raw"
    assert isinstance(failure.error.cause, ConversionFormatError)


def test_preparer_failures_are_isolated_and_not_repeated_once_decoded(
    store: GraphStore,
) -> None:
    prepared: list[str] = []

    def decode(document: SourceDocument) -> Mapping[str, object]:
        prepared.append(document.document_id)
        if document.payload == b"garbage":
            raise ConversionFormatError("not JSON")
        return json.loads(document.payload)  # type: ignore[arg-type]

    converter = FakeConverter(flaky=1)
    loader = TransactionalGraphLoader(
        converter, store, on_error=retry_failures, max_attempts=2, prepare=decode
    )
    good = json.dumps({"uri": "urn:good", "name": "good"}).encode()

    result = loader.load(
        GraphSnapshot.empty(),
        [SourceDocument("bad", b"garbage"), SourceDocument("good", good)],
    )

    assert result.merged == ("good",)
    assert [failure.document_id for failure in result.failures] == ["bad"]
    assert result.failures[0].error.attempts == 2
    assert prepared == ["bad", "bad", "good"]
    assert converter.calls == ["urn:good", "urn:good"]


def test_conversion_errors_are_isolated(store: GraphStore) -> None:
    loader = TransactionalGraphLoader(FakeConverter(), store)

    result = loader.load(GraphSnapshot.empty(), [_doc("a", broken=True), _doc("b")])

    assert result.merged == ("b",)
    assert isinstance(result.failures[0].error.cause, ConversionFormatError)
    assert result.failures[0].error.statements == ()


def test_later_documents_see_earlier_merges(store: GraphStore) -> None:
    loader = TransactionalGraphLoader(FakeConverter(), store)

    result = loader.load(GraphSnapshot.empty(), [_doc("a"), _doc("a", name="renamed")])

    entity = result.snapshot.resolve_unique("rdfa/uri", "urn:a")
    assert entity is not None
    assert result.snapshot.value(entity, "spdx/name") == "renamed"
    assert len(result.snapshot) == 1


def test_abort_policy_raises_with_partial_result(store: GraphStore) -> None:
    loader = TransactionalGraphLoader(FakeConverter(), store, on_error=abort_on_failure)

    with pytest.raises(LoadAborted) as excinfo:
        loader.load(GraphSnapshot.empty(), [_doc("a"), _doc("b", broken=True), _doc("c")])

    partial = excinfo.value.result
    assert partial.merged == ("a",)
    assert [failure.document_id for failure in partial.failures] == ["b"]
    assert excinfo.value.error.document_id == "b"


def test_retry_policy_retries_up_to_max_attempts(store: GraphStore) -> None:
    converter = FakeConverter(flaky=1)
    loader = TransactionalGraphLoader(
        converter, store, on_error=retry_failures, max_attempts=3
    )

    result = loader.load(GraphSnapshot.empty(), [_doc("a")])

    assert result.merged == ("a",)
    assert converter.calls == ["urn:a", "urn:a"]


def test_retry_gives_up_after_max_attempts(store: GraphStore) -> None:
    converter = FakeConverter()
    seen: list[int] = []

    def policy(error: DocumentLoadError) -> ErrorAction:
        seen.append(error.attempts)
        return ErrorAction.RETRY

    loader = TransactionalGraphLoader(converter, store, on_error=policy, max_attempts=2)

    result = loader.load(GraphSnapshot.empty(), [_doc("a", broken=True), _doc("b")])

    assert seen == [1, 2]
    assert result.failures[0].error.attempts == 2
    assert result.merged == ("b",)


def test_max_attempts_must_be_positive(store: GraphStore) -> None:
    with pytest.raises(ValueError, match="max_attempts"):
        TransactionalGraphLoader(FakeConverter(), store, max_attempts=0)


def test_unexpected_errors_propagate(store: GraphStore) -> None:
    class ExplodingConverter:
        def convert(self, document: Mapping[str, object]) -> tuple[Statement, ...]:
            raise KeyError("unexpected")

    loader = TransactionalGraphLoader(ExplodingConverter(), store)

    with pytest.raises(KeyError):
        loader.load(GraphSnapshot.empty(), [_doc("a")])
