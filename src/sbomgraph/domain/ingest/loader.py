"""Fold an ordered document sequence into one graph snapshot.

Each document is decoded, converted and merged against the snapshot produced
by the previous successful document. A document that fails any of those steps is
isolated: its error is wrapped with the document id and statements, the error
policy decides what happens next, and the last good snapshot is kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, NamedTuple

from sbomgraph.domain.errors import (
    ConversionFormatError,
    DocumentLoadError,
    MergeConflictError,
    SbomGraphError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from sbomgraph.domain.graph.snapshot import GraphSnapshot
    from sbomgraph.domain.graph.statements import Statement
    from sbomgraph.domain.ports import GraphMerger, StatementConverter

log = logging.getLogger(__name__)


class ErrorAction(StrEnum):
    SKIP = "skip"
    RETRY = "retry"
    ABORT = "abort"


type ErrorPolicy = Callable[[DocumentLoadError], ErrorAction]


def skip_failures(_error: DocumentLoadError) -> ErrorAction:
    return ErrorAction.SKIP


def retry_failures(_error: DocumentLoadError) -> ErrorAction:
    return ErrorAction.RETRY


def abort_on_failure(_error: DocumentLoadError) -> ErrorAction:
    return ErrorAction.ABORT


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """A document and the id it is reported under.

    ``payload`` is either a parsed mapping or the raw bytes as fetched.
    """

    document_id: str
    payload: Mapping[str, object] | bytes


type DocumentPreparer = Callable[[SourceDocument], Mapping[str, object]]


def parsed_payload(document: SourceDocument) -> Mapping[str, object]:
    """Default preparer: accept parsed payloads only."""

    if isinstance(document.payload, bytes):
        raise ConversionFormatError(f"Document {document.document_id!r} was not decoded")
    return document.payload


class LoadFailure(NamedTuple):
    document_id: str
    error: DocumentLoadError


@dataclass(frozen=True, slots=True)
class LoadResult:
    snapshot: GraphSnapshot
    failures: tuple[LoadFailure, ...] = ()
    merged: tuple[str, ...] = ()


class LoadAborted(SbomGraphError):
    """Raised when the error policy aborts the fold; carries the partial result."""

    def __init__(self, result: LoadResult, error: DocumentLoadError) -> None:
        super().__init__(f"Load aborted at document {error.document_id!r}: {error.cause}")
        self.result = result
        self.error = error


class TransactionalGraphLoader:
    def __init__(
        self,
        converter: StatementConverter,
        store: GraphMerger,
        *,
        on_error: ErrorPolicy = skip_failures,
        max_attempts: int = 1,
        prepare: DocumentPreparer = parsed_payload,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._converter = converter
        self._store = store
        self._on_error = on_error
        self._max_attempts = max_attempts
        self._prepare = prepare

    def load(self, snapshot: GraphSnapshot, documents: Iterable[SourceDocument]) -> LoadResult:
        """Merge ``documents`` in order, starting from ``snapshot``.

        ``prepare`` runs inside the same boundary as conversion, so a document
        that cannot be decoded is a failure like any other. Only
        ``ConversionFormatError`` and ``MergeConflictError`` are handled per
        document; anything else propagates and ends the run.
        """

        current = snapshot
        failures: list[LoadFailure] = []
        merged: list[str] = []

        for document in documents:
            attempt = 0
            payload: Mapping[str, object] | None = None
            while True:
                attempt += 1
                statements: tuple[Statement, ...] = ()
                try:
                    if payload is None:
                        payload = self._prepare(document)
                    statements = self._converter.convert(payload)
                    report = self._store.merge(current, statements)
                except (ConversionFormatError, MergeConflictError) as exc:
                    error = DocumentLoadError(
                        document.document_id,
                        exc,
                        statements=statements,
                        attempts=attempt,
                    )
                    action = self._on_error(error)
                    if action is ErrorAction.RETRY and attempt < self._max_attempts:
                        log.info(
                            "Retrying document %s (attempt %s of %s)",
                            document.document_id,
                            attempt + 1,
                            self._max_attempts,
                        )
                        continue
                    failures.append(LoadFailure(document.document_id, error))
                    if action is ErrorAction.ABORT:
                        partial = LoadResult(
                            snapshot=current,
                            failures=tuple(failures),
                            merged=tuple(merged),
                        )
                        raise LoadAborted(partial, error) from exc
                    log.warning("Skipping document %s: %s", document.document_id, exc)
                    break

                current = report.db_after
                merged.append(document.document_id)
                log.debug(
                    "Merged document %s (%s statements, t=%s)",
                    document.document_id,
                    len(statements),
                    current.basis_t,
                )
                break

        return LoadResult(snapshot=current, failures=tuple(failures), merged=tuple(merged))
