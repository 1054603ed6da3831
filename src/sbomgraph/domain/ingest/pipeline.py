"""Run one ingestion: schema install, corpus bootstrap, normalize, fold.

The schema is installed for exactly the duration of ``IngestPipeline.run`` and
released on every exit path, aborts and interrupts included.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, NamedTuple

from sbomgraph.domain.errors import (
    ConversionFormatError,
    CorpusLoadError,
    MergeConflictError,
    SbomGraphError,
)
from sbomgraph.domain.graph.snapshot import GraphSnapshot

from .loader import TransactionalGraphLoader, skip_failures
from .normalization import (
    DEFAULT_LICENSE_FIELDS,
    DEFAULT_LOW_CONFIDENCE_THRESHOLD,
    normalize_document,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from sbomgraph.domain.graph.statements import Statement
    from sbomgraph.domain.licensing import LicenseResolver
    from sbomgraph.domain.ports import GraphMerger, StatementConverter
    from sbomgraph.domain.schema import SchemaEntry, SchemaRegistry

    from .loader import ErrorPolicy, LoadFailure, SourceDocument
    from .normalization import LicenseRewrite

log = logging.getLogger(__name__)


class UnavailableSource(NamedTuple):
    """A source that could not be fetched or read, so it never reached the loader."""

    document_id: str
    error: SbomGraphError


@dataclass(frozen=True, slots=True)
class PipelineResult:
    snapshot: GraphSnapshot
    failures: tuple[LoadFailure, ...] = ()
    rewrites: Mapping[str, tuple[LicenseRewrite, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    merged: tuple[str, ...] = ()
    unavailable: tuple[UnavailableSource, ...] = ()

    @property
    def low_confidence_rewrites(self) -> tuple[LicenseRewrite, ...]:
        return tuple(
            rewrite
            for rewrites in self.rewrites.values()
            for rewrite in rewrites
            if rewrite.low_confidence
        )


@dataclass(slots=True, kw_only=True)
class IngestPipeline:
    """Wires registry, resolver, converter and store for one run."""

    registry: SchemaRegistry
    schema: tuple[SchemaEntry, ...]
    resolver: LicenseResolver
    converter: StatementConverter
    store: GraphMerger
    bootstrap: tuple[Statement, ...] = ()
    license_fields: tuple[str, ...] = DEFAULT_LICENSE_FIELDS
    low_confidence_threshold: float = DEFAULT_LOW_CONFIDENCE_THRESHOLD
    on_error: ErrorPolicy = skip_failures
    max_attempts: int = 1
    decoder: Callable[[bytes], Mapping[str, object]] | None = None

    def run(
        self,
        documents: Iterable[SourceDocument],
        *,
        snapshot: GraphSnapshot | None = None,
    ) -> PipelineResult:
        """Fold ``documents`` into ``snapshot`` (an empty graph by default).

        Raw payloads go through ``decoder`` inside the loader's error boundary;
        rewrites for a document id that appears more than once accumulate.
        """

        rewrites: dict[str, tuple[LicenseRewrite, ...]] = {}
        with self.registry.install(self.schema):
            initial = self._bootstrap(snapshot or GraphSnapshot.empty())
            loader = TransactionalGraphLoader(
                self.converter,
                self.store,
                on_error=self.on_error,
                max_attempts=self.max_attempts,
                prepare=lambda document: self._prepare(document, rewrites),
            )
            result = loader.load(initial, documents)

        log.info(
            "Ingested %s documents (%s failed), %s license strings rewritten",
            len(result.merged),
            len(result.failures),
            sum(len(items) for items in rewrites.values()),
        )
        return PipelineResult(
            snapshot=result.snapshot,
            failures=result.failures,
            rewrites=MappingProxyType(rewrites),
            merged=result.merged,
        )

    def _bootstrap(self, snapshot: GraphSnapshot) -> GraphSnapshot:
        if not self.bootstrap:
            return snapshot
        try:
            report = self.store.merge(snapshot, self.bootstrap)
        except MergeConflictError as exc:
            raise CorpusLoadError(f"License corpus could not be merged: {exc}") from exc
        log.debug("Bootstrapped %s corpus statements", len(self.bootstrap))
        return report.db_after

    def _prepare(
        self,
        document: SourceDocument,
        rewrites: dict[str, tuple[LicenseRewrite, ...]],
    ) -> Mapping[str, object]:
        payload = document.payload
        if isinstance(payload, bytes):
            if self.decoder is None:
                msg = f"No decoder for raw document {document.document_id!r}"
                raise ConversionFormatError(msg)
            payload = self.decoder(payload)
        normalized = normalize_document(
            payload,
            self.resolver,
            fields=self.license_fields,
            low_confidence_threshold=self.low_confidence_threshold,
        )
        rewrites[document.document_id] = (
            rewrites.get(document.document_id, ()) + normalized.rewrites
        )
        return normalized.document
