"""Error kinds raised across the ingestion pipeline.

Per-document errors (``ConversionFormatError``, ``MergeConflictError``) are caught
at the loader boundary and reported with context. Registry and corpus errors are
unrecoverable and abort the run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sbomgraph.domain.graph.statements import Statement


class SbomGraphError(Exception):
    """Base class for all sbomgraph domain errors."""


class RegistryStateError(SbomGraphError):
    """Raised when a schema installation conflicts with metadata already in place."""

    def __init__(self, message: str, *, predicate: str, field: str) -> None:
        super().__init__(message)
        self.predicate = predicate
        self.field = field


class ConversionFormatError(SbomGraphError):
    """Raised when a raw document cannot be turned into graph statements."""


class MergeConflictError(SbomGraphError):
    """Raised when statements violate the declared schema or identity constraints."""

    def __init__(self, message: str, *, statements: Sequence[Statement] = ()) -> None:
        super().__init__(message)
        self.statements = tuple(statements)


class SchemaSourceError(SbomGraphError):
    """Raised when ontology or schema records cannot be turned into schema entries."""


class CorpusLoadError(SbomGraphError):
    """Raised when the canonical license vocabulary cannot be loaded."""


class AcquisitionError(SbomGraphError):
    """Raised when a raw SBOM document cannot be fetched."""


class NetworkError(AcquisitionError):
    """Transport-level or unexpected HTTP failure while fetching a document."""


class AuthenticationError(AcquisitionError):
    """The credential was rejected or lacks permission for the requested source."""


class DocumentLoadError(SbomGraphError):
    """Per-document failure wrapped with the context that triggered it."""

    def __init__(
        self,
        document_id: str,
        cause: ConversionFormatError | MergeConflictError,
        *,
        statements: Sequence[Statement] = (),
        attempts: int = 1,
    ) -> None:
        super().__init__(f"Failed to load document {document_id!r}: {cause}")
        self.document_id = document_id
        self.cause = cause
        self.statements = tuple(statements)
        self.attempts = attempts
