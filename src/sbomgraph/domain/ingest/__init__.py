"""Document normalization and the transactional fold into the graph."""

from __future__ import annotations

from .loader import (
    DocumentPreparer,
    ErrorAction,
    LoadAborted,
    LoadFailure,
    LoadResult,
    SourceDocument,
    TransactionalGraphLoader,
    abort_on_failure,
    parsed_payload,
    retry_failures,
    skip_failures,
)
from .normalization import LicenseRewrite, NormalizedDocument, normalize_document
from .pipeline import IngestPipeline, PipelineResult, UnavailableSource

__all__ = [
    "DocumentPreparer",
    "ErrorAction",
    "IngestPipeline",
    "LicenseRewrite",
    "LoadAborted",
    "LoadFailure",
    "LoadResult",
    "NormalizedDocument",
    "PipelineResult",
    "SourceDocument",
    "TransactionalGraphLoader",
    "UnavailableSource",
    "abort_on_failure",
    "normalize_document",
    "parsed_payload",
    "retry_failures",
    "skip_failures",
]
