"""License vocabulary, similarity scoring and best-match resolution."""

from __future__ import annotations

from .corpus import ExceptionRecord, LicenseCorpus, LicenseRecord
from .normalize import normalize_identifier
from .resolve import (
    SPDX_SENTINELS,
    LicenseMatch,
    LicenseResolver,
    best_match,
    is_compound_expression,
    is_passthrough,
    resolve_license,
)
from .similarity import DEFAULT_DAMPENING_WEIGHT, base_similarity, license_similarity, version_token

__all__ = [
    "DEFAULT_DAMPENING_WEIGHT",
    "SPDX_SENTINELS",
    "ExceptionRecord",
    "LicenseCorpus",
    "LicenseMatch",
    "LicenseRecord",
    "LicenseResolver",
    "base_similarity",
    "best_match",
    "is_compound_expression",
    "is_passthrough",
    "license_similarity",
    "normalize_identifier",
    "resolve_license",
    "version_token",
]
