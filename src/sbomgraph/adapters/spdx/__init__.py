"""SPDX 2.x document conversion and license list loading."""

from __future__ import annotations

from .expression import (
    Conjunction,
    Disjunction,
    LicenseLeaf,
    WithException,
    license_identifiers,
    parse_license_expression,
)
from .license_list import load_license_corpus, load_license_corpus_async
from .translator import SpdxStatementConverter, corpus_statements, parse_raw_document

__all__ = [
    "Conjunction",
    "Disjunction",
    "LicenseLeaf",
    "SpdxStatementConverter",
    "WithException",
    "corpus_statements",
    "license_identifiers",
    "load_license_corpus",
    "load_license_corpus_async",
    "parse_license_expression",
    "parse_raw_document",
]
