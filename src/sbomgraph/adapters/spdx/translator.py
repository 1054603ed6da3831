"""Translate SPDX 2.x JSON documents and the license list into graph statements.

Elements (the document, packages, files, snippets) are identified by
``rdfa/uri = documentNamespace#SPDXID`` so ingesting the same document twice
upserts instead of duplicating. Listed licenses are identified by
``spdx/licenseId`` and exceptions by ``spdx/licenseExceptionId``, which makes
document licenses land on the corpus entities loaded at bootstrap. Checksums,
external refs, creation info and license sets have no identity of their own.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING, cast

from pydantic import ValidationError

from sbomgraph.domain.errors import ConversionFormatError
from sbomgraph.domain.graph.statements import (
    Statement,
    TempId,
    entity_statements,
    is_reference,
)
from sbomgraph.domain.licensing import SPDX_SENTINELS, is_compound_expression
from sbomgraph.domain.schema import ValueType

from .expression import (
    Conjunction,
    Disjunction,
    LicenseLeaf,
    WithException,
    parse_license_expression,
)
from .schema import SpdxDocument

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sbomgraph.domain.graph.statements import Value
    from sbomgraph.domain.licensing import LicenseCorpus
    from sbomgraph.domain.schema import SchemaRegistry

    from .expression import LicenseNode
    from .schema import (
        SpdxChecksum,
        SpdxCreationInfo,
        SpdxExternalRef,
        SpdxExtractedLicensingInfo,
        SpdxFile,
        SpdxPackage,
        SpdxPackageVerificationCode,
        SpdxRelationship,
        SpdxSnippet,
    )

log = logging.getLogger(__name__)

SPDX_INDIVIDUALS: dict[str, str] = {
    "NOASSERTION": "spdx/noassertion",
    "NONE": "spdx/none",
}
LISTED_REFERENCE_TYPES_IRI = "http://spdx.org/rdf/references/"
_WORD_SEPARATOR = re.compile(r"[-_\s]+")


def _camel(value: str) -> str:
    parts = [part for part in _WORD_SEPARATOR.split(value.strip()) if part]
    if not parts:
        return value
    head, *tail = parts
    return head.lower() + "".join(part[:1].upper() + part[1:].lower() for part in tail)


def relationship_type_ident(value: str) -> str:
    """``DEPENDS_ON`` -> ``spdx/relationshipType_dependsOn``."""

    return f"spdx/relationshipType_{_camel(value)}"


def reference_category_ident(value: str) -> str:
    return f"spdx/referenceCategory_{_camel(value)}"


def checksum_algorithm_ident(value: str) -> str:
    return f"spdx/checksumAlgorithm_{value.lower().replace('-', '_')}"


def purpose_ident(value: str) -> str:
    return f"spdx/purpose_{_camel(value)}"


def file_type_ident(value: str) -> str:
    return f"spdx/fileType_{value.lower()}"


def reference_type_value(value: str) -> str:
    """Listed reference types (``purl``, ``cpe23Type``) expand to their IRI."""

    if ":" in value or "/" in value:
        return value
    return f"{LISTED_REFERENCE_TYPES_IRI}{value}"


def parse_raw_document(raw: bytes | str) -> dict[str, object]:
    """Decode a raw JSON document; anything but a JSON object is rejected."""

    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise ConversionFormatError(f"Document is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConversionFormatError("Document must be a JSON object")
    return cast(dict[str, object], payload)


def parse_instant(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise ConversionFormatError(f"Invalid timestamp {value!r}") from exc


class SpdxStatementConverter:
    """Convert SPDX 2.x JSON documents, consulting the schema registry."""

    def __init__(self, registry: SchemaRegistry) -> None:
        self._registry = registry

    def convert(self, document: Mapping[str, object]) -> tuple[Statement, ...]:
        try:
            model = SpdxDocument.model_validate(document)
        except ValidationError as exc:
            raise ConversionFormatError(f"Invalid SPDX document: {exc}") from exc
        statements = _DocumentTranslation(model, self._registry).run()
        log.debug("Converted SPDX document %s into %s statements", model.name, len(statements))
        return statements


class _DocumentTranslation:
    def __init__(self, document: SpdxDocument, registry: SchemaRegistry) -> None:
        self._document = document
        self._registry = registry
        self._namespace = document.document_namespace.rstrip("#")
        self._external = {
            ref.external_document_id: ref.spdx_document.rstrip("#")
            for ref in document.external_document_refs
        }
        self._statements: list[Statement] = []
        self._seen: set[str] = set()
        self._licenses: dict[str, TempId] = {}
        self._anonymous = 0

    def run(self) -> tuple[Statement, ...]:
        document = self._document
        subject = self._element(document.spdx_id, "spdx/SpdxDocument")
        self._assert(
            subject,
            {
                "spdx/specVersion": document.spdx_version,
                "spdx/name": document.name,
                "spdx/dataLicense": self._license(document.data_license),
                "spdx/creationInfo": self._creation_info(document.creation_info),
                "rdfs/comment": document.comment,
                "spdx/describesPackage": [
                    self._element(element) for element in document.document_describes
                ],
                "spdx/hasExtractedLicensingInfo": [
                    self._extracted_license(info) for info in document.extracted_licensing_infos
                ],
            },
        )
        for package in document.packages:
            self._package(package)
        for file in document.files:
            self._file(file)
        for snippet in document.snippets:
            self._snippet(snippet)
        for relationship in document.relationships:
            self._relationship(relationship)
        return tuple(self._statements)

    # Statement emission --------------------------------------------------------

    def _assert(self, subject: TempId, attributes: Mapping[str, object]) -> None:
        for predicate, raw in attributes.items():
            if raw is None:
                continue
            values = list(cast(list[object], raw)) if isinstance(raw, (list, tuple)) else [raw]
            if len(values) > 1 and not self._registry.is_many(predicate):
                raise ConversionFormatError(
                    f"{predicate} is single-valued but {subject} has {len(values)} values"
                )
            coerced = {predicate: [self._coerce(predicate, value) for value in values]}
            self._statements.extend(entity_statements(subject, coerced))

    def _coerce(self, predicate: str, value: object) -> Value:
        if is_reference(value) or not isinstance(value, str):
            return cast("Value", value)
        match self._registry.value_type(predicate):
            case ValueType.INSTANT:
                return parse_instant(value)
            case ValueType.BOOLEAN:
                lowered = value.strip().lower()
                if lowered not in {"true", "false"}:
                    raise ConversionFormatError(f"Invalid boolean {value!r} for {predicate}")
                return lowered == "true"
            case ValueType.LONG:
                try:
                    return int(value)
                except ValueError as exc:
                    raise ConversionFormatError(
                        f"Invalid integer {value!r} for {predicate}"
                    ) from exc
            case _:
                return value

    def _anonymous_id(self, kind: str) -> TempId:
        self._anonymous += 1
        return TempId(f"{kind}:{self._anonymous}")

    # Elements ------------------------------------------------------------------

    def _uri(self, reference: str) -> str:
        if reference.startswith("DocumentRef-") and ":" in reference:
            document_ref, local = reference.split(":", 1)
            base = self._external.get(document_ref)
            if base is None:
                raise ConversionFormatError(f"Unknown external document {document_ref!r}")
            return f"{base}#{local}"
        return f"{self._namespace}#{reference}"

    def _individual(self, name: str) -> TempId:
        ident = SPDX_INDIVIDUALS[name]
        subject = TempId(f"individual:{ident}")
        if subject.label not in self._seen:
            self._seen.add(subject.label)
            self._assert(subject, {"db/ident": ident})
        return subject

    def _element(self, reference: str, rdf_type: str | None = None) -> TempId:
        if reference in SPDX_INDIVIDUALS:
            return self._individual(reference)
        subject = TempId(reference)
        if subject.label not in self._seen:
            self._seen.add(subject.label)
            self._assert(subject, {"rdfa/uri": self._uri(reference)})
        if rdf_type is not None:
            self._assert(subject, {"rdf/type": rdf_type})
        return subject

    def _creation_info(self, info: SpdxCreationInfo) -> TempId:
        subject = self._anonymous_id("creation-info")
        self._assert(
            subject,
            {
                "rdf/type": "spdx/CreationInfo",
                "spdx/created": info.created,
                "spdx/creator": info.creators,
                "spdx/licenseListVersion": info.license_list_version,
                "rdfs/comment": info.comment,
            },
        )
        return subject

    def _package(self, package: SpdxPackage) -> None:
        subject = self._element(package.spdx_id, "spdx/Package")
        purpose = package.primary_package_purpose
        self._assert(
            subject,
            {
                "spdx/name": package.name,
                "spdx/versionInfo": package.version_info,
                "spdx/packageFileName": package.package_file_name,
                "spdx/supplier": package.supplier,
                "spdx/originator": package.originator,
                "spdx/downloadLocation": package.download_location,
                "spdx/filesAnalyzed": package.files_analyzed,
                "spdx/packageVerificationCode": self._verification_code(
                    package.verification_code
                ),
                "spdx/checksum": [self._checksum(item) for item in package.checksums],
                "spdx/homepage": package.homepage,
                "spdx/sourceInfo": package.source_info,
                "spdx/licenseConcluded": self._optional_license(package.license_concluded),
                "spdx/licenseDeclared": self._optional_license(package.license_declared),
                "spdx/licenseInfoFromFiles": [
                    self._license(item) for item in package.license_info_from_files
                ],
                "spdx/licenseComments": package.license_comments,
                "spdx/copyrightText": package.copyright_text,
                "spdx/summary": package.summary,
                "spdx/description": package.description,
                "rdfs/comment": package.comment,
                "spdx/externalRef": [self._external_ref(item) for item in package.external_refs],
                "spdx/hasFile": [self._element(item) for item in package.has_files],
                "spdx/primaryPackagePurpose": purpose_ident(purpose) if purpose else None,
                "spdx/releaseDate": package.release_date,
                "spdx/builtDate": package.built_date,
                "spdx/validUntilDate": package.valid_until_date,
            },
        )

    def _file(self, file: SpdxFile) -> None:
        subject = self._element(file.spdx_id, "spdx/File")
        self._assert(
            subject,
            {
                "spdx/fileName": file.file_name,
                "spdx/fileType": [file_type_ident(item) for item in file.file_types],
                "spdx/checksum": [self._checksum(item) for item in file.checksums],
                "spdx/licenseConcluded": self._optional_license(file.license_concluded),
                "spdx/licenseInfoInFile": [
                    self._license(item) for item in file.license_info_in_files
                ],
                "spdx/copyrightText": file.copyright_text,
                "spdx/noticeText": file.notice_text,
                "rdfs/comment": file.comment,
            },
        )

    def _snippet(self, snippet: SpdxSnippet) -> None:
        subject = self._element(snippet.spdx_id, "spdx/Snippet")
        self._assert(
            subject,
            {
                "spdx/snippetFromFile": self._element(snippet.snippet_from_file),
                "spdx/name": snippet.name,
                "spdx/licenseConcluded": self._optional_license(snippet.license_concluded),
                "spdx/copyrightText": snippet.copyright_text,
                "rdfs/comment": snippet.comment,
            },
        )

    def _relationship(self, relationship: SpdxRelationship) -> None:
        source = self._element(relationship.spdx_element_id)
        target = self._element(relationship.related_spdx_element)
        relationship_type = relationship_type_ident(relationship.relationship_type)
        subject = self._anonymous_id("relationship")
        key = (
            f"{relationship.spdx_element_id},{_camel(relationship.relationship_type)},"
            f"{relationship.related_spdx_element}"
        )
        self._assert(
            subject,
            {
                "rdf/type": "spdx/Relationship",
                "rdfa/uri": f"{self._namespace}#relationship({key})",
                "spdx/relationshipType": relationship_type,
                "spdx/relatedSpdxElement": target,
                "rdfs/comment": relationship.comment,
            },
        )
        self._assert(source, {"spdx/relationship": subject})

    def _checksum(self, checksum: SpdxChecksum) -> TempId:
        subject = self._anonymous_id("checksum")
        self._assert(
            subject,
            {
                "rdf/type": "spdx/Checksum",
                "spdx/algorithm": checksum_algorithm_ident(checksum.algorithm),
                "spdx/checksumValue": checksum.checksum_value,
            },
        )
        return subject

    def _verification_code(self, code: SpdxPackageVerificationCode | None) -> TempId | None:
        if code is None:
            return None
        subject = self._anonymous_id("verification-code")
        self._assert(
            subject,
            {
                "rdf/type": "spdx/PackageVerificationCode",
                "spdx/packageVerificationCodeValue": code.package_verification_code_value,
                "spdx/packageVerificationCodeExcludedFile": code.excluded_files,
            },
        )
        return subject

    def _external_ref(self, ref: SpdxExternalRef) -> TempId:
        subject = self._anonymous_id("external-ref")
        self._assert(
            subject,
            {
                "rdf/type": "spdx/ExternalRef",
                "spdx/referenceCategory": reference_category_ident(ref.reference_category),
                "spdx/referenceType": reference_type_value(ref.reference_type),
                "spdx/referenceLocator": ref.reference_locator,
                "rdfs/comment": ref.comment,
            },
        )
        return subject

    # Licenses ------------------------------------------------------------------

    def _optional_license(self, expression: str | None) -> TempId | None:
        return self._license(expression) if expression else None

    def _license(self, expression: str) -> TempId:
        cached = self._licenses.get(expression)
        if cached is not None:
            return cached
        try:
            node: LicenseNode = parse_license_expression(expression)
        except ConversionFormatError:
            if is_compound_expression(expression):
                raise
            node = LicenseLeaf(expression.strip())
        subject = self._license_node(node)
        self._licenses[expression] = subject
        return subject

    def _license_node(self, node: LicenseNode) -> TempId:
        match node:
            case LicenseLeaf(identifier=identifier):
                return self._license_leaf(identifier)
            case WithException(license=leaf, exception=exception):
                subject = self._anonymous_id("license-set")
                self._assert(
                    subject,
                    {
                        "rdf/type": "spdx/WithExceptionOperator",
                        "spdx/member": self._license_leaf(leaf.identifier),
                        "spdx/licenseException": self._exception(exception),
                    },
                )
                return subject
            case Conjunction(members=members):
                return self._license_set("spdx/ConjunctiveLicenseSet", members)
            case Disjunction(members=members):
                return self._license_set("spdx/DisjunctiveLicenseSet", members)

    def _license_set(self, rdf_type: str, members: tuple[LicenseNode, ...]) -> TempId:
        member_ids = [self._license_node(member) for member in members]
        subject = self._anonymous_id("license-set")
        self._assert(subject, {"rdf/type": rdf_type, "spdx/member": member_ids})
        return subject

    def _license_leaf(self, identifier: str) -> TempId:
        if identifier in SPDX_SENTINELS:
            return self._individual(identifier)
        if identifier.startswith(("LicenseRef-", "DocumentRef-")):
            uri = self._uri(identifier)
            subject = TempId(f"license:{uri}")
            if subject.label not in self._seen:
                self._seen.add(subject.label)
                self._assert(subject, {"rdfa/uri": uri})
            return subject
        subject = TempId(f"license:{identifier}")
        if subject.label not in self._seen:
            self._seen.add(subject.label)
            self._assert(subject, {"spdx/licenseId": identifier})
        return subject

    def _exception(self, exception_id: str) -> TempId:
        subject = TempId(f"exception:{exception_id}")
        if subject.label not in self._seen:
            self._seen.add(subject.label)
            self._assert(subject, {"spdx/licenseExceptionId": exception_id})
        return subject

    def _extracted_license(self, info: SpdxExtractedLicensingInfo) -> TempId:
        subject = self._license_leaf(info.license_id)
        self._assert(
            subject,
            {
                "rdf/type": "spdx/ExtractedLicensingInfo",
                "spdx/name": info.name,
                "spdx/extractedText": info.extracted_text,
                "rdfs/seeAlso": info.see_alsos,
                "rdfs/comment": info.comment,
            },
        )
        return subject


def corpus_statements(corpus: LicenseCorpus) -> tuple[Statement, ...]:
    """Statements describing every listed license and exception in ``corpus``."""

    statements: list[Statement] = []
    for ident in SPDX_INDIVIDUALS.values():
        statements.append(Statement(TempId(f"individual:{ident}"), "db/ident", ident))
    for record in corpus.licenses:
        statements.extend(
            entity_statements(
                TempId(f"license:{record.license_id}"),
                {
                    "rdf/type": "spdx/ListedLicense",
                    "spdx/licenseId": record.license_id,
                    "spdx/name": record.name,
                    "spdx/isOsiApproved": record.is_osi_approved,
                    "spdx/isDeprecatedLicenseId": record.is_deprecated,
                    "rdfs/seeAlso": record.see_also,
                },
            )
        )
    for exception in corpus.exceptions:
        statements.extend(
            entity_statements(
                TempId(f"exception:{exception.exception_id}"),
                {
                    "rdf/type": "spdx/ListedLicenseException",
                    "spdx/licenseExceptionId": exception.exception_id,
                    "spdx/name": exception.name,
                    "spdx/isDeprecatedLicenseId": exception.is_deprecated,
                },
            )
        )
    return tuple(statements)
