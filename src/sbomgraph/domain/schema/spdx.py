"""Packaged schema for the SPDX 2.3 vocabulary.

The single-valued properties are the ones the SPDX ontology restricts to exactly
or at most one value; they are run through ``entries_from_ontology`` so the
packaged schema and a live ontology derivation agree. Value types are layered on
top for the properties the converter coerces or stores as references.
"""

from __future__ import annotations

from dataclasses import replace

from .entries import Cardinality, SchemaEntry, ValueType
from .ontology import entries_from_ontology

SPDX_TERMS_IRI = "http://spdx.org/rdf/terms#"

SPDX_SINGLE_VALUED_PROPERTIES: tuple[str, ...] = (
    "referenceLocator",
    "licenseId",
    "licenseExceptionId",
    "licenseConcluded",
    "packageVerificationCodeValue",
    "releaseDate",
    "example",
    "snippetFromFile",
    "isWayBackLink",
    "licenseComments",
    "reviewDate",
    "contextualExample",
    "relatedSpdxElement",
    "standardLicenseTemplate",
    "timestamp",
    "isLive",
    "packageFileName",
    "copyrightText",
    "relationshipType",
    "licenseException",
    "primaryPackagePurpose",
    "exceptionTextHtml",
    "annotator",
    "licenseExceptionTemplate",
    "reviewer",
    "specVersion",
    "isDeprecatedLicenseId",
    "standardLicenseHeaderHtml",
    "isValid",
    "validUntilDate",
    "spdxDocument",
    "externalDocumentId",
    "standardLicenseHeaderTemplate",
    "documentation",
    "creationInfo",
    "name",
    "description",
    "licenseText",
    "filesAnalyzed",
    "noticeText",
    "licenseExceptionText",
    "summary",
    "referenceCategory",
    "supplier",
    "referenceType",
    "isFsfLibre",
    "externalReferenceSite",
    "order",
    "annotationDate",
    "sourceInfo",
    "downloadLocation",
    "originator",
    "url",
    "algorithm",
    "licenseListVersion",
    "licenseDeclared",
    "extractedText",
    "annotationType",
    "match",
    "standardLicenseHeader",
    "versionInfo",
    "fileName",
    "dataLicense",
    "created",
    "deprecatedVersion",
    "isOsiApproved",
    "packageVerificationCode",
    "builtDate",
    "licenseTextHtml",
    "checksumValue",
    "homepage",
)

SPDX_RESTRICTIONS: tuple[dict[str, object], ...] = tuple(
    {"onProperty": f"{SPDX_TERMS_IRI}{name}", "qualifiedCardinality": 1}
    for name in SPDX_SINGLE_VALUED_PROPERTIES
)

_VALUE_TYPES: dict[str, ValueType] = {
    "spdx/licenseConcluded": ValueType.REF,
    "spdx/licenseDeclared": ValueType.REF,
    "spdx/dataLicense": ValueType.REF,
    "spdx/licenseException": ValueType.REF,
    "spdx/relatedSpdxElement": ValueType.REF,
    "spdx/snippetFromFile": ValueType.REF,
    "spdx/creationInfo": ValueType.REF,
    "spdx/packageVerificationCode": ValueType.REF,
    "spdx/relationshipType": ValueType.KEYWORD,
    "spdx/referenceCategory": ValueType.KEYWORD,
    "spdx/algorithm": ValueType.KEYWORD,
    "spdx/primaryPackagePurpose": ValueType.KEYWORD,
    "spdx/annotationType": ValueType.KEYWORD,
    "spdx/filesAnalyzed": ValueType.BOOLEAN,
    "spdx/isOsiApproved": ValueType.BOOLEAN,
    "spdx/isDeprecatedLicenseId": ValueType.BOOLEAN,
    "spdx/isFsfLibre": ValueType.BOOLEAN,
    "spdx/created": ValueType.INSTANT,
    "spdx/annotationDate": ValueType.INSTANT,
    "spdx/releaseDate": ValueType.INSTANT,
    "spdx/builtDate": ValueType.INSTANT,
    "spdx/validUntilDate": ValueType.INSTANT,
    "spdx/name": ValueType.STRING,
    "spdx/versionInfo": ValueType.STRING,
    "spdx/fileName": ValueType.STRING,
    "spdx/checksumValue": ValueType.STRING,
    "spdx/specVersion": ValueType.STRING,
}

_MULTI_VALUED: tuple[SchemaEntry, ...] = (
    SchemaEntry("spdx/relationship", cardinality=Cardinality.MANY, value_type=ValueType.REF),
    SchemaEntry("spdx/member", cardinality=Cardinality.MANY, value_type=ValueType.REF),
    SchemaEntry("spdx/checksum", cardinality=Cardinality.MANY, value_type=ValueType.REF),
    SchemaEntry("spdx/externalRef", cardinality=Cardinality.MANY, value_type=ValueType.REF),
    SchemaEntry("spdx/hasFile", cardinality=Cardinality.MANY, value_type=ValueType.REF),
    SchemaEntry("spdx/describesPackage", cardinality=Cardinality.MANY, value_type=ValueType.REF),
    SchemaEntry(
        "spdx/licenseInfoFromFiles", cardinality=Cardinality.MANY, value_type=ValueType.REF
    ),
    SchemaEntry("spdx/licenseInfoInFile", cardinality=Cardinality.MANY, value_type=ValueType.REF),
    SchemaEntry(
        "spdx/hasExtractedLicensingInfo",
        cardinality=Cardinality.MANY,
        value_type=ValueType.REF,
    ),
    SchemaEntry("spdx/creator", cardinality=Cardinality.MANY, value_type=ValueType.STRING),
    SchemaEntry("spdx/fileType", cardinality=Cardinality.MANY, value_type=ValueType.KEYWORD),
    SchemaEntry("rdfs/seeAlso", cardinality=Cardinality.MANY, value_type=ValueType.STRING),
)


def _build_spdx_schema() -> tuple[SchemaEntry, ...]:
    typed: list[SchemaEntry] = []
    for entry in entries_from_ontology(SPDX_RESTRICTIONS):
        value_type = entry.value_type or _VALUE_TYPES.get(entry.predicate)
        typed.append(replace(entry, value_type=value_type))
    return (*typed, *_MULTI_VALUED)


SPDX_SCHEMA: tuple[SchemaEntry, ...] = _build_spdx_schema()
