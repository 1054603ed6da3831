"""SPDX 2.x JSON document and license-list schemas."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

type SpdxId = str  # SPDXRef-..., optionally prefixed by DocumentRef-...:


class SpdxBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "SPDX %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class SpdxChecksum(SpdxBaseModel):
    algorithm: str
    checksum_value: str = Field(alias="checksumValue")


class SpdxExternalRef(SpdxBaseModel):
    reference_category: str = Field(alias="referenceCategory")
    reference_type: str = Field(alias="referenceType")
    reference_locator: str = Field(alias="referenceLocator")
    comment: str | None = None


class SpdxPackageVerificationCode(SpdxBaseModel):
    package_verification_code_value: str = Field(alias="packageVerificationCodeValue")
    excluded_files: list[str] = Field(
        default_factory=list, alias="packageVerificationCodeExcludedFiles"
    )


class SpdxCreationInfo(SpdxBaseModel):
    created: str
    creators: list[str] = Field(default_factory=list)
    license_list_version: str | None = Field(default=None, alias="licenseListVersion")
    comment: str | None = None


class SpdxPackage(SpdxBaseModel):
    spdx_id: SpdxId = Field(alias="SPDXID")
    name: str
    version_info: str | None = Field(default=None, alias="versionInfo")
    package_file_name: str | None = Field(default=None, alias="packageFileName")
    supplier: str | None = None
    originator: str | None = None
    download_location: str | None = Field(default=None, alias="downloadLocation")
    files_analyzed: bool | None = Field(default=None, alias="filesAnalyzed")
    verification_code: SpdxPackageVerificationCode | None = Field(
        default=None, alias="packageVerificationCode"
    )
    checksums: list[SpdxChecksum] = Field(default_factory=list["SpdxChecksum"])
    homepage: str | None = None
    source_info: str | None = Field(default=None, alias="sourceInfo")
    license_concluded: str | None = Field(default=None, alias="licenseConcluded")
    license_declared: str | None = Field(default=None, alias="licenseDeclared")
    license_info_from_files: list[str] = Field(default_factory=list, alias="licenseInfoFromFiles")
    license_comments: str | None = Field(default=None, alias="licenseComments")
    copyright_text: str | None = Field(default=None, alias="copyrightText")
    summary: str | None = None
    description: str | None = None
    comment: str | None = None
    external_refs: list[SpdxExternalRef] = Field(
        default_factory=list["SpdxExternalRef"], alias="externalRefs"
    )
    has_files: list[SpdxId] = Field(default_factory=list, alias="hasFiles")
    primary_package_purpose: str | None = Field(default=None, alias="primaryPackagePurpose")
    release_date: str | None = Field(default=None, alias="releaseDate")
    built_date: str | None = Field(default=None, alias="builtDate")
    valid_until_date: str | None = Field(default=None, alias="validUntilDate")


class SpdxFile(SpdxBaseModel):
    spdx_id: SpdxId = Field(alias="SPDXID")
    file_name: str = Field(alias="fileName")
    file_types: list[str] = Field(default_factory=list, alias="fileTypes")
    checksums: list[SpdxChecksum] = Field(default_factory=list["SpdxChecksum"])
    license_concluded: str | None = Field(default=None, alias="licenseConcluded")
    license_info_in_files: list[str] = Field(default_factory=list, alias="licenseInfoInFiles")
    copyright_text: str | None = Field(default=None, alias="copyrightText")
    notice_text: str | None = Field(default=None, alias="noticeText")
    comment: str | None = None


class SpdxSnippet(SpdxBaseModel):
    spdx_id: SpdxId = Field(alias="SPDXID")
    snippet_from_file: SpdxId = Field(alias="snippetFromFile")
    name: str | None = None
    license_concluded: str | None = Field(default=None, alias="licenseConcluded")
    copyright_text: str | None = Field(default=None, alias="copyrightText")
    comment: str | None = None


class SpdxRelationship(SpdxBaseModel):
    spdx_element_id: SpdxId = Field(alias="spdxElementId")
    relationship_type: str = Field(alias="relationshipType")
    related_spdx_element: SpdxId = Field(alias="relatedSpdxElement")
    comment: str | None = None


class SpdxExtractedLicensingInfo(SpdxBaseModel):
    license_id: str = Field(alias="licenseId")
    extracted_text: str | None = Field(default=None, alias="extractedText")
    name: str | None = None
    see_alsos: list[str] = Field(default_factory=list, alias="seeAlsos")
    comment: str | None = None


class SpdxExternalDocumentRef(SpdxBaseModel):
    external_document_id: str = Field(alias="externalDocumentId")
    spdx_document: str = Field(alias="spdxDocument")
    checksum: SpdxChecksum | None = None


class SpdxDocument(SpdxBaseModel):
    spdx_id: SpdxId = Field(alias="SPDXID")
    spdx_version: str = Field(alias="spdxVersion")
    data_license: str = Field(default="CC0-1.0", alias="dataLicense")
    name: str
    document_namespace: str = Field(alias="documentNamespace")
    creation_info: SpdxCreationInfo = Field(alias="creationInfo")
    comment: str | None = None
    external_document_refs: list[SpdxExternalDocumentRef] = Field(
        default_factory=list["SpdxExternalDocumentRef"], alias="externalDocumentRefs"
    )
    document_describes: list[SpdxId] = Field(default_factory=list, alias="documentDescribes")
    packages: list[SpdxPackage] = Field(default_factory=list["SpdxPackage"])
    files: list[SpdxFile] = Field(default_factory=list["SpdxFile"])
    snippets: list[SpdxSnippet] = Field(default_factory=list["SpdxSnippet"])
    relationships: list[SpdxRelationship] = Field(default_factory=list["SpdxRelationship"])
    extracted_licensing_infos: list[SpdxExtractedLicensingInfo] = Field(
        default_factory=list["SpdxExtractedLicensingInfo"], alias="hasExtractedLicensingInfos"
    )


# License list (https://github.com/spdx/license-list-data) -----------------------


class LicenseListEntry(SpdxBaseModel):
    license_id: str = Field(alias="licenseId")
    name: str | None = None
    reference: str | None = None
    is_osi_approved: bool | None = Field(default=None, alias="isOsiApproved")
    is_deprecated_license_id: bool = Field(default=False, alias="isDeprecatedLicenseId")
    see_also: list[str] = Field(default_factory=list, alias="seeAlso")


class LicenseListPayload(SpdxBaseModel):
    license_list_version: str | None = Field(default=None, alias="licenseListVersion")
    licenses: list[LicenseListEntry] = Field(default_factory=list["LicenseListEntry"])


class ExceptionListEntry(SpdxBaseModel):
    license_exception_id: str = Field(alias="licenseExceptionId")
    name: str | None = None
    reference: str | None = None
    is_deprecated_license_id: bool = Field(default=False, alias="isDeprecatedLicenseId")


class ExceptionListPayload(SpdxBaseModel):
    license_list_version: str | None = Field(default=None, alias="licenseListVersion")
    exceptions: list[ExceptionListEntry] = Field(default_factory=list["ExceptionListEntry"])
