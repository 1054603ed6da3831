"""Load the SPDX license list into a ``LicenseCorpus``.

Sources are local file paths or http(s) URLs; URLs go through the shared
``ResilientClient`` so repeated runs hit the HTTP cache.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from sbomgraph.adapters.http_resilience import http_get_resilient
from sbomgraph.domain.errors import CorpusLoadError
from sbomgraph.domain.licensing import ExceptionRecord, LicenseCorpus, LicenseRecord

from .schema import ExceptionListPayload, LicenseListPayload

if TYPE_CHECKING:
    from sbomgraph.adapters.http_resilience import ClientFactory
    from sbomgraph.config.http_resilience import ResilienceConfig
    from sbomgraph.config.licenses import LicenseListConfig

log = logging.getLogger(__name__)


def is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


async def read_source(
    source: str,
    resilience: ResilienceConfig,
    *,
    client_factory: ClientFactory | None = None,
) -> bytes:
    """Return the raw bytes behind a path or URL, raising ``CorpusLoadError``."""

    if not is_remote(source):
        try:
            return Path(source).expanduser().read_bytes()
        except OSError as exc:
            raise CorpusLoadError(f"Cannot read license list {source}: {exc}") from exc
    try:
        response = await http_get_resilient(resilience, source, client_factory=client_factory)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise CorpusLoadError(f"Cannot fetch license list {source}: {exc}") from exc
    return response.content


def parse_license_list(raw: bytes) -> LicenseListPayload:
    try:
        return LicenseListPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise CorpusLoadError(f"Invalid license list: {exc}") from exc


def parse_exception_list(raw: bytes) -> ExceptionListPayload:
    try:
        return ExceptionListPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise CorpusLoadError(f"Invalid license exception list: {exc}") from exc


def corpus_from_payloads(
    licenses: LicenseListPayload,
    exceptions: ExceptionListPayload | None = None,
) -> LicenseCorpus:
    return LicenseCorpus.from_records(
        (
            LicenseRecord(
                license_id=entry.license_id,
                name=entry.name,
                reference=entry.reference,
                is_osi_approved=entry.is_osi_approved,
                is_deprecated=entry.is_deprecated_license_id,
                see_also=tuple(entry.see_also),
            )
            for entry in licenses.licenses
        ),
        (
            ExceptionRecord(
                exception_id=entry.license_exception_id,
                name=entry.name,
                reference=entry.reference,
                is_deprecated=entry.is_deprecated_license_id,
            )
            for entry in (exceptions.exceptions if exceptions is not None else ())
        ),
        license_list_version=licenses.license_list_version,
    )


async def load_license_corpus_async(
    config: LicenseListConfig,
    *,
    client_factory: ClientFactory | None = None,
) -> LicenseCorpus:
    licenses = parse_license_list(
        await read_source(config.licenses, config.resilience, client_factory=client_factory)
    )
    exceptions: ExceptionListPayload | None = None
    if config.exceptions:
        exceptions = parse_exception_list(
            await read_source(config.exceptions, config.resilience, client_factory=client_factory)
        )
    corpus = corpus_from_payloads(licenses, exceptions)
    log.info(
        "Loaded license list %s: %s licenses, %s exceptions",
        corpus.license_list_version or "(unversioned)",
        len(corpus),
        len(corpus.exceptions),
    )
    return corpus


def load_license_corpus(
    config: LicenseListConfig,
    *,
    client_factory: ClientFactory | None = None,
) -> LicenseCorpus:
    """Synchronous wrapper around ``load_license_corpus_async``."""

    return asyncio.run(load_license_corpus_async(config, client_factory=client_factory))
