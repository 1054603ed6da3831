"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING, NamedTuple

from sbomgraph.adapters.github import fetch_sbom_documents
from sbomgraph.adapters.spdx import (
    SpdxStatementConverter,
    corpus_statements,
    load_license_corpus,
    parse_raw_document,
)
from sbomgraph.config import (
    get_github_config,
    get_license_list_config,
    get_loader_config,
    get_resolver_config,
)
from sbomgraph.domain.errors import AcquisitionError
from sbomgraph.domain.graph import GraphStore
from sbomgraph.domain.ingest import (
    IngestPipeline,
    SourceDocument,
    UnavailableSource,
    abort_on_failure,
    retry_failures,
    skip_failures,
)
from sbomgraph.domain.licensing import LicenseResolver
from sbomgraph.domain.schema import SPDX_SCHEMA, SchemaRegistry

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from pathlib import Path

    from sbomgraph.adapters.http_resilience import ResilientClient
    from sbomgraph.config import (
        GitHubConfig,
        LicenseListConfig,
        LoaderConfig,
        ResilienceConfig,
        ResolverConfig,
    )
    from sbomgraph.domain.graph import GraphSnapshot
    from sbomgraph.domain.ingest import ErrorPolicy, PipelineResult
    from sbomgraph.domain.licensing import LicenseCorpus


log = getLogger(__name__)


class GitHubRepository(NamedTuple):
    owner: str
    repo: str

    @property
    def document_id(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def parse(cls, value: str) -> GitHubRepository:
        """Parse ``OWNER/REPO``."""

        owner, sep, repo = value.strip().partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ValueError(f"Expected OWNER/REPO, got {value!r}")
        return cls(owner, repo)


@dataclass(frozen=True, slots=True)
class LocalDocument:
    path: Path

    @property
    def document_id(self) -> str:
        return str(self.path)


type SbomSource = GitHubRepository | LocalDocument


def ingest_sboms(
    sources: Iterable[SbomSource],
    *,
    github_config: GitHubConfig | None = None,
    license_config: LicenseListConfig | None = None,
    resolver_config: ResolverConfig | None = None,
    loader_config: LoaderConfig | None = None,
    corpus: LicenseCorpus | None = None,
    snapshot: GraphSnapshot | None = None,
    fail_fast: bool = False,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> PipelineResult:
    """Fetch or read every source in order and fold them into one graph.

    Sources that cannot be fetched or read are reported in
    ``PipelineResult.unavailable`` and never reach the loader. Documents that
    arrive but cannot be decoded or converted are loader ``failures``. With
    ``fail_fast`` an unavailable source ends the run before anything is merged,
    and the first failing document raises ``LoadAborted`` with the partial
    result.
    """

    ordered = list(sources)
    resolver_config = resolver_config or get_resolver_config()
    loader_config = loader_config or get_loader_config()
    if corpus is None:
        corpus = load_license_corpus(
            license_config or get_license_list_config(), client_factory=client_factory
        )

    log.info(
        "Starting ingestion: sources=%s, licenses=%s, fail_fast=%s",
        len(ordered),
        len(corpus),
        fail_fast,
    )
    documents, unavailable = _collect_documents(
        ordered,
        github_config=github_config,
        fail_fast=fail_fast,
        client_factory=client_factory,
    )

    registry = SchemaRegistry()
    pipeline = IngestPipeline(
        registry=registry,
        schema=SPDX_SCHEMA,
        resolver=LicenseResolver(corpus, weight=resolver_config.dampening_weight),
        converter=SpdxStatementConverter(registry),
        store=GraphStore(registry),
        bootstrap=corpus_statements(corpus),
        license_fields=resolver_config.fields,
        low_confidence_threshold=resolver_config.low_confidence_threshold,
        on_error=_error_policy(fail_fast=fail_fast, max_attempts=loader_config.max_attempts),
        max_attempts=loader_config.max_attempts,
        decoder=parse_raw_document,
    )
    result = pipeline.run(documents, snapshot=snapshot)
    return replace(result, unavailable=unavailable)


def _error_policy(*, fail_fast: bool, max_attempts: int) -> ErrorPolicy:
    if fail_fast:
        return abort_on_failure
    return retry_failures if max_attempts > 1 else skip_failures


def _collect_documents(
    sources: Sequence[SbomSource],
    *,
    github_config: GitHubConfig | None,
    fail_fast: bool,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None,
) -> tuple[list[SourceDocument], tuple[UnavailableSource, ...]]:
    raw: dict[str, bytes] = {}
    errors: dict[str, AcquisitionError] = {}

    repositories = [source for source in sources if isinstance(source, GitHubRepository)]
    if repositories:
        fetched = fetch_sbom_documents(
            repositories,
            github_config or get_github_config(),
            client_factory=client_factory,
        )
        raw.update((document.document_id, document.raw) for document in fetched.documents)
        errors.update((failure.document_id, failure.error) for failure in fetched.failures)

    documents: list[SourceDocument] = []
    unavailable: list[UnavailableSource] = []
    for source in sources:
        document_id = source.document_id
        try:
            if document_id in errors:
                raise errors[document_id]
            content = raw[document_id] if isinstance(source, GitHubRepository) else _read(source)
            documents.append(SourceDocument(document_id, content))
        except AcquisitionError as exc:
            if fail_fast:
                raise
            log.warning("Source %s unavailable: %s", document_id, exc)
            unavailable.append(UnavailableSource(document_id, exc))
    return documents, tuple(unavailable)


def _read(source: LocalDocument) -> bytes:
    try:
        return source.path.expanduser().read_bytes()
    except OSError as exc:
        raise AcquisitionError(f"Cannot read {source.path}: {exc}") from exc
