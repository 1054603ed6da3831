from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from sbomgraph.domain.licensing import ExceptionRecord, LicenseCorpus, LicenseRecord
from sbomgraph.domain.schema import SPDX_SCHEMA, SchemaRegistry
from tests.helpers.spdx import DATA_DIR, SpdxPayload, load_spdx_fixture

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SBOMGRAPH_DATA_DIR", str(tmp_path / "sbomgraph-data"))
    for name in (
        "SBOMGRAPH_LICENSE_LIST",
        "SBOMGRAPH_LICENSE_EXCEPTIONS",
        "SBOMGRAPH_DAMPENING_WEIGHT",
        "SBOMGRAPH_LOW_CONFIDENCE_THRESHOLD",
        "GITHUB_API_URL",
        "GITHUB_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def corpus() -> LicenseCorpus:
    return LicenseCorpus.from_records(
        [
            LicenseRecord("Apache-2.0", name="Apache License 2.0", is_osi_approved=True),
            LicenseRecord("BSD-3-Clause", is_osi_approved=True),
            LicenseRecord("GPL-2.0-only", is_osi_approved=True),
            LicenseRecord("GPL-3.0-only", is_osi_approved=True),
            LicenseRecord(
                "MIT",
                name="MIT License",
                is_osi_approved=True,
                see_also=("https://opensource.org/license/mit/",),
            ),
        ],
        [ExceptionRecord("Classpath-exception-2.0", name="Classpath exception 2.0")],
        license_list_version="3.24",
    )


@pytest.fixture
def registry() -> SchemaRegistry:
    return SchemaRegistry()


@pytest.fixture
def spdx_registry(registry: SchemaRegistry) -> Iterator[SchemaRegistry]:
    with registry.install(SPDX_SCHEMA):
        yield registry


@pytest.fixture
def app_sbom() -> SpdxPayload:
    return load_spdx_fixture("app_sbom.json")


@pytest.fixture
def lib_sbom() -> SpdxPayload:
    return load_spdx_fixture("lib_sbom.json")
