from __future__ import annotations

from sbomgraph.adapters.github import GitHubSbomClient
from sbomgraph.adapters.spdx import SpdxStatementConverter
from sbomgraph.config import GitHubConfig, ResilienceConfig
from sbomgraph.domain.graph import GraphStore
from sbomgraph.domain.ports import GraphMerger, SbomFetcher, StatementConverter
from sbomgraph.domain.schema import SchemaRegistry


def test_adapters_satisfy_ports(registry: SchemaRegistry) -> None:
    github = GitHubConfig(token="token", resilience=ResilienceConfig(name="github", cache=None))

    assert isinstance(SpdxStatementConverter(registry), StatementConverter)
    assert isinstance(GraphStore(registry), GraphMerger)
    assert isinstance(GitHubSbomClient(config=github), SbomFetcher)
    assert not isinstance(object(), GraphMerger)
