"""Ports for merging statements into graph snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sbomgraph.domain.graph.snapshot import GraphSnapshot
    from sbomgraph.domain.graph.statements import Statement
    from sbomgraph.domain.graph.store import TransactionReport


@runtime_checkable
class GraphMerger(Protocol):
    """Speculatively apply statements to a snapshot, returning both versions.

    Raises ``MergeConflictError`` on a schema violation; the input snapshot is
    never modified.
    """

    def merge(
        self,
        snapshot: GraphSnapshot,
        statements: Iterable[Statement],
    ) -> TransactionReport: ...


__all__ = ["GraphMerger"]
