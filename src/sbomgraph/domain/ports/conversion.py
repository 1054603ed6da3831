"""Ports for turning documents into graph statements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sbomgraph.domain.graph.statements import Statement


@runtime_checkable
class StatementConverter(Protocol):
    """Convert one parsed document into an ordered statement sequence.

    Raises ``ConversionFormatError`` when the document cannot be converted.
    """

    def convert(self, document: Mapping[str, object]) -> tuple[Statement, ...]: ...


__all__ = ["StatementConverter"]
