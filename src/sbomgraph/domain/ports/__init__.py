"""Domain port definitions for adapters."""

from __future__ import annotations

from .conversion import StatementConverter
from .fetching import SbomFetcher
from .graph import GraphMerger

__all__ = ["GraphMerger", "SbomFetcher", "StatementConverter"]
