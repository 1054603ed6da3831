"""Merge SPDX SBOMs into one graph with canonical SPDX license identifiers."""

from __future__ import annotations

from importlib import metadata

try:
    __version__ = metadata.version("sbomgraph")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"
