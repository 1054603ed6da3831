"""Comparison keys for license identifiers."""

from __future__ import annotations

import re

_NON_ALPHANUMERIC = re.compile(r"[\W_]+")


def normalize_identifier(value: str) -> str:
    """Return the lower-cased ``value`` with every non-alphanumeric run removed.

    The result is a comparison key only and is never persisted.
    """

    return _NON_ALPHANUMERIC.sub("", value.lower())
