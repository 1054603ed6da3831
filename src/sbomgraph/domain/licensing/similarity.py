"""Version-aware similarity between license strings."""

from __future__ import annotations

import re

from rapidfuzz.distance import JaroWinkler

from .normalize import normalize_identifier

DEFAULT_DAMPENING_WEIGHT = 0.9

_VERSION_TOKEN = re.compile(r"\d+")


def version_token(value: str) -> str | None:
    """Return the first run of digits in ``value``, if any."""

    match = _VERSION_TOKEN.search(value)
    if match is None:
        return None
    return match.group(0)


def base_similarity(left: str, right: str) -> float:
    """Jaro-Winkler similarity of the normalized forms of ``left`` and ``right``."""

    return JaroWinkler.similarity(normalize_identifier(left), normalize_identifier(right))


def license_similarity(
    left: str,
    right: str,
    *,
    weight: float = DEFAULT_DAMPENING_WEIGHT,
) -> float:
    """Score ``left`` against ``right`` in ``[0, 1]``.

    The base score is kept only when both raw inputs carry the same version token;
    otherwise it is multiplied by ``weight``. No threshold is applied here.
    """

    base_score = base_similarity(left, right)
    left_version = version_token(left)
    right_version = version_token(right)
    if left_version is not None and right_version is not None and left_version == right_version:
        return base_score
    return base_score * weight
