"""Defaults for license resolution and document loading."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float
from .errors import ConfigurationError

DEFAULT_DAMPENING_WEIGHT = 0.9
DEFAULT_LOW_CONFIDENCE_THRESHOLD = 0.85
DEFAULT_LICENSE_FIELDS = ("licenseConcluded",)
DEFAULT_MAX_ATTEMPTS = 1


@dataclass(frozen=True, slots=True)
class ResolverConfig:
    dampening_weight: float = DEFAULT_DAMPENING_WEIGHT
    low_confidence_threshold: float = DEFAULT_LOW_CONFIDENCE_THRESHOLD
    fields: tuple[str, ...] = DEFAULT_LICENSE_FIELDS

    def __post_init__(self) -> None:
        if not 0.0 <= self.dampening_weight <= 1.0:
            raise ConfigurationError(
                f"Dampening weight must be within [0, 1], got {self.dampening_weight}"
            )
        if not 0.0 <= self.low_confidence_threshold <= 1.0:
            raise ConfigurationError(
                "Low-confidence threshold must be within [0, 1], "
                f"got {self.low_confidence_threshold}"
            )


@dataclass(frozen=True, slots=True)
class LoaderConfig:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be >= 1, got {self.max_attempts}")


def get_resolver_config() -> ResolverConfig:
    return ResolverConfig(
        dampening_weight=env_float(
            "SBOMGRAPH_DAMPENING_WEIGHT", DEFAULT_DAMPENING_WEIGHT
        ),
        low_confidence_threshold=env_float(
            "SBOMGRAPH_LOW_CONFIDENCE_THRESHOLD", DEFAULT_LOW_CONFIDENCE_THRESHOLD
        ),
    )


def get_loader_config() -> LoaderConfig:
    return LoaderConfig()
