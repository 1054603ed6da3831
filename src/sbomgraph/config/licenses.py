"""SPDX license list locations."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .env import env_value
from .http_resilience import ONE_DAY_SECONDS, CacheConfig, ResilienceConfig

SPDX_LICENSE_LIST_URL = (
    "https://raw.githubusercontent.com/spdx/license-list-data/main/json/licenses.json"
)
SPDX_EXCEPTIONS_URL = (
    "https://raw.githubusercontent.com/spdx/license-list-data/main/json/exceptions.json"
)


def default_license_list_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="spdx-license-list",
        cache=CacheConfig(backend="sqlite", default_ttl_seconds=ONE_DAY_SECONDS),
    )


@dataclass(frozen=True, slots=True)
class LicenseListConfig:
    """Where to read the canonical license vocabulary from.

    ``licenses`` and ``exceptions`` are either local file paths or http(s) URLs.
    ``exceptions`` may be ``None`` to skip license exceptions entirely.
    """

    licenses: str = SPDX_LICENSE_LIST_URL
    exceptions: str | None = SPDX_EXCEPTIONS_URL
    resilience: ResilienceConfig = field(default_factory=default_license_list_resilience)


def get_license_list_config(*, licenses: str | None = None) -> LicenseListConfig:
    env_licenses = env_value("SBOMGRAPH_LICENSE_LIST")
    # An empty SBOMGRAPH_LICENSE_EXCEPTIONS turns exceptions off.
    env_exceptions = os.getenv("SBOMGRAPH_LICENSE_EXCEPTIONS")
    return LicenseListConfig(
        licenses=licenses or env_licenses or SPDX_LICENSE_LIST_URL,
        exceptions=env_exceptions if env_exceptions is not None else SPDX_EXCEPTIONS_URL,
    )
