"""Settings loaded from the environment (and ``.env`` through the CLI)."""

from __future__ import annotations

from .env import env_float, env_value, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .github import GitHubConfig, default_github_resilience, get_github_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .licenses import LicenseListConfig, get_license_list_config
from .logging import configure_logging
from .pipeline import LoaderConfig, ResolverConfig, get_loader_config, get_resolver_config
from .storage import StorageConfig, get_http_cache_path, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "GitHubConfig",
    "LicenseListConfig",
    "LoaderConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "ResolverConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "default_github_resilience",
    "env_float",
    "env_value",
    "get_github_config",
    "get_http_cache_path",
    "get_license_list_config",
    "get_loader_config",
    "get_resolver_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
]
