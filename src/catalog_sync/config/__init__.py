"""Application configuration helpers."""

from __future__ import annotations

from .env import (
    flag_env_var,
    int_env_var,
    optional_env_var,
    require_env_var,
    require_env_vars,
)
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .shopify import (
    WEBHOOK_TOPICS,
    ShopifyConfig,
    ShopifyCredentials,
    get_shopify_config,
    get_shopify_credentials,
)
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "WEBHOOK_TOPICS",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ShopifyConfig",
    "ShopifyCredentials",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "flag_env_var",
    "get_database_config",
    "get_shopify_config",
    "get_shopify_credentials",
    "get_storage_config",
    "get_sync_config",
    "int_env_var",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
