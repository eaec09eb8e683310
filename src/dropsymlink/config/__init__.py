"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var
from .errors import ConfigurationError
from .extension import EXTENSION_CLASS_ID, EXTENSION_NAME, get_extension_config
from .logging import configure_logging
from .storage import (
    STORE_BACKENDS,
    DatabaseConfig,
    StorageConfig,
    StoreBackend,
    StoreConfig,
    get_database_config,
    get_storage_config,
    get_store_config,
    parse_store_backend,
)

__all__ = [
    "EXTENSION_CLASS_ID",
    "EXTENSION_NAME",
    "STORE_BACKENDS",
    "ConfigurationError",
    "DatabaseConfig",
    "StorageConfig",
    "StoreBackend",
    "StoreConfig",
    "configure_logging",
    "get_database_config",
    "get_extension_config",
    "get_storage_config",
    "get_store_config",
    "optional_env_var",
    "parse_store_backend",
]
