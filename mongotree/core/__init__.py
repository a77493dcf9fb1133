"""
mongotree core - configuration, logging, lifecycle and database plumbing.
"""
from .base_system import BaseSystem
from .config import (
    ConfigManager,
    AppConfig,
    MongoSettings,
    TreeSettings,
    GeneralSettings,
)
from .errors import (
    FileTreeError,
    InvalidArgumentError,
    InvalidCharacterError,
    AlreadyExistsError,
    NotFoundError,
    ReservedFieldError,
    CannotRenameRootError,
    CannotDeleteCWDError,
)
from .logging import setup_logging

__all__ = [
    "BaseSystem",

    # Configuration
    "ConfigManager",
    "AppConfig",
    "MongoSettings",
    "TreeSettings",
    "GeneralSettings",

    # Errors
    "FileTreeError",
    "InvalidArgumentError",
    "InvalidCharacterError",
    "AlreadyExistsError",
    "NotFoundError",
    "ReservedFieldError",
    "CannotRenameRootError",
    "CannotDeleteCWDError",

    "setup_logging",
]
