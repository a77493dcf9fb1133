"""
mongotree - Folder trees with versioned files on MongoDB/GridFS

MongoDB collections are flat; mongotree keeps a path-addressed tree on
top of them:
- Folders as documents with absolute `path` and `parentDirectory`
- Files as GridFS versions with a single `isLatest` version per path
- Cascading folder rename and delete
- Zip archives of any subtree

Direct imports: from mongotree import FileTree
"""

__version__ = "0.1.0"

from mongotree.core.config import AppConfig, ConfigManager
from mongotree.core.errors import (
    FileTreeError,
    InvalidArgumentError,
    InvalidCharacterError,
    AlreadyExistsError,
    NotFoundError,
    ReservedFieldError,
    CannotRenameRootError,
    CannotDeleteCWDError,
)
from mongotree.file_tree import FileTree
from mongotree.models import FileRecord, Folder
from mongotree.tree import ArchiveOutput

__all__ = [
    "__version__",
    "AppConfig",
    "ConfigManager",
    "FileTree",
    "FileRecord",
    "Folder",
    "ArchiveOutput",
    "FileTreeError",
    "InvalidArgumentError",
    "InvalidCharacterError",
    "AlreadyExistsError",
    "NotFoundError",
    "ReservedFieldError",
    "CannotRenameRootError",
    "CannotDeleteCWDError",
]
