"""
mongotree Models Package

Exports the namespace records.
"""
from mongotree.models.base import (
    CustomMetadata,
    MetadataValue,
    RESERVED_KEYS,
)
from mongotree.models.folder import Folder
from mongotree.models.file_record import FileRecord

__all__ = [
    "CustomMetadata",
    "MetadataValue",
    "RESERVED_KEYS",
    "Folder",
    "FileRecord",
]
