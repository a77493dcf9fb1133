"""
mongotree Tree Algorithms

Path validation, version chains, subtree enumeration, cascading directory
operations and archives.
"""
from mongotree.tree.paths import SEPARATOR, validate_name
from mongotree.tree.versions import VersionChain
from mongotree.tree.subtree import Subtree, SubtreeEnumerator
from mongotree.tree.directories import DirectoryOperations, Listing, RenamePlan
from mongotree.tree.archive import ArchiveBuilder, ArchiveOutput, ArchiveWriter, ZipArchiveWriter

__all__ = [
    "SEPARATOR",
    "validate_name",
    "VersionChain",
    "Subtree",
    "SubtreeEnumerator",
    "DirectoryOperations",
    "Listing",
    "RenamePlan",
    "ArchiveBuilder",
    "ArchiveOutput",
    "ArchiveWriter",
    "ZipArchiveWriter",
]
