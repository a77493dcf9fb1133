"""
mongotree - Subtree enumeration

Collects the closed set of folders and latest files below a folder path.
"""
from dataclasses import dataclass, field
from typing import List

from loguru import logger

from mongotree.models import FileRecord, Folder
from mongotree.store.base import NamespaceStore


@dataclass
class Subtree:
    """Folders and latest files below `path`, each sorted by path."""
    path: str
    folders: List[Folder] = field(default_factory=list)
    files: List[FileRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.folders) + len(self.files)


class SubtreeEnumerator:
    """
    Read-only view of a subtree.

    Membership is decided on `parentDirectory` with a separator-bounded
    prefix match, so enumerating "a/b" never picks up "a/b2". Folders are
    read before files; a writer interleaving between the two reads is not
    excluded since the store has no snapshot reads.
    """

    def __init__(self, store: NamespaceStore):
        self._store = store

    async def enumerate(self, path: str) -> Subtree:
        folders = await self._store.find_folders_under(path)
        files = await self._store.find_files_under(path, latest_only=True)
        logger.debug(f"Enumerated {path}: {len(folders)} folders, {len(files)} files")
        return Subtree(path=path, folders=folders, files=files)

    async def all_versions(self, path: str) -> List[FileRecord]:
        """Every file version below `path`, latest or not."""
        return await self._store.find_files_under(path, latest_only=False)
