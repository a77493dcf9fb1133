"""
mongotree - Store interfaces

The tree algorithms only talk to these two collaborators:

- NamespaceStore: folder documents and file-version metadata records.
- BlobStore: file content, keyed by the id of its metadata record.

Neither offers transactions; callers sequence point updates so a retried
operation converges.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from mongotree.models import FileRecord, Folder

# (record id, {dotted field: new value})
PointUpdate = Tuple[Any, Dict[str, Any]]


class NamespaceStore(ABC):
    """Document store holding folders and file-version records."""

    async def ensure_indexes(self) -> None:
        """Create lookup indexes; no-op for stores that do not need them."""

    # ==================== Folders ====================

    @abstractmethod
    async def find_folder(self, path: str) -> Optional[Folder]:
        """Folder stored at exactly `path`, or None."""

    @abstractmethod
    async def insert_folder(self, folder: Folder) -> Any:
        """Insert a folder document and return its id."""

    @abstractmethod
    async def find_folders_under(self, prefix: str) -> List[Folder]:
        """
        Folders whose parentDirectory is `prefix` or lies below it.

        Sorted by path, then id.
        """

    @abstractmethod
    async def find_child_folders(self, parent: str) -> List[Folder]:
        """Folders whose parentDirectory is exactly `parent`, sorted by path."""

    @abstractmethod
    async def update_folders(self, updates: Sequence[PointUpdate]) -> int:
        """Apply `$set`-style point updates by id; return the matched count."""

    @abstractmethod
    async def update_folder_metadata(
        self,
        path: str,
        set_fields: Dict[str, Any],
        unset_fields: Iterable[str],
    ) -> int:
        """Set/unset keys of the folder's customMetadata."""

    @abstractmethod
    async def delete_folders(self, folder_ids: Sequence[Any]) -> int:
        """Delete folder documents by id; return the deleted count."""

    # ==================== File records ====================

    @abstractmethod
    async def find_file_versions(self, path: str) -> List[FileRecord]:
        """Every version stored at `path`, oldest first."""

    @abstractmethod
    async def find_files_under(self, prefix: str, latest_only: bool = True) -> List[FileRecord]:
        """
        File records whose parentDirectory is `prefix` or lies below it.

        Sorted by path, then upload date, then id.
        """

    @abstractmethod
    async def find_child_files(self, parent: str) -> List[FileRecord]:
        """Latest file records whose parentDirectory is exactly `parent`."""

    @abstractmethod
    async def update_file_versions(
        self,
        path: str,
        set_fields: Optional[Dict[str, Any]] = None,
        unset_fields: Optional[Iterable[str]] = None,
        latest_only: bool = False,
        exclude_id: Any = None,
    ) -> int:
        """Set/unset dotted fields on the versions at `path` (skipping `exclude_id`); return matched count."""

    @abstractmethod
    async def update_files(self, updates: Sequence[PointUpdate]) -> int:
        """Apply `$set`-style point updates by id; return the matched count."""


class BlobStore(ABC):
    """Content store; uploading also creates the file-version record."""

    @abstractmethod
    async def upload(
        self,
        filename: str,
        source: Any,
        metadata: Dict[str, Any],
        chunk_size_bytes: Optional[int] = None,
    ) -> Any:
        """
        Store the content of `source` (bytes or a readable object).

        Returns the id of the new record once the transfer completes.
        """

    @abstractmethod
    async def open_download_stream(self, file_id: Any) -> Any:
        """Stream object exposing `async read(size=-1)`."""

    async def read(self, file_id: Any) -> bytes:
        stream = await self.open_download_stream(file_id)
        return await stream.read()

    @abstractmethod
    async def delete(self, file_id: Any) -> None:
        """Remove the record and its content."""
