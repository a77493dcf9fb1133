"""
mongotree - Version chain

Every file path owns an ordered list of version records, of which exactly
one is flagged `isLatest`. Uploading stores the new content as the latest
and then demotes every other latest at the path.
"""
import asyncio
import weakref
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from mongotree.core.errors import (
    AlreadyExistsError,
    InvalidArgumentError,
    NotFoundError,
    ReservedFieldError,
)
from mongotree.models import CustomMetadata, FileRecord
from mongotree.models.base import IS_LATEST_KEY, PARENT_DIRECTORY_KEY, PATH_KEY
from mongotree.store.base import BlobStore, NamespaceStore
from mongotree.tree import paths

IS_LATEST_FIELD = f"metadata.{IS_LATEST_KEY}"
PATH_FIELD = f"metadata.{PATH_KEY}"
FILE_IS_LATEST_MESSAGE = "Cannot delete or change the type of 'isLatest' metadata property using this method"


def check_reserved_keys(
    upsert: Optional[Dict[str, Any]],
    delete_keys: Optional[Iterable[str]],
    is_latest_message: str,
) -> None:
    """Reject metadata updates touching fields the tree maintains itself."""
    upsert = upsert or {}
    delete_keys = list(delete_keys or [])
    if PATH_KEY in upsert or PATH_KEY in delete_keys:
        raise ReservedFieldError("Cannot change or delete 'path' metadata property using this method")
    if PARENT_DIRECTORY_KEY in upsert or PARENT_DIRECTORY_KEY in delete_keys:
        raise ReservedFieldError("Cannot change or delete 'parentDirectory' metadata property using this method")
    if IS_LATEST_KEY in upsert or IS_LATEST_KEY in delete_keys:
        raise ReservedFieldError(is_latest_message)


def is_readable_source(source: Any) -> bool:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return True
    return callable(getattr(source, "read", None))


class VersionChain:
    """
    Maintains the at-most-one-latest invariant per file path.

    Uploads to the same path are serialised by a per-path lock within this
    process. The new version is stored before older ones are demoted, so a
    failed transfer leaves the previous latest in place. A failed demotion or
    a concurrent writer in another process can leave two versions flagged;
    reads take the newest and the next upload to that path clears the rest.
    """

    def __init__(self, store: NamespaceStore, blobs: BlobStore):
        self._store = store
        self._blobs = blobs
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, path: str) -> asyncio.Lock:
        lock = self._locks.get(path)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[path] = lock
        return lock

    # ==================== Writes ====================

    async def upload(
        self,
        path: str,
        source: Any,
        custom_metadata: Optional[CustomMetadata] = None,
        chunk_size_bytes: Optional[int] = None,
    ) -> Any:
        """
        Store a new latest version at `path`.

        Args:
            path: Absolute file path
            source: bytes or a readable object (``read()`` returning bytes)
            custom_metadata: Extra metadata stored beside the reserved keys
            chunk_size_bytes: Blob store chunk size

        Returns:
            Id of the new version record
        """
        check_reserved_keys(custom_metadata, None, FILE_IS_LATEST_MESSAGE)
        parent, name = paths.split(path)
        paths.validate_name(name, kind="file")
        if not is_readable_source(source):
            raise InvalidArgumentError("Argument for parameter source is not a valid readable stream", path)
        if isinstance(source, (bytearray, memoryview)):
            source = bytes(source)

        metadata = {
            **(custom_metadata or {}),
            PARENT_DIRECTORY_KEY: parent,
            PATH_KEY: path,
            IS_LATEST_KEY: True,
        }

        lock = self._lock_for(path)
        async with lock:
            file_id = await self._blobs.upload(name, source, metadata, chunk_size_bytes)
            demoted = await self._store.update_file_versions(
                path, set_fields={IS_LATEST_FIELD: False}, latest_only=True, exclude_id=file_id
            )

        logger.info(f"Uploaded {path} as {file_id} (demoted {demoted} previous latest)")
        return file_id

    async def change_name(self, new_name: str, path: str) -> str:
        """
        Rename every version of the file at `path` within its folder.

        Returns:
            The new path
        """
        versions = await self._store.find_file_versions(path)
        if not versions:
            raise NotFoundError(f"File with path {path} does not exist", path)
        paths.validate_name(new_name, kind="file")

        new_path = paths.join(versions[0].parent_directory, new_name)
        if new_path == path:
            return path
        if await self._store.find_file_versions(new_path):
            raise AlreadyExistsError(
                f"File with name {new_name} already exists in the specified directory", new_path
            )

        await self._store.update_file_versions(
            path, set_fields={PATH_FIELD: new_path, "filename": new_name}
        )
        logger.info(f"Renamed file {path} -> {new_path} ({len(versions)} versions)")
        return new_path

    async def change_metadata(
        self,
        path: str,
        upsert: Optional[CustomMetadata] = None,
        delete_keys: Optional[Iterable[str]] = None,
        all_versions: bool = False,
    ) -> int:
        """
        Set and remove custom metadata keys on the latest or on every version.

        Returns:
            Number of version records touched
        """
        delete_keys = list(delete_keys or [])
        check_reserved_keys(upsert, delete_keys, FILE_IS_LATEST_MESSAGE)
        if not await self._store.find_file_versions(path):
            raise NotFoundError(f"File with path {path} does not exist", path)

        matched = await self._store.update_file_versions(
            path,
            set_fields={f"metadata.{k}": v for k, v in (upsert or {}).items()},
            unset_fields=[f"metadata.{k}" for k in delete_keys],
            latest_only=not all_versions,
        )
        logger.info(f"Updated metadata of {matched} version(s) at {path}")
        return matched

    async def delete(self, path: str) -> int:
        """
        Delete every version at `path` together with its content.

        Returns:
            Number of versions deleted
        """
        versions = await self._store.find_file_versions(path)
        if not versions:
            raise NotFoundError(f"File with path {path} does not exist", path)

        for version in versions:
            await self._blobs.delete(version.id)

        logger.info(f"Deleted {path} ({len(versions)} versions)")
        return len(versions)

    # ==================== Reads ====================

    async def versions(self, path: str) -> List[FileRecord]:
        """All versions at `path`, oldest first."""
        return await self._store.find_file_versions(path)

    async def latest(self, path: str) -> FileRecord:
        """
        The latest version at `path`.

        If a race left several versions flagged latest, the newest wins.
        """
        flagged = [v for v in await self._store.find_file_versions(path) if v.is_latest]
        if not flagged:
            raise NotFoundError(f"File with path {path} does not exist", path)
        if len(flagged) > 1:
            logger.warning(f"{len(flagged)} versions flagged latest at {path}; using newest")
        return flagged[-1]

    async def open(self, path: str) -> Any:
        record = await self.latest(path)
        return await self._blobs.open_download_stream(record.id)

    async def read(self, path: str) -> bytes:
        record = await self.latest(path)
        return await self._blobs.read(record.id)
