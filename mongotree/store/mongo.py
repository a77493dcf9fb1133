"""
mongotree - MongoDB stores

Folders live in a plain collection; file versions live in a GridFS bucket,
whose `<bucket>.files` collection doubles as the file-metadata store.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence

from gridfs import AsyncGridFSBucket
from loguru import logger
from pymongo import ASCENDING, UpdateOne
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError

from mongotree.core.database.manager import MongoManager
from mongotree.core.errors import AlreadyExistsError
from mongotree.models import FileRecord, Folder
from mongotree.store.base import BlobStore, NamespaceStore, PointUpdate
from mongotree.tree.paths import prefix_pattern

FOLDER_SORT = [("path", ASCENDING), ("_id", ASCENDING)]
VERSION_SORT = [("uploadDate", ASCENDING), ("_id", ASCENDING)]
FILE_SORT = [("metadata.path", ASCENDING), ("uploadDate", ASCENDING), ("_id", ASCENDING)]


class MongoNamespaceStore(NamespaceStore):
    """NamespaceStore over a folder collection and a GridFS files collection."""

    def __init__(self, folders: AsyncCollection, files: AsyncCollection):
        self._folders = folders
        self._files = files

    @classmethod
    def from_manager(cls, manager: MongoManager, folder_collection_name: str, bucket_name: str) -> "MongoNamespaceStore":
        return cls(
            manager.get_collection(folder_collection_name),
            manager.get_collection(f"{bucket_name}.files"),
        )

    async def ensure_indexes(self) -> None:
        # Unique folder paths also close the check-then-insert race in create_folder
        await self._folders.create_index("path", unique=True)
        await self._folders.create_index("parentDirectory")
        await self._files.create_index([("metadata.path", ASCENDING), ("metadata.isLatest", ASCENDING)])
        await self._files.create_index("metadata.parentDirectory")
        logger.debug(f"Indexes ensured on {self._folders.name} and {self._files.name}")

    # ==================== Folders ====================

    async def find_folder(self, path: str) -> Optional[Folder]:
        doc = await self._folders.find_one({"path": path})
        if not doc:
            return None
        return Folder.from_document(doc)

    async def insert_folder(self, folder: Folder) -> Any:
        try:
            result = await self._folders.insert_one(folder.to_document())
        except DuplicateKeyError as e:
            raise AlreadyExistsError(f"Folder with path {folder.path} already exists", folder.path) from e
        return result.inserted_id

    async def find_folders_under(self, prefix: str) -> List[Folder]:
        query = {"parentDirectory": {"$regex": prefix_pattern(prefix)}}
        return await self._find_folders(query)

    async def find_child_folders(self, parent: str) -> List[Folder]:
        return await self._find_folders({"parentDirectory": parent})

    async def _find_folders(self, query: Dict) -> List[Folder]:
        results = []
        async for doc in self._folders.find(query).sort(FOLDER_SORT):
            results.append(Folder.from_document(doc))
        return results

    async def update_folders(self, updates: Sequence[PointUpdate]) -> int:
        return await self._bulk_set(self._folders, updates)

    async def update_folder_metadata(
        self,
        path: str,
        set_fields: Dict[str, Any],
        unset_fields: Iterable[str],
    ) -> int:
        update = self._build_update(
            {f"customMetadata.{k}": v for k, v in (set_fields or {}).items()},
            [f"customMetadata.{k}" for k in (unset_fields or [])],
        )
        if not update:
            return 0
        result = await self._folders.update_one({"path": path}, update)
        return result.matched_count

    async def delete_folders(self, folder_ids: Sequence[Any]) -> int:
        if not folder_ids:
            return 0
        result = await self._folders.delete_many({"_id": {"$in": list(folder_ids)}})
        return result.deleted_count

    # ==================== File records ====================

    async def find_file_versions(self, path: str) -> List[FileRecord]:
        return await self._find_files({"metadata.path": path}, VERSION_SORT)

    async def find_files_under(self, prefix: str, latest_only: bool = True) -> List[FileRecord]:
        query = {"metadata.parentDirectory": {"$regex": prefix_pattern(prefix)}}
        if latest_only:
            query["metadata.isLatest"] = True
        return await self._find_files(query, FILE_SORT)

    async def find_child_files(self, parent: str) -> List[FileRecord]:
        query = {"metadata.parentDirectory": parent, "metadata.isLatest": True}
        return await self._find_files(query, FILE_SORT)

    async def _find_files(self, query: Dict, sort: List) -> List[FileRecord]:
        results = []
        async for doc in self._files.find(query).sort(sort):
            results.append(FileRecord.from_document(doc))
        return results

    async def update_file_versions(
        self,
        path: str,
        set_fields: Optional[Dict[str, Any]] = None,
        unset_fields: Optional[Iterable[str]] = None,
        latest_only: bool = False,
        exclude_id: Any = None,
    ) -> int:
        update = self._build_update(set_fields or {}, list(unset_fields or []))
        if not update:
            return 0
        query = {"metadata.path": path}
        if latest_only:
            query["metadata.isLatest"] = True
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        result = await self._files.update_many(query, update)
        return result.matched_count

    async def update_files(self, updates: Sequence[PointUpdate]) -> int:
        return await self._bulk_set(self._files, updates)

    # ==================== Helpers ====================

    @staticmethod
    def _build_update(set_fields: Dict[str, Any], unset_fields: List[str]) -> Dict[str, Any]:
        update: Dict[str, Any] = {}
        if set_fields:
            update["$set"] = dict(set_fields)
        if unset_fields:
            update["$unset"] = {field: "" for field in unset_fields}
        return update

    @staticmethod
    async def _bulk_set(collection: AsyncCollection, updates: Sequence[PointUpdate]) -> int:
        if not updates:
            return 0
        requests = [UpdateOne({"_id": record_id}, {"$set": fields}) for record_id, fields in updates]
        result = await collection.bulk_write(requests, ordered=False)
        return result.matched_count


class GridFSBlobStore(BlobStore):
    """BlobStore over a GridFS bucket."""

    def __init__(self, bucket: AsyncGridFSBucket):
        self._bucket = bucket

    @classmethod
    def from_manager(cls, manager: MongoManager, bucket_name: str, chunk_size_bytes: Optional[int] = None) -> "GridFSBlobStore":
        return cls(manager.get_bucket(bucket_name, chunk_size_bytes))

    async def upload(
        self,
        filename: str,
        source: Any,
        metadata: Dict[str, Any],
        chunk_size_bytes: Optional[int] = None,
    ) -> Any:
        return await self._bucket.upload_from_stream(
            filename,
            source,
            chunk_size_bytes=chunk_size_bytes,
            metadata=metadata,
        )

    async def open_download_stream(self, file_id: Any) -> Any:
        return await self._bucket.open_download_stream(file_id)

    async def delete(self, file_id: Any) -> None:
        await self._bucket.delete(file_id)
