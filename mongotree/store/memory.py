"""
mongotree - In-memory stores

Process-local NamespaceStore/BlobStore pair with the same document shapes
as the MongoDB stores. Used for tests and for ephemeral trees.
"""
import copy
import io
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from bson import ObjectId

from mongotree.core.errors import AlreadyExistsError, NotFoundError
from mongotree.models import FileRecord, Folder
from mongotree.store.base import BlobStore, NamespaceStore, PointUpdate
from mongotree.tree.paths import is_under

DEFAULT_CHUNK_SIZE = 255 * 1024


def _set_dotted(doc: Dict[str, Any], field: str, value: Any) -> None:
    *parents, leaf = field.split(".")
    for key in parents:
        doc = doc.setdefault(key, {})
    doc[leaf] = copy.deepcopy(value)


def _unset_dotted(doc: Dict[str, Any], field: str) -> None:
    *parents, leaf = field.split(".")
    for key in parents:
        doc = doc.get(key)
        if not isinstance(doc, dict):
            return
    doc.pop(leaf, None)


class MemoryNamespaceStore(NamespaceStore):
    """Dict-backed NamespaceStore."""

    def __init__(self):
        self.folders: Dict[ObjectId, Dict[str, Any]] = {}
        self.files: Dict[ObjectId, Dict[str, Any]] = {}

    # ==================== Folders ====================

    async def find_folder(self, path: str) -> Optional[Folder]:
        for doc in self.folders.values():
            if doc["path"] == path:
                return Folder.from_document(copy.deepcopy(doc))
        return None

    async def insert_folder(self, folder: Folder) -> Any:
        if any(doc["path"] == folder.path for doc in self.folders.values()):
            raise AlreadyExistsError(f"Folder with path {folder.path} already exists", folder.path)
        doc = folder.to_document()
        doc.setdefault("_id", ObjectId())
        self.folders[doc["_id"]] = copy.deepcopy(doc)
        return doc["_id"]

    async def find_folders_under(self, prefix: str) -> List[Folder]:
        return self._select_folders(lambda doc: is_under(doc["parentDirectory"], prefix))

    async def find_child_folders(self, parent: str) -> List[Folder]:
        return self._select_folders(lambda doc: doc["parentDirectory"] == parent)

    def _select_folders(self, predicate: Callable[[Dict], bool]) -> List[Folder]:
        docs = [doc for doc in self.folders.values() if predicate(doc)]
        docs.sort(key=lambda doc: (doc["path"], doc["_id"]))
        return [Folder.from_document(copy.deepcopy(doc)) for doc in docs]

    async def update_folders(self, updates: Sequence[PointUpdate]) -> int:
        return self._apply_point_updates(self.folders, updates)

    async def update_folder_metadata(
        self,
        path: str,
        set_fields: Dict[str, Any],
        unset_fields: Iterable[str],
    ) -> int:
        for doc in self.folders.values():
            if doc["path"] == path:
                for key, value in (set_fields or {}).items():
                    _set_dotted(doc, f"customMetadata.{key}", value)
                for key in unset_fields or []:
                    _unset_dotted(doc, f"customMetadata.{key}")
                return 1
        return 0

    async def delete_folders(self, folder_ids: Sequence[Any]) -> int:
        deleted = 0
        for folder_id in folder_ids:
            if self.folders.pop(folder_id, None) is not None:
                deleted += 1
        return deleted

    # ==================== File records ====================

    async def find_file_versions(self, path: str) -> List[FileRecord]:
        docs = [doc for doc in self.files.values() if doc["metadata"].get("path") == path]
        docs.sort(key=lambda doc: (doc["uploadDate"], doc["_id"]))
        return [FileRecord.from_document(copy.deepcopy(doc)) for doc in docs]

    async def find_files_under(self, prefix: str, latest_only: bool = True) -> List[FileRecord]:
        return self._select_files(
            lambda meta: is_under(meta.get("parentDirectory", ""), prefix)
            and (meta.get("isLatest") is True or not latest_only)
        )

    async def find_child_files(self, parent: str) -> List[FileRecord]:
        return self._select_files(
            lambda meta: meta.get("parentDirectory") == parent and meta.get("isLatest") is True
        )

    def _select_files(self, predicate: Callable[[Dict], bool]) -> List[FileRecord]:
        docs = [doc for doc in self.files.values() if predicate(doc["metadata"])]
        docs.sort(key=lambda doc: (doc["metadata"].get("path", ""), doc["uploadDate"], doc["_id"]))
        return [FileRecord.from_document(copy.deepcopy(doc)) for doc in docs]

    async def update_file_versions(
        self,
        path: str,
        set_fields: Optional[Dict[str, Any]] = None,
        unset_fields: Optional[Iterable[str]] = None,
        latest_only: bool = False,
        exclude_id: Any = None,
    ) -> int:
        # Materialize first: set_fields may rewrite metadata.path itself
        targets = [
            doc for doc in self.files.values()
            if doc["metadata"].get("path") == path
            and (doc["metadata"].get("isLatest") is True or not latest_only)
            and doc["_id"] != exclude_id
        ]
        for doc in targets:
            for field, value in (set_fields or {}).items():
                _set_dotted(doc, field, value)
            for field in unset_fields or []:
                _unset_dotted(doc, field)
        return len(targets)

    async def update_files(self, updates: Sequence[PointUpdate]) -> int:
        return self._apply_point_updates(self.files, updates)

    @staticmethod
    def _apply_point_updates(table: Dict[ObjectId, Dict[str, Any]], updates: Sequence[PointUpdate]) -> int:
        matched = 0
        for record_id, fields in updates:
            doc = table.get(record_id)
            if doc is None:
                continue
            matched += 1
            for field, value in fields.items():
                _set_dotted(doc, field, value)
        return matched


class MemoryDownloadStream:
    """Minimal stand-in for a GridFS download stream."""

    def __init__(self, file_id: ObjectId, filename: str, data: bytes, metadata: Dict[str, Any]):
        self._id = file_id
        self.filename = filename
        self.length = len(data)
        self.metadata = metadata
        self._buffer = io.BytesIO(data)

    async def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)


class MemoryBlobStore(BlobStore):
    """BlobStore writing its version records into a MemoryNamespaceStore."""

    def __init__(self, namespace: MemoryNamespaceStore):
        self._namespace = namespace
        self.contents: Dict[ObjectId, bytes] = {}

    async def upload(
        self,
        filename: str,
        source: Any,
        metadata: Dict[str, Any],
        chunk_size_bytes: Optional[int] = None,
    ) -> Any:
        if isinstance(source, (bytes, bytearray, memoryview)):
            data = bytes(source)
        else:
            data = source.read()
        file_id = ObjectId()
        self.contents[file_id] = data
        self._namespace.files[file_id] = {
            "_id": file_id,
            "length": len(data),
            "chunkSize": chunk_size_bytes or DEFAULT_CHUNK_SIZE,
            "uploadDate": datetime.now(timezone.utc),
            "filename": filename,
            "metadata": copy.deepcopy(metadata),
        }
        return file_id

    async def open_download_stream(self, file_id: Any) -> MemoryDownloadStream:
        doc = self._namespace.files.get(file_id)
        if doc is None or file_id not in self.contents:
            raise NotFoundError(f"File with id {file_id} does not exist")
        return MemoryDownloadStream(file_id, doc["filename"], self.contents[file_id], copy.deepcopy(doc["metadata"]))

    async def delete(self, file_id: Any) -> None:
        if self._namespace.files.pop(file_id, None) is None:
            raise NotFoundError(f"File with id {file_id} does not exist")
        self.contents.pop(file_id, None)
