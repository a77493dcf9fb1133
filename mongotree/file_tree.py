"""
mongotree - FileTree facade

Entry point for a hierarchical tree of folders and versioned files stored
in MongoDB. Folders are documents in a folder collection; files are
GridFS versions whose metadata carries `path`, `parentDirectory` and
`isLatest`.
"""
from typing import Any, Callable, Iterable, List, Optional, Union

from loguru import logger

from mongotree.core.base_system import BaseSystem
from mongotree.core.config import AppConfig
from mongotree.core.database.manager import MongoManager
from mongotree.core.errors import InvalidArgumentError
from mongotree.core.logging import setup_logging
from mongotree.models import CustomMetadata, FileRecord
from mongotree.store.base import BlobStore, NamespaceStore
from mongotree.store.memory import MemoryBlobStore, MemoryNamespaceStore
from mongotree.store.mongo import GridFSBlobStore, MongoNamespaceStore
from mongotree.tree import paths
from mongotree.tree.archive import ArchiveBuilder, ArchiveOutput, ArchiveWriter, ZipArchiveWriter
from mongotree.tree.directories import DirectoryOperations, Listing
from mongotree.tree.subtree import SubtreeEnumerator
from mongotree.tree.versions import VersionChain

DEFAULT_CHUNK_SIZE = 1048576


class FileTree(BaseSystem):
    """
    A folder tree with a current working directory.

    Each instance owns its own working directory; several instances may
    share one namespace but nothing serialises multi-step operations across
    them (see VersionChain and DirectoryOperations).

    Usage:
        async with FileTree.from_config(config) as tree:
            await tree.create_folder("reports")
            await tree.change_directory("reports", relative=True)
            await tree.upload_file(open("q1.pdf", "rb"), "q1.pdf")
            archive = await tree.download_folder(tree.root_name, "base64")
    """

    def __init__(
        self,
        store: NamespaceStore,
        blobs: BlobStore,
        root_name: str,
        chunk_size_bytes: int = DEFAULT_CHUNK_SIZE,
        writer_factory: Callable[[], ArchiveWriter] = ZipArchiveWriter,
        manager: Optional[MongoManager] = None,
        config: Optional[AppConfig] = None,
        bucket_name: Optional[str] = None,
        folder_collection_name: Optional[str] = None,
    ):
        super().__init__(config)
        self._store = store
        self._blobs = blobs
        self._root_name = root_name
        self._chunk_size_bytes = chunk_size_bytes
        self._manager = manager
        self._bucket_name = bucket_name
        self._folder_collection_name = folder_collection_name
        self._current_working_directory = root_name

        self._versions = VersionChain(store, blobs)
        self._enumerator = SubtreeEnumerator(store)
        self._directories = DirectoryOperations(store, self._versions, self._enumerator, root_name)
        self._archives = ArchiveBuilder(store, blobs, self._enumerator, root_name, writer_factory)

    @classmethod
    def from_config(
        cls,
        config: Optional[AppConfig] = None,
        manager: Optional[MongoManager] = None,
        configure_logging: bool = False,
    ) -> "FileTree":
        """
        Build a MongoDB-backed tree from configuration.

        A manager passed in stays owned by the caller; otherwise the tree
        creates one and closes it on shutdown. With `configure_logging` the
        loguru sinks are set up from `config.general` first.
        """
        config = config or AppConfig()
        if configure_logging:
            setup_logging(config.general.debug_mode, config.general.log_dir)
        owned = manager is None
        manager = manager or MongoManager(config.mongo)
        manager.init()

        tree_settings = config.tree
        store = MongoNamespaceStore.from_manager(
            manager, tree_settings.folder_collection_name, tree_settings.bucket_name
        )
        blobs = GridFSBlobStore.from_manager(manager, tree_settings.bucket_name, tree_settings.chunk_size_bytes)
        return cls(
            store,
            blobs,
            tree_settings.resolved_root_name,
            chunk_size_bytes=tree_settings.chunk_size_bytes,
            manager=manager if owned else None,
            config=config,
            bucket_name=tree_settings.bucket_name,
            folder_collection_name=tree_settings.folder_collection_name,
        )

    @classmethod
    def in_memory(cls, root_name: str = "root", **kwargs) -> "FileTree":
        """Tree backed by process-local stores."""
        store = MemoryNamespaceStore()
        return cls(store, MemoryBlobStore(store), root_name, **kwargs)

    async def initialize(self) -> None:
        logger.info(f"FileTree initializing (root: {self._root_name})")
        await self._store.ensure_indexes()
        await super().initialize()
        logger.info("FileTree ready")

    async def shutdown(self) -> None:
        logger.info("FileTree shutting down")
        if self._manager is not None:
            await self._manager.close()
        await super().shutdown()

    # ==================== Properties ====================

    @property
    def current_working_directory(self) -> str:
        return self._current_working_directory

    @property
    def root_name(self) -> str:
        return self._root_name

    @property
    def bucket_name(self) -> Optional[str]:
        return self._bucket_name

    @property
    def folder_collection_name(self) -> Optional[str]:
        return self._folder_collection_name

    @property
    def store(self) -> NamespaceStore:
        return self._store

    @property
    def blobs(self) -> BlobStore:
        return self._blobs

    # ==================== Folders ====================

    async def create_folder(self, name: str, custom_metadata: Optional[CustomMetadata] = None) -> Any:
        """Create a folder inside the current working directory."""
        return await self._directories.create_folder(name, self._current_working_directory, custom_metadata)

    async def change_directory(self, path: str, relative: bool = False) -> None:
        """
        Change the current working directory.

        Args:
            path: Absolute path, or a path relative to the current working
                directory when `relative` is True
        """
        self._current_working_directory = await self._directories.change_directory(
            path, self._current_working_directory, relative
        )
        logger.debug(f"Working directory is now {self._current_working_directory}")

    async def rename_folder(self, new_name: str, folder_path: str) -> str:
        """Rename a folder; everything below it moves along."""
        return await self._directories.rename_folder(new_name, folder_path)

    async def delete_folder(self, folder_path: str) -> None:
        """Delete a folder with its contents; the root is only emptied."""
        await self._directories.delete_folder(folder_path, self._current_working_directory)

    async def change_folder_metadata(
        self,
        folder_path: str,
        upsert: Optional[CustomMetadata] = None,
        delete_keys: Optional[Iterable[str]] = None,
    ) -> None:
        await self._directories.change_folder_metadata(folder_path, upsert, delete_keys)

    async def list_directory(self, folder_path: Optional[str] = None) -> Listing:
        """Child folders and latest files; defaults to the working directory."""
        return await self._directories.list_directory(folder_path or self._current_working_directory)

    async def download_folder(self, folder_path: str, output: Union[str, ArchiveOutput] = ArchiveOutput.BYTES) -> Any:
        """Zip a folder's latest files in the requested representation."""
        return await self._archives.build_archive(folder_path, output)

    # ==================== Files ====================

    async def upload_file(
        self,
        source: Any,
        name: str,
        chunk_size_bytes: Optional[int] = None,
        custom_metadata: Optional[CustomMetadata] = None,
    ) -> Any:
        """
        Upload a new version of `name` into the current working directory.

        Args:
            source: bytes or a readable binary object
            name: File name (no path separators)
            chunk_size_bytes: Overrides the configured chunk size
            custom_metadata: Extra metadata keys for this version

        Returns:
            Id of the stored version
        """
        if not name:
            raise InvalidArgumentError("Missing 'name' for uploaded file")
        chunk_size_bytes = chunk_size_bytes if chunk_size_bytes is not None else self._chunk_size_bytes
        if chunk_size_bytes <= 0:
            raise InvalidArgumentError("Chunk size must be a positive number of bytes")

        path = paths.join(self._current_working_directory, name)
        return await self._versions.upload(path, source, custom_metadata, chunk_size_bytes)

    async def get_file_read_stream(self, file_path: str) -> Any:
        """Download stream of the latest version of a file."""
        return await self._versions.open(file_path)

    async def read_file(self, file_path: str) -> bytes:
        return await self._versions.read(file_path)

    async def list_versions(self, file_path: str) -> List[FileRecord]:
        return await self._versions.versions(file_path)

    async def change_file_name(self, new_name: str, file_path: str) -> str:
        return await self._versions.change_name(new_name, file_path)

    async def change_file_metadata(
        self,
        file_path: str,
        upsert: Optional[CustomMetadata] = None,
        delete_keys: Optional[Iterable[str]] = None,
        all_versions: bool = False,
    ) -> int:
        return await self._versions.change_metadata(file_path, upsert, delete_keys, all_versions)

    async def delete_file(self, file_path: str) -> int:
        """Delete every version of a file."""
        return await self._versions.delete(file_path)
