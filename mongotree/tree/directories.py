"""
mongotree - Directory operations

Create, navigate, rename and delete folders. Rename and delete cascade to
every descendant folder and file.

Cascades are applied as point updates in a fixed order (files, then
descendant folders, then the target folder), so an interrupted rename or
delete leaves the target in place and calling the operation again finishes
the work.
"""
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from loguru import logger

from mongotree.core.errors import (
    AlreadyExistsError,
    CannotDeleteCWDError,
    CannotRenameRootError,
    InvalidArgumentError,
    NotFoundError,
)
from mongotree.models import CustomMetadata, FileRecord, Folder
from mongotree.models.base import PARENT_DIRECTORY_KEY, PATH_KEY
from mongotree.store.base import NamespaceStore, PointUpdate
from mongotree.tree import paths
from mongotree.tree.subtree import SubtreeEnumerator
from mongotree.tree.versions import VersionChain, check_reserved_keys

FOLDER_IS_LATEST_MESSAGE = "Cannot add or delete 'isLatest' metadata property for a folder"

# Upper bound on point updates sent to the store in one call
UPDATE_BATCH_SIZE = 500


@dataclass
class Listing:
    """Immediate children of a folder."""
    path: str
    folders: List[Folder] = field(default_factory=list)
    files: List[FileRecord] = field(default_factory=list)


@dataclass
class RenamePlan:
    """Change set computed before a folder rename is applied."""
    old_path: str
    new_path: str
    new_name: str
    folder_updates: List[PointUpdate] = field(default_factory=list)
    file_updates: List[PointUpdate] = field(default_factory=list)


def _batches(updates: List[PointUpdate], size: int = UPDATE_BATCH_SIZE):
    for start in range(0, len(updates), size):
        yield updates[start:start + size]


class DirectoryOperations:
    """Folder-level operations over a NamespaceStore."""

    def __init__(
        self,
        store: NamespaceStore,
        versions: VersionChain,
        enumerator: SubtreeEnumerator,
        root_name: str,
    ):
        self._store = store
        self._versions = versions
        self._enumerator = enumerator
        self.root_name = root_name

    def is_root(self, path: str) -> bool:
        return path == self.root_name

    async def exists(self, path: str) -> bool:
        return self.is_root(path) or await self._store.find_folder(path) is not None

    async def _require_folder(self, path: str) -> Optional[Folder]:
        """The folder at `path`; None for the root, which has no document."""
        if self.is_root(path):
            return None
        folder = await self._store.find_folder(path)
        if folder is None:
            raise NotFoundError(f"Folder with path {path} does not exist", path)
        return folder

    # ==================== Create / navigate ====================

    async def create_folder(
        self,
        name: str,
        current_working_directory: str,
        custom_metadata: Optional[CustomMetadata] = None,
    ) -> Any:
        """Create `name` inside the current working directory; return its id."""
        path = paths.join(current_working_directory, name)
        if await self._store.find_folder(path) is not None:
            raise AlreadyExistsError(f"Folder with name {name} already exists in the current directory", path)
        paths.validate_name(name, kind="folder")

        folder = Folder(
            name=name,
            path=path,
            parent_directory=current_working_directory,
            custom_metadata=dict(custom_metadata or {}),
        )
        folder_id = await self._store.insert_folder(folder)
        logger.info(f"Created folder {path}")
        return folder_id

    def resolve(self, path: str, current_working_directory: str, relative: bool = False) -> str:
        if relative:
            return paths.join(current_working_directory, path)
        return path

    async def change_directory(self, path: str, current_working_directory: str, relative: bool = False) -> str:
        """
        Resolve and verify a directory change.

        Returns:
            The absolute path to adopt as the new working directory
        """
        absolute_path = self.resolve(path, current_working_directory, relative)
        if not await self.exists(absolute_path):
            raise NotFoundError(f"Folder with path {absolute_path} does not exist", absolute_path)
        return absolute_path

    async def list_directory(self, path: str) -> Listing:
        await self._require_folder(path)
        return Listing(
            path=path,
            folders=await self._store.find_child_folders(path),
            files=await self._store.find_child_files(path),
        )

    # ==================== Rename ====================

    async def plan_rename(self, new_name: str, path: str) -> RenamePlan:
        """
        Validate a rename and compute its change set without writing.

        Every file version below the folder is included, not only latest
        ones, so history moves with the folder.
        """
        if self.is_root(path):
            raise CannotRenameRootError(path)
        top_folder = await self._require_folder(path)

        new_path = paths.join(top_folder.parent_directory, new_name)
        if await self._store.find_folder(new_path) is not None:
            raise AlreadyExistsError(f"Folder with name {new_name} already exists in the specified directory", new_path)
        paths.validate_name(new_name, kind="folder")

        plan = RenamePlan(old_path=path, new_path=new_path, new_name=new_name)

        for record in await self._enumerator.all_versions(path):
            plan.file_updates.append((record.id, {
                f"metadata.{PATH_KEY}": paths.replace_prefix(record.path, path, new_path),
                f"metadata.{PARENT_DIRECTORY_KEY}": paths.replace_prefix(record.parent_directory, path, new_path),
            }))

        subtree = await self._enumerator.enumerate(path)
        for folder in subtree.folders:
            rewritten = paths.replace_prefix(folder.path, path, new_path)
            plan.folder_updates.append((folder.id, {
                PATH_KEY: rewritten,
                PARENT_DIRECTORY_KEY: paths.replace_prefix(folder.parent_directory, path, new_path),
                "name": paths.split(rewritten)[1],
            }))

        plan.folder_updates.append((top_folder.id, {PATH_KEY: new_path, "name": new_name}))
        return plan

    async def apply_rename(self, plan: RenamePlan) -> None:
        for batch in _batches(plan.file_updates):
            await self._store.update_files(batch)
        for batch in _batches(plan.folder_updates):
            await self._store.update_folders(batch)

    async def rename_folder(self, new_name: str, path: str) -> str:
        """
        Rename the folder at `path` and move its whole subtree along.

        Returns:
            The new folder path
        """
        plan = await self.plan_rename(new_name, path)
        await self.apply_rename(plan)
        logger.info(
            f"Renamed folder {plan.old_path} -> {plan.new_path} "
            f"({len(plan.folder_updates) - 1} descendant folders, {len(plan.file_updates)} file versions)"
        )
        return plan.new_path

    # ==================== Delete ====================

    async def delete_folder(self, path: str, current_working_directory: str) -> None:
        """
        Delete the folder at `path` with every folder and file below it.

        The root is emptied but never removed.
        """
        if paths.is_under(current_working_directory, path) and not self.is_root(path):
            raise CannotDeleteCWDError(current_working_directory)
        top_folder = await self._require_folder(path)

        subtree = await self._enumerator.enumerate(path)
        # Every version counts, including paths left without a latest version
        file_paths = sorted({record.path for record in await self._enumerator.all_versions(path)})
        for file_path in file_paths:
            await self._versions.delete(file_path)

        await self._store.delete_folders([folder.id for folder in subtree.folders])
        if top_folder is not None:
            await self._store.delete_folders([top_folder.id])

        logger.info(f"Deleted folder {path} ({len(subtree.folders)} descendant folders, {len(file_paths)} files)")

    # ==================== Metadata ====================

    async def change_folder_metadata(
        self,
        path: str,
        upsert: Optional[CustomMetadata] = None,
        delete_keys: Optional[Iterable[str]] = None,
    ) -> None:
        delete_keys = list(delete_keys or [])
        check_reserved_keys(upsert, delete_keys, FOLDER_IS_LATEST_MESSAGE)
        if self.is_root(path):
            raise InvalidArgumentError("Root directory of the file tree has no metadata", path)
        await self._require_folder(path)
        await self._store.update_folder_metadata(path, upsert or {}, delete_keys)
        logger.info(f"Updated metadata of folder {path}")
