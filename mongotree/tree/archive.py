"""
mongotree - Folder archives

Packs a subtree into a zip. Entry names are relative to the archived
folder; every descendant folder gets a directory entry so empty folders
survive the round trip.
"""
import base64
import io
import zipfile
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Union

from loguru import logger

from mongotree.core.errors import InvalidArgumentError, NotFoundError
from mongotree.store.base import BlobStore, NamespaceStore
from mongotree.tree import paths
from mongotree.tree.subtree import SubtreeEnumerator


class ArchiveOutput(str, Enum):
    """Representations an archive can be returned in."""
    BYTES = "bytes"              # bytes
    BASE64 = "base64"            # ASCII str
    BYTEARRAY = "bytearray"      # bytearray
    ARRAY = "array"              # list of ints 0-255
    BINARYSTRING = "binarystring"  # str, one char per byte (latin-1)
    STREAM = "stream"            # io.BytesIO positioned at 0

    @classmethod
    def parse(cls, value: Union[str, "ArchiveOutput"]) -> "ArchiveOutput":
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(f"'{member.value}'" for member in cls)
            raise InvalidArgumentError(
                f"Invalid argument for parameter output. Argument must be one of {allowed}."
            ) from None


def encode_archive(data: bytes, output: ArchiveOutput) -> Any:
    if output is ArchiveOutput.BYTES:
        return data
    if output is ArchiveOutput.BASE64:
        return base64.b64encode(data).decode("ascii")
    if output is ArchiveOutput.BYTEARRAY:
        return bytearray(data)
    if output is ArchiveOutput.ARRAY:
        return list(data)
    if output is ArchiveOutput.BINARYSTRING:
        return data.decode("latin-1")
    return io.BytesIO(data)


class ArchiveWriter(ABC):
    """Accepts relative entries and produces one encoded archive."""

    @abstractmethod
    def add_directory(self, relative_path: str) -> None:
        pass

    @abstractmethod
    def add_file(self, relative_path: str, data: bytes) -> None:
        """Add a file; intermediate directories are implied by the path."""

    @abstractmethod
    def finish(self, output: ArchiveOutput) -> Any:
        pass


class ZipArchiveWriter(ArchiveWriter):
    def __init__(self, compression: int = zipfile.ZIP_DEFLATED):
        self._buffer = io.BytesIO()
        self._zip = zipfile.ZipFile(self._buffer, "w", compression=compression)
        self._directories = set()

    def add_directory(self, relative_path: str) -> None:
        name = relative_path.rstrip(paths.SEPARATOR) + paths.SEPARATOR
        if name in self._directories:
            return
        self._directories.add(name)
        self._zip.writestr(zipfile.ZipInfo(name), b"")

    def add_file(self, relative_path: str, data: bytes) -> None:
        parent = paths.split(relative_path)[0]
        while parent:
            self.add_directory(parent)
            parent = paths.split(parent)[0]
        self._zip.writestr(relative_path, data)

    def finish(self, output: ArchiveOutput) -> Any:
        self._zip.close()
        return encode_archive(self._buffer.getvalue(), output)


class ArchiveBuilder:
    """Builds an archive of a folder's latest files through the blob store."""

    def __init__(
        self,
        store: NamespaceStore,
        blobs: BlobStore,
        enumerator: SubtreeEnumerator,
        root_name: str,
        writer_factory: Callable[[], ArchiveWriter] = ZipArchiveWriter,
    ):
        self._store = store
        self._blobs = blobs
        self._enumerator = enumerator
        self.root_name = root_name
        self._writer_factory = writer_factory

    async def build_archive(self, root_path: str, output: Union[str, ArchiveOutput] = ArchiveOutput.BYTES) -> Any:
        """
        Archive the folder at `root_path`.

        Args:
            root_path: Absolute folder path (the root name archives everything)
            output: One of the ArchiveOutput values

        Returns:
            The archive in the requested representation
        """
        if root_path != self.root_name and await self._store.find_folder(root_path) is None:
            raise NotFoundError(f"Folder with path {root_path} does not exist", root_path)
        output = ArchiveOutput.parse(output)

        subtree = await self._enumerator.enumerate(root_path)
        strip = len(root_path) + len(paths.SEPARATOR)
        writer = self._writer_factory()

        for folder in subtree.folders:
            writer.add_directory(folder.path[strip:])

        # Records are sorted oldest first per path, so the newest flagged one wins
        latest = {record.path: record for record in subtree.files}
        for file_path, record in latest.items():
            data = await self._blobs.read(record.id)
            writer.add_file(file_path[strip:], data)

        logger.info(f"Archived {root_path}: {len(subtree.folders)} folders, {len(latest)} files")
        return writer.finish(output)
