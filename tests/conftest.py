import pytest

from mongotree.file_tree import FileTree
from mongotree.store.memory import MemoryBlobStore, MemoryNamespaceStore
from mongotree.tree.paths import split

ROOT = "folder-test"


@pytest.fixture
def store():
    return MemoryNamespaceStore()


@pytest.fixture
def blobs(store):
    return MemoryBlobStore(store)


@pytest.fixture
def tree(store, blobs):
    """FileTree over in-memory stores, working directory at the root."""
    return FileTree(store, blobs, ROOT)


@pytest.fixture
def populate(tree):
    """
    Returns an async helper creating folders and files by absolute path.

        await populate(folders=["folder-test/a"], files={"folder-test/a/x.txt": b"x"})

    Folders are created in the order given; the working directory is reset
    to the root afterwards.
    """
    async def _populate(folders=(), files=None):
        for path in folders:
            parent, name = split(path)
            await tree.change_directory(parent)
            await tree.create_folder(name)
        for path, data in (files or {}).items():
            parent, name = split(path)
            await tree.change_directory(parent)
            await tree.upload_file(data, name)
        await tree.change_directory(tree.root_name)

    return _populate
