"""
FileTree facade: end-to-end flow, upload validation and lifecycle.
"""
import io
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mongotree import FileTree
from mongotree.core.config import AppConfig, GeneralSettings, TreeSettings
from mongotree.core.errors import AlreadyExistsError, CannotDeleteCWDError, InvalidArgumentError, NotFoundError
from mongotree.store.memory import MemoryNamespaceStore
from mongotree.store.mongo import GridFSBlobStore, MongoNamespaceStore


class TestFileTreeFlow:

    @pytest.mark.asyncio
    async def test_end_to_end(self, tree):
        await tree.create_folder("subfolder-test")
        await tree.change_directory("subfolder-test", relative=True)

        await tree.upload_file(b"v1", "test.txt", custom_metadata={"starred": False})
        await tree.upload_file(io.BytesIO(b"v2"), "test.txt")
        await tree.change_file_metadata("folder-test/subfolder-test/test.txt", {"starred": True})

        versions = await tree.list_versions("folder-test/subfolder-test/test.txt")
        assert [v.is_latest for v in versions] == [False, True]
        assert versions[-1].custom_metadata == {"starred": True}

        new_path = await tree.change_file_name("renamed.txt", "folder-test/subfolder-test/test.txt")
        assert new_path == "folder-test/subfolder-test/renamed.txt"

        await tree.change_directory("folder-test")
        await tree.rename_folder("moved", "folder-test/subfolder-test")
        assert await tree.read_file("folder-test/moved/renamed.txt") == b"v2"

        stream = await tree.get_file_read_stream("folder-test/moved/renamed.txt")
        assert await stream.read() == b"v2"

        assert await tree.delete_file("folder-test/moved/renamed.txt") == 2
        with pytest.raises(NotFoundError):
            await tree.read_file("folder-test/moved/renamed.txt")

        await tree.delete_folder("folder-test/moved")
        listing = await tree.list_directory()
        assert listing.folders == []
        assert listing.files == []

    @pytest.mark.asyncio
    async def test_working_directory_scenario(self):
        tree = FileTree.in_memory("root")

        folder_id = await tree.create_folder("x")
        assert (await tree.store.find_folder("root/x")).id == folder_id
        with pytest.raises(AlreadyExistsError):
            await tree.create_folder("x")

        await tree.change_directory("root/x")
        first = await tree.upload_file(b"hello", "a.txt")
        second = await tree.upload_file(b"hello", "a.txt")
        versions = await tree.list_versions("root/x/a.txt")
        assert [(v.id, v.is_latest) for v in versions] == [(first, False), (second, True)]

        with pytest.raises(CannotDeleteCWDError):
            await tree.delete_folder("root/x")

        await tree.change_directory("root")
        await tree.delete_folder("root/x")
        assert await tree.store.find_folder("root/x") is None
        assert await tree.list_versions("root/x/a.txt") == []

    @pytest.mark.asyncio
    async def test_upload_goes_to_working_directory(self, tree, populate, store):
        await populate(folders=["folder-test/a"])
        await tree.change_directory("folder-test/a")

        file_id = await tree.upload_file(b"x", "x.txt")

        assert store.files[file_id]["metadata"]["path"] == "folder-test/a/x.txt"
        assert store.files[file_id]["metadata"]["parentDirectory"] == "folder-test/a"

    @pytest.mark.asyncio
    async def test_upload_requires_name(self, tree):
        with pytest.raises(InvalidArgumentError) as exc:
            await tree.upload_file(b"x", "")
        assert str(exc.value) == "Missing 'name' for uploaded file"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("chunk_size", [0, -1])
    async def test_upload_rejects_bad_chunk_size(self, tree, chunk_size):
        with pytest.raises(InvalidArgumentError) as exc:
            await tree.upload_file(b"x", "x.txt", chunk_size_bytes=chunk_size)
        assert str(exc.value) == "Chunk size must be a positive number of bytes"

    @pytest.mark.asyncio
    async def test_chunk_size_is_passed_to_blob_store(self, tree, store):
        default_id = await tree.upload_file(b"x", "a.txt")
        custom_id = await tree.upload_file(b"x", "b.txt", chunk_size_bytes=1024)

        assert store.files[default_id]["chunkSize"] == 1048576
        assert store.files[custom_id]["chunkSize"] == 1024


class TestFileTreeLifecycle:

    def test_in_memory(self):
        tree = FileTree.in_memory("docs")
        assert tree.root_name == "docs"
        assert tree.current_working_directory == "docs"
        assert isinstance(tree.store, MemoryNamespaceStore)

    def test_from_config_with_shared_manager(self):
        manager = MagicMock()
        config = AppConfig(tree=TreeSettings(bucket_name="files", folder_collection_name="dirs"))

        tree = FileTree.from_config(config, manager=manager)

        manager.init.assert_called_once()
        manager.get_collection.assert_any_call("dirs")
        manager.get_collection.assert_any_call("files.files")
        manager.get_bucket.assert_called_once_with("files", 1048576)
        assert isinstance(tree.store, MongoNamespaceStore)
        assert isinstance(tree.blobs, GridFSBlobStore)
        assert tree.root_name == "dirs"
        assert tree.bucket_name == "files"
        assert tree.folder_collection_name == "dirs"

    def test_from_config_configures_logging_from_general_settings(self):
        config = AppConfig(general=GeneralSettings(debug_mode=True, log_dir="logs"))

        with patch("mongotree.file_tree.setup_logging") as setup:
            FileTree.from_config(config, manager=MagicMock())
            setup.assert_not_called()

            FileTree.from_config(config, manager=MagicMock(), configure_logging=True)
            setup.assert_called_once_with(True, "logs")

    def test_from_config_root_name_override(self):
        config = AppConfig(tree=TreeSettings(root_name="home"))
        tree = FileTree.from_config(config, manager=MagicMock())
        assert tree.current_working_directory == "home"

    @pytest.mark.asyncio
    async def test_shared_manager_is_not_closed(self):
        manager = MagicMock()
        manager.close = AsyncMock()
        tree = FileTree.from_config(AppConfig(), manager=manager)
        tree._store.ensure_indexes = AsyncMock()

        async with tree:
            assert tree.is_ready

        assert not tree.is_ready
        manager.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_owned_manager_is_closed(self):
        with patch("mongotree.file_tree.MongoManager") as manager_cls:
            manager = manager_cls.return_value
            manager.close = AsyncMock()
            tree = FileTree.from_config(AppConfig())
            tree._store.ensure_indexes = AsyncMock()

            async with tree:
                tree._store.ensure_indexes.assert_awaited_once()

        manager.close.assert_awaited_once()
