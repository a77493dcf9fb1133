import pytest

from mongotree.tree.subtree import SubtreeEnumerator


@pytest.fixture
def enumerator(store):
    return SubtreeEnumerator(store)


class TestSubtreeEnumerator:

    @pytest.mark.asyncio
    async def test_collects_descendants_only(self, enumerator, populate):
        await populate(
            folders=["folder-test/a", "folder-test/a/b", "folder-test/a/b/c", "folder-test/a2", "folder-test/a2/d"],
            files={
                "folder-test/a/one.txt": b"1",
                "folder-test/a/b/c/two.txt": b"2",
                "folder-test/a2/three.txt": b"3",
                "folder-test/top.txt": b"t",
            },
        )

        subtree = await enumerator.enumerate("folder-test/a")

        assert [f.path for f in subtree.folders] == ["folder-test/a/b", "folder-test/a/b/c"]
        assert [f.path for f in subtree.files] == ["folder-test/a/b/c/two.txt", "folder-test/a/one.txt"]
        assert len(subtree) == 4

    @pytest.mark.asyncio
    async def test_latest_files_only(self, enumerator, populate):
        await populate(folders=["folder-test/a"])
        await populate(files={"folder-test/a/x.txt": b"1"})
        await populate(files={"folder-test/a/x.txt": b"2"})

        subtree = await enumerator.enumerate("folder-test/a")
        assert len(subtree.files) == 1
        assert subtree.files[0].is_latest

        every = await enumerator.all_versions("folder-test/a")
        assert len(every) == 2

    @pytest.mark.asyncio
    async def test_root_covers_everything(self, enumerator, populate):
        await populate(folders=["folder-test/a", "folder-test/a/b"], files={"folder-test/r.txt": b"r"})

        subtree = await enumerator.enumerate("folder-test")
        assert len(subtree.folders) == 2
        assert len(subtree.files) == 1

    @pytest.mark.asyncio
    async def test_empty_folder(self, enumerator, populate):
        await populate(folders=["folder-test/empty"])
        subtree = await enumerator.enumerate("folder-test/empty")
        assert len(subtree) == 0
