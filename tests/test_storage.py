import pytest

from domain_switcher.storage import FileBlobStore, MemoryBlobStore

KEY = "https://origin.example.com/domains.json"


class TestFileBlobStore:
    """Durable URL-keyed blob store on disk"""

    @pytest.mark.asyncio
    async def test_missing_key_is_absent(self, tmp_path):
        store = FileBlobStore(str(tmp_path), "v1")

        assert await store.get(KEY) is None
        assert await store.keys() == []

    @pytest.mark.asyncio
    async def test_put_overwrites_whole_value(self, tmp_path):
        store = FileBlobStore(str(tmp_path), "v1")

        await store.put(KEY, b'["a.example.com", "b.example.com"]')
        await store.put(KEY, b'["c.example.com"]')

        assert await store.get(KEY) == b'["c.example.com"]'
        assert await store.keys() == [KEY]

    @pytest.mark.asyncio
    async def test_survives_reopen(self, tmp_path):
        await FileBlobStore(str(tmp_path), "v1").put(KEY, b"data")

        assert await FileBlobStore(str(tmp_path), "v1").get(KEY) == b"data"

    @pytest.mark.asyncio
    async def test_delete(self, tmp_path):
        store = FileBlobStore(str(tmp_path), "v1")
        await store.put(KEY, b"data")

        assert await store.delete(KEY) is True
        assert await store.delete(KEY) is False
        assert await store.get(KEY) is None

    @pytest.mark.asyncio
    async def test_purge_removes_other_generations(self, tmp_path):
        old = FileBlobStore(str(tmp_path), "domain-switcher-v0")
        await old.put(KEY, b"old")
        current = FileBlobStore(str(tmp_path), "domain-switcher-v1")
        await current.put(KEY, b"new")

        assert await current.purge_stale_generations() == ["domain-switcher-v0"]
        assert await old.get(KEY) is None
        assert await current.get(KEY) == b"new"
        assert not (tmp_path / "domain-switcher-v0").exists()


class TestMemoryBlobStore:

    @pytest.mark.asyncio
    async def test_round_trip_and_purge(self):
        generations = {}
        old = MemoryBlobStore("v0", generations)
        await old.put(KEY, b"old")
        current = MemoryBlobStore("v1", generations)
        await current.put(KEY, b"new")

        assert await current.purge_stale_generations() == ["v0"]
        assert list(generations) == ["v1"]
        assert await current.get(KEY) == b"new"
