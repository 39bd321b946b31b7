from typing import Dict, List, Optional
from pathlib import Path
import asyncio
import hashlib
import logging
import os
import shutil
import tempfile


logger = logging.getLogger(__name__)


class BlobStore:
    """Durable key -> bytes store, keyed by URL and scoped to one cache generation.

    Values are always replaced whole; a single put is the atomicity unit and
    concurrent writers to the same key resolve as last-write-wins.
    """

    def __init__(self, generation: str):
        self.generation = generation
        self._locks: Dict[str, asyncio.Lock] = {}

    async def _get_lock(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    async def get(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    async def put(self, key: str, data: bytes) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> bool:
        raise NotImplementedError

    async def keys(self) -> List[str]:
        raise NotImplementedError

    async def purge_stale_generations(self) -> List[str]:
        """Delete every generation other than the current one, returning their names."""
        raise NotImplementedError


class MemoryBlobStore(BlobStore):
    def __init__(self, generation: str = "default", generations: Optional[Dict[str, Dict[str, bytes]]] = None):
        super().__init__(generation)
        self._generations = generations if generations is not None else {}
        self._data = self._generations.setdefault(generation, {})

    async def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    async def put(self, key: str, data: bytes) -> None:
        lock = await self._get_lock(key)
        async with lock:
            self._data[key] = bytes(data)
        logger.debug(f"Stored {len(data)} bytes for {key} in generation {self.generation}")

    async def delete(self, key: str) -> bool:
        lock = await self._get_lock(key)
        async with lock:
            return self._data.pop(key, None) is not None

    async def keys(self) -> List[str]:
        return list(self._data.keys())

    async def purge_stale_generations(self) -> List[str]:
        stale = [name for name in self._generations if name != self.generation]
        for name in stale:
            logger.info(f"Deleting old cache: {name}")
            del self._generations[name]
        return stale


class FileBlobStore(BlobStore):
    """Stores each key as `<root>/<generation>/<sha256(key)>.bin` with a `.key` sidecar."""

    def __init__(self, root: str, generation: str):
        super().__init__(generation)
        self.root = Path(root)
        self.directory = self.root / generation

    def _paths(self, key: str) -> tuple[Path, Path]:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}.bin", self.directory / f"{digest}.key"

    def _read(self, key: str) -> Optional[bytes]:
        data_path, _ = self._paths(key)
        try:
            return data_path.read_bytes()
        except FileNotFoundError:
            return None

    def _write_atomic(self, path: Path, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _write(self, key: str, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        data_path, key_path = self._paths(key)
        self._write_atomic(key_path, key.encode("utf-8"))
        self._write_atomic(data_path, data)

    def _remove(self, key: str) -> bool:
        data_path, key_path = self._paths(key)
        existed = data_path.exists()
        for path in (data_path, key_path):
            try:
                path.unlink()
            except FileNotFoundError:
                pass
        return existed

    def _list_keys(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(
            path.read_text(encoding="utf-8")
            for path in self.directory.glob("*.key")
            if path.with_suffix(".bin").exists()
        )

    def _purge(self) -> List[str]:
        if not self.root.is_dir():
            return []
        stale = []
        for path in self.root.iterdir():
            if path.is_dir() and path.name != self.generation:
                logger.info(f"Deleting old cache: {path.name}")
                shutil.rmtree(path)
                stale.append(path.name)
        return sorted(stale)

    async def get(self, key: str) -> Optional[bytes]:
        try:
            return await asyncio.to_thread(self._read, key)
        except OSError as e:
            logger.error(f"Failed to read cache entry {key}: {e}", exc_info=True)
            return None

    async def put(self, key: str, data: bytes) -> None:
        lock = await self._get_lock(key)
        async with lock:
            await asyncio.to_thread(self._write, key, bytes(data))
        logger.debug(f"Stored {len(data)} bytes for {key} in {self.directory}")

    async def delete(self, key: str) -> bool:
        lock = await self._get_lock(key)
        async with lock:
            return await asyncio.to_thread(self._remove, key)

    async def keys(self) -> List[str]:
        return await asyncio.to_thread(self._list_keys)

    async def purge_stale_generations(self) -> List[str]:
        return await asyncio.to_thread(self._purge)
