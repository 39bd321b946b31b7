import asyncio
import logging
import mimetypes
from dataclasses import dataclass
from typing import List, Optional, Set

import httpx

from domain_switcher.services.config_store import MalformedConfigError, parse_candidate_list
from domain_switcher.storage import BlobStore
from domain_switcher.utils import origin_url

logger = logging.getLogger(__name__)


@dataclass
class AssetResponse:
    body: bytes
    status_code: int = 200
    media_type: str = "application/octet-stream"
    from_cache: bool = False


OFFLINE_RESPONSE = AssetResponse(
    body=b"Offline mode not available",
    status_code=503,
    media_type="text/plain",
)


def guess_media_type(path: str) -> str:
    if path.endswith("/"):
        return "text/html"
    media_type, _ = mimetypes.guess_type(path)
    return media_type or "application/octet-stream"


class AssetService:
    """Static asset cache over the blob store.

    The configuration document is served network-first; everything else is
    cache-first with a background refresh of the cached copy.
    """

    def __init__(self, client: httpx.AsyncClient, store: BlobStore, origin: str, config_path: str):
        self.client = client
        self.store = store
        self.origin = origin
        self.config_path = config_path
        self._background: Set[asyncio.Task] = set()

    def key_for(self, path: str) -> str:
        return origin_url(self.origin, path)

    def _cacheable(self, path: str, body: bytes) -> bool:
        if path != self.config_path:
            return True
        try:
            parse_candidate_list(body)
        except MalformedConfigError as e:
            logger.warning(f"Not caching malformed config document: {e}")
            return False
        return True

    async def _fetch(self, path: str) -> httpx.Response:
        return await self.client.get(self.key_for(path))

    async def _store_if_ok(self, path: str, response: httpx.Response) -> None:
        if not (response.is_success and self._cacheable(path, response.content)):
            return
        try:
            await self.store.put(self.key_for(path), response.content)
        except OSError as e:
            logger.warning(f"Could not cache {path}: {e}", exc_info=True)

    def _from_network(self, path: str, response: httpx.Response) -> AssetResponse:
        return AssetResponse(
            body=response.content,
            status_code=response.status_code,
            media_type=response.headers.get("content-type", guess_media_type(path)),
        )

    async def _from_cache(self, path: str) -> Optional[AssetResponse]:
        cached = await self.store.get(self.key_for(path))
        if cached is None:
            return None
        return AssetResponse(body=cached, media_type=guess_media_type(path), from_cache=True)

    async def install(self, paths: List[str]) -> int:
        logger.info(f"Caching {len(paths)} static assets")
        cached = 0
        for path in paths:
            try:
                response = await self._fetch(path)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(f"Cache failed for {path}: {e}")
                continue
            await self._store_if_ok(path, response)
            cached += 1
        logger.info(f"Installation complete, {cached}/{len(paths)} assets cached")
        return cached

    async def activate(self) -> List[str]:
        stale = await self.store.purge_stale_generations()
        logger.info(f"Activation complete, removed {len(stale)} old caches")
        return stale

    async def network_first(self, path: str) -> AssetResponse:
        try:
            response = await self._fetch(path)
        except httpx.HTTPError as e:
            logger.info(f"Network request for {path} failed ({e!r}), falling back to cache")
            cached = await self._from_cache(path)
            return cached or OFFLINE_RESPONSE
        await self._store_if_ok(path, response)
        return self._from_network(path, response)

    async def _revalidate(self, path: str) -> None:
        try:
            response = await self._fetch(path)
        except httpx.HTTPError as e:
            logger.debug(f"Background refresh of {path} failed: {e!r}")
            return
        await self._store_if_ok(path, response)

    def _schedule_revalidation(self, path: str) -> None:
        task = asyncio.create_task(self._revalidate(path))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def cache_first(self, path: str) -> AssetResponse:
        cached = await self._from_cache(path)
        if cached is not None:
            self._schedule_revalidation(path)
            return cached
        try:
            response = await self._fetch(path)
        except httpx.HTTPError as e:
            logger.error(f"Request failed for {path}: {e!r}")
            return OFFLINE_RESPONSE
        await self._store_if_ok(path, response)
        return self._from_network(path, response)

    async def serve(self, path: str) -> AssetResponse:
        if not path.startswith("/"):
            path = "/" + path
        if path == self.config_path:
            return await self.network_first(path)
        return await self.cache_first(path)

    async def wait_background(self) -> None:
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def aclose(self) -> None:
        for task in list(self._background):
            task.cancel()
        await self.wait_background()
