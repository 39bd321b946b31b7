import json
import logging
from typing import Optional, Tuple

import httpx

from domain_switcher.models.domain import ConfigSnapshot, Provenance
from domain_switcher.storage import BlobStore
from domain_switcher.utils import NO_CACHE_HEADERS, cache_bust_token, canonical_url

logger = logging.getLogger(__name__)


class MalformedConfigError(ValueError):
    """Raised when a configuration document is not a non-empty JSON array of domain names."""


def parse_candidate_list(body: bytes) -> Tuple[str, ...]:
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedConfigError(f"Invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise MalformedConfigError(f"Expected a JSON array, got {type(data).__name__}")
    if not data:
        raise MalformedConfigError("Candidate list is empty")
    if not all(isinstance(item, str) for item in data):
        raise MalformedConfigError("Candidate list must contain only domain name strings")
    return tuple(data)


def choose_snapshot(
    fresh: Optional[Tuple[str, ...]],
    cached: Optional[Tuple[str, ...]],
) -> Optional[ConfigSnapshot]:
    """Decide which candidate list to use from the network and cache outcomes.

    A usable network list always wins; otherwise the last persisted list is
    used and tagged as cached. ``None`` means no configuration is available.
    """
    if fresh:
        return ConfigSnapshot(candidates=fresh, provenance=Provenance.FRESH)
    if cached:
        return ConfigSnapshot(candidates=cached, provenance=Provenance.CACHED)
    return None


class ConfigStore:
    def __init__(self, client: httpx.AsyncClient, store: BlobStore, config_url: str):
        self.client = client
        self.store = store
        self.config_url = config_url
        self.cache_key = canonical_url(config_url)

    async def fetch_fresh(self) -> Optional[Tuple[str, ...]]:
        """Fetch the document over the network, persisting it when usable."""
        try:
            response = await self.client.get(
                self.config_url,
                params={"v": cache_bust_token()},
                headers=NO_CACHE_HEADERS,
            )
        except httpx.HTTPError as e:
            logger.info(f"Failed to fetch latest config: {e!r}")
            return None

        if not response.is_success:
            logger.info(f"Config fetch returned status {response.status_code}")
            return None

        body = response.content
        try:
            candidates = parse_candidate_list(body)
        except MalformedConfigError as e:
            logger.warning(f"Ignoring malformed config from {self.config_url}: {e}")
            return None

        try:
            await self.store.put(self.cache_key, body)
        except OSError as e:
            logger.warning(f"Could not persist config to cache: {e}", exc_info=True)
        return candidates

    async def read_cached(self) -> Optional[Tuple[str, ...]]:
        body = await self.store.get(self.cache_key)
        if body is None:
            logger.debug(f"No cached config under {self.cache_key}")
            return None
        try:
            return parse_candidate_list(body)
        except MalformedConfigError as e:
            logger.warning(f"Dropping malformed cached config: {e}")
            try:
                await self.store.delete(self.cache_key)
            except OSError as delete_error:
                logger.warning(f"Could not drop cached config: {delete_error}", exc_info=True)
            return None

    async def get_fresh_or_cached(self) -> Optional[ConfigSnapshot]:
        fresh = await self.fetch_fresh()
        if fresh is not None:
            return choose_snapshot(fresh, None)
        snapshot = choose_snapshot(None, await self.read_cached())
        if snapshot is None:
            logger.warning("No usable configuration from network or cache")
        return snapshot

    async def refresh(self) -> Optional[ConfigSnapshot]:
        snapshot = await self.get_fresh_or_cached()
        if snapshot is not None and snapshot.provenance == Provenance.FRESH:
            logger.info(f"Config refreshed with {len(snapshot.candidates)} candidates")
        else:
            logger.info("Config refresh did not reach the network; cache left unchanged")
        return snapshot
