import asyncio
import logging

import httpx

from domain_switcher.utils import NO_CACHE_HEADERS, domain_url

logger = logging.getLogger(__name__)


class DomainProbe:
    """Single bounded-time reachability check against one domain.

    Any completed HTTP exchange counts as reachable, whatever its status code;
    only network-level failures and timeouts count as unreachable.
    """

    def __init__(self, client: httpx.AsyncClient, scheme: str = "https", path: str = "/health", timeout: float = 3.0):
        self.client = client
        self.scheme = scheme
        self.path = path
        self.timeout = timeout

    def url_for(self, domain: str) -> str:
        return domain_url(self.scheme, domain, self.path)

    async def probe(self, domain: str) -> bool:
        url = self.url_for(domain)
        try:
            response = await asyncio.wait_for(
                self.client.head(
                    url,
                    headers=NO_CACHE_HEADERS,
                    follow_redirects=False,
                    timeout=self.timeout,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.info(f"Probe of {domain} timed out after {self.timeout}s")
            return False
        except httpx.HTTPError as e:
            logger.info(f"Probe of {domain} failed: {e!r}")
            return False
        logger.debug(f"Probe of {domain} completed with status {response.status_code}")
        return True
