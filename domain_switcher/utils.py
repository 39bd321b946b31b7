import time
from urllib.parse import urljoin, urlsplit, urlunsplit


NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


def domain_url(scheme: str, domain: str, path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return f"{scheme}://{domain}{path}"


def canonical_url(url: str) -> str:
    """Drop query and fragment so cache keys stay stable across cache-busting tokens."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", "", ""))


def origin_url(origin: str, path: str) -> str:
    return urljoin(origin.rstrip("/") + "/", path.lstrip("/"))


def cache_bust_token() -> str:
    return str(int(time.time() * 1000))
