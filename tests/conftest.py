"""
Shared fakes for the domain switcher test suite.

The network is simulated with httpx.MockTransport: every domain is either
up, down (connection refused), hanging, or answering with a fixed status code.
"""

import asyncio
import json
from typing import Dict, List, Optional, Union

import httpx
import pytest

from domain_switcher.models.domain import ProgressEvent
from domain_switcher.storage import MemoryBlobStore

CONFIG_URL = "https://origin.example.com/domains.json"


class FakeNetwork:
    """Routes requests by host; records every request it sees."""

    def __init__(self):
        self.hosts: Dict[str, Union[str, int]] = {}
        self.config_body: Optional[bytes] = None
        self.config_status = 200
        self.config_down = False
        self.assets: Dict[str, bytes] = {}
        self.requests: List[httpx.Request] = []

    def set_config(self, domains, status: int = 200) -> None:
        self.config_body = domains if isinstance(domains, bytes) else json.dumps(domains).encode()
        self.config_status = status
        self.config_down = False

    def probed_hosts(self) -> List[str]:
        return [r.url.host for r in self.requests if r.method == "HEAD"]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/domains.json":
            if self.config_down or self.config_body is None:
                raise httpx.ConnectError("config origin unreachable", request=request)
            return httpx.Response(self.config_status, content=self.config_body)

        if request.method == "GET" and request.url.path in self.assets:
            return httpx.Response(200, content=self.assets[request.url.path])

        behaviour = self.hosts.get(request.url.host, "down")
        if behaviour == "down":
            raise httpx.ConnectError("connection refused", request=request)
        if behaviour == "hang":
            await asyncio.sleep(30)
            return httpx.Response(200)
        if isinstance(behaviour, int):
            return httpx.Response(behaviour)
        return httpx.Response(200, text="ok")

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


class ReadOnlyBlobStore(MemoryBlobStore):
    """Reads work, every write fails as if the disk were full."""

    async def put(self, key: str, data: bytes) -> None:
        raise OSError("disk full")

    async def delete(self, key: str) -> bool:
        raise OSError("disk full")


class RecordingNotifier:
    def __init__(self):
        self.events: List[ProgressEvent] = []

    async def broadcast(self, event: ProgressEvent) -> int:
        self.events.append(event)
        return 1


@pytest.fixture
def network():
    return FakeNetwork()


@pytest.fixture
def store():
    return MemoryBlobStore("domain-switcher-v1")


@pytest.fixture
def notifier():
    return RecordingNotifier()
