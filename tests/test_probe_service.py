import time

import pytest

from domain_switcher.services.probe_service import DomainProbe


class TestDomainProbe:
    """Single-attempt reachability checks"""

    @pytest.mark.asyncio
    async def test_reachable_domain(self, network):
        network.hosts["a.example.com"] = "up"
        probe = DomainProbe(network.client())

        assert await probe.probe("a.example.com") is True

        request = network.requests[0]
        assert request.method == "HEAD"
        assert str(request.url) == "https://a.example.com/health"
        assert request.headers["cache-control"] == "no-cache"

    @pytest.mark.asyncio
    async def test_error_status_still_counts_as_reachable(self, network):
        """A domain answering 500 is present at the network layer"""
        network.hosts["a.example.com"] = 500
        probe = DomainProbe(network.client())

        assert await probe.probe("a.example.com") is True

    @pytest.mark.asyncio
    async def test_connection_failure_is_unreachable(self, network):
        network.hosts["a.example.com"] = "down"
        probe = DomainProbe(network.client())

        assert await probe.probe("a.example.com") is False

    @pytest.mark.asyncio
    async def test_unresponsive_domain_times_out(self, network):
        """An unresponsive domain resolves unreachable within the timeout"""
        network.hosts["slow.example.com"] = "hang"
        probe = DomainProbe(network.client(), timeout=0.2)

        started = time.monotonic()
        assert await probe.probe("slow.example.com") is False
        assert time.monotonic() - started < 2.0

    @pytest.mark.asyncio
    async def test_single_attempt_per_probe(self, network):
        probe = DomainProbe(network.client())

        await probe.probe("down.example.com")

        assert network.probed_hosts() == ["down.example.com"]

    def test_url_uses_configured_scheme_and_path(self, network):
        probe = DomainProbe(network.client(), scheme="http", path="sw.js")

        assert probe.url_for("b.example.com:8443") == "http://b.example.com:8443/sw.js"
