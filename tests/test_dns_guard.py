"""
Unit tests for the DNS rebinding guard.

Resolution is stubbed; no test touches the network.
"""

import asyncio
import socket

import pytest

from utils.dns_guard import is_safe_url_with_dns, resolves_safely


def stub_resolver(address):
    """Resolver that always answers with `address`."""
    async def resolve(hostname):
        return address
    return resolve


async def nxdomain_resolver(hostname):
    raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")


async def slow_resolver(hostname):
    await asyncio.sleep(5)
    return "93.184.216.34"


class TestResolvesSafely:
    """Tests for resolves_safely."""

    @pytest.mark.asyncio
    async def test_public_address_passes(self):
        assert await resolves_safely("example.com", resolver=stub_resolver("93.184.216.34")) is True

    @pytest.mark.asyncio
    async def test_loopback_resolution_fails(self):
        """A public-looking name that resolves to 127.0.0.1 is a rebinding attempt."""
        assert await resolves_safely("rebind.example.com", resolver=stub_resolver("127.0.0.1")) is False

    @pytest.mark.asyncio
    async def test_private_resolution_fails(self):
        assert await resolves_safely("intranet.example.com", resolver=stub_resolver("10.0.0.5")) is False
        assert await resolves_safely("meta.example.com", resolver=stub_resolver("169.254.169.254")) is False

    @pytest.mark.asyncio
    async def test_resolver_error_fails_closed(self):
        assert await resolves_safely("missing.example", resolver=nxdomain_resolver) is False

    @pytest.mark.asyncio
    async def test_timeout_fails_closed(self):
        assert await resolves_safely("slow.example.com", timeout=0.05, resolver=slow_resolver) is False

    @pytest.mark.asyncio
    async def test_non_ipv4_answer_fails(self):
        assert await resolves_safely("odd.example.com", resolver=stub_resolver("2606:4700::1")) is False

    @pytest.mark.asyncio
    async def test_empty_hostname_fails(self):
        assert await resolves_safely("", resolver=stub_resolver("93.184.216.34")) is False


class TestIsSafeURLWithDNS:
    """Tests for the combined structural + DNS check."""

    @pytest.mark.asyncio
    async def test_public_url_passes(self):
        assert await is_safe_url_with_dns(
            "https://example.com/page", resolver=stub_resolver("93.184.216.34")
        ) is True

    @pytest.mark.asyncio
    async def test_structural_failure_skips_resolution(self):
        calls = []

        async def recording_resolver(hostname):
            calls.append(hostname)
            return "93.184.216.34"

        assert await is_safe_url_with_dns("http://127.0.0.1/", resolver=recording_resolver) is False
        assert calls == []

    @pytest.mark.asyncio
    async def test_rebinding_detected(self):
        assert await is_safe_url_with_dns(
            "https://example.com", resolver=stub_resolver("127.0.0.1")
        ) is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
