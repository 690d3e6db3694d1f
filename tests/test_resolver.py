import socket
from unittest.mock import AsyncMock, MagicMock, patch

import dns.exception
import dns.rdatatype
import dns.resolver
import pytest

from sweep.models import ResolverConfig, Transport
from sweep.resolver import (
    DnsResolverHandle,
    ReverseLookupError,
    SystemResolverHandle,
    bind,
)


def _ptr_rdata(name: str) -> MagicMock:
    rdata = MagicMock()
    rdata.rdtype = dns.rdatatype.PTR
    rdata.target.to_text.return_value = name
    return rdata


def test_bind_without_host_uses_system_resolver():
    handle = bind(ResolverConfig())
    try:
        assert isinstance(handle, SystemResolverHandle)
    finally:
        handle.close()


def test_bind_with_host_targets_explicit_resolver():
    config = ResolverConfig(resolver_host="192.0.2.53", port=5353, transport=Transport.STREAM)
    handle = bind(config)

    assert isinstance(handle, DnsResolverHandle)
    assert handle.tcp is True
    assert handle.resolver.port == 5353
    assert len(handle.resolver.nameservers) == 1
    assert handle.description == "192.0.2.53:5353/tcp"


def test_bind_does_not_touch_the_network():
    # An unroutable documentation address: binding must still succeed silently.
    with patch("socket.socket") as mock_socket:
        handle = bind(ResolverConfig(resolver_host="192.0.2.1"))
    assert handle is not None
    mock_socket.assert_not_called()


def test_bind_applies_timeout():
    handle = bind(ResolverConfig(resolver_host="192.0.2.53", timeout=1.5))
    assert handle.resolver.timeout == 1.5
    assert handle.resolver.lifetime == 1.5


def test_datagram_transport_is_default():
    handle = bind(ResolverConfig(resolver_host="192.0.2.53"))
    assert handle.tcp is False


@pytest.mark.asyncio
@pytest.mark.parametrize("transport, tcp", [
    (Transport.STREAM, True),
    (Transport.DATAGRAM, False),
])
async def test_dns_handle_routes_over_configured_transport(transport, tcp):
    handle = DnsResolverHandle(ResolverConfig(resolver_host="192.0.2.53", transport=transport))
    handle.resolver.resolve_address = AsyncMock(return_value=[_ptr_rdata("dns.google.")])

    names = await handle.reverse("8.8.8.8")

    assert names == ["dns.google."]
    handle.resolver.resolve_address.assert_awaited_once_with("8.8.8.8", tcp=tcp)


@pytest.mark.asyncio
async def test_dns_handle_preserves_resolver_order():
    handle = DnsResolverHandle(ResolverConfig(resolver_host="192.0.2.53"))
    handle.resolver.resolve_address = AsyncMock(
        return_value=[_ptr_rdata("b.example."), _ptr_rdata("a.example.")]
    )

    assert await handle.reverse("192.0.2.10") == ["b.example.", "a.example."]


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    dns.resolver.NXDOMAIN(),
    dns.resolver.NoAnswer(),
    dns.exception.Timeout(),
    dns.resolver.NoNameservers(),
    ConnectionRefusedError("refused"),
])
async def test_dns_handle_wraps_lookup_errors(error):
    handle = DnsResolverHandle(ResolverConfig(resolver_host="192.0.2.53"))
    handle.resolver.resolve_address = AsyncMock(side_effect=error)

    with pytest.raises(ReverseLookupError) as excinfo:
        await handle.reverse("1.1.1.1")

    assert excinfo.value.address == "1.1.1.1"
    assert excinfo.value.reason is error


@pytest.mark.asyncio
async def test_dns_handle_rejects_malformed_address_without_querying():
    handle = DnsResolverHandle(ResolverConfig(resolver_host="192.0.2.53"))

    with pytest.raises(ReverseLookupError):
        await handle.reverse("not-an-address")


@pytest.fixture
def system_handle():
    handle = SystemResolverHandle()
    yield handle
    handle.close()


def test_bind_sizes_system_resolver_pool():
    handle = bind(ResolverConfig(), max_workers=4)
    try:
        assert handle.max_workers == 4
    finally:
        handle.close()


@pytest.mark.asyncio
async def test_system_handle_returns_absolute_hostname_then_aliases(system_handle):
    with patch(
        "sweep.resolver.socket.gethostbyaddr",
        return_value=("dns.google", ["alias.google"], ["8.8.8.8"]),
    ) as mock_lookup:
        names = await system_handle.reverse("8.8.8.8")

    # Same form the explicit resolver produces: trailing root dot.
    assert names == ["dns.google.", "alias.google."]
    mock_lookup.assert_called_once_with("8.8.8.8")


@pytest.mark.asyncio
async def test_system_handle_keeps_names_already_absolute(system_handle):
    with patch(
        "sweep.resolver.socket.gethostbyaddr",
        return_value=("dns.google.", [], ["8.8.8.8"]),
    ):
        assert await system_handle.reverse("8.8.8.8") == ["dns.google."]


@pytest.mark.asyncio
@pytest.mark.parametrize("address", ["localhost", "dns.google", "", "8.8.8"])
async def test_system_handle_rejects_non_addresses(system_handle, address):
    """A hostname must not be forward-resolved and then reversed."""
    with patch("sweep.resolver.socket.gethostbyaddr") as mock_lookup:
        with pytest.raises(ReverseLookupError) as excinfo:
            await system_handle.reverse(address)

    mock_lookup.assert_not_called()
    assert isinstance(excinfo.value.reason, ValueError)


@pytest.mark.asyncio
async def test_system_handle_accepts_ipv6(system_handle):
    with patch(
        "sweep.resolver.socket.gethostbyaddr",
        return_value=("dns.google", [], ["2001:4860:4860::8888"]),
    ):
        assert await system_handle.reverse("2001:4860:4860::8888") == ["dns.google."]


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    socket.herror(1, "Unknown host"),
    socket.gaierror(-2, "Name or service not known"),
    TimeoutError(),
])
async def test_system_handle_wraps_lookup_errors(system_handle, error):
    with patch("sweep.resolver.socket.gethostbyaddr", side_effect=error):
        with pytest.raises(ReverseLookupError) as excinfo:
            await system_handle.reverse("1.1.1.1")

    # The executor may hand back a copy of the exception rather than the original.
    assert isinstance(excinfo.value.reason, type(error))
    assert excinfo.value.reason.args == error.args


@pytest.mark.asyncio
async def test_system_lookups_do_not_use_the_default_executor(system_handle):
    with (
        patch("sweep.resolver.socket.gethostbyaddr", return_value=("dns.google", [], [])),
        patch("asyncio.to_thread") as mock_to_thread,
    ):
        await system_handle.reverse("8.8.8.8")

    mock_to_thread.assert_not_called()
