import pytest

from app.exceptions import ForbiddenHostError, InvalidUrlError, UnresolvableHostError
from app.utils.url_safety import (
    assert_safe_url,
    is_hostname_allowed,
    is_private_ip,
    normalize_hostname,
)

from conftest import FakeResolver


@pytest.mark.parametrize(
    "address",
    [
        "10.0.0.1",
        "127.0.0.1",
        "192.168.1.10",
        "172.16.0.5",
        "169.254.10.10",
        "0.0.0.0",
        "100.64.0.1",
        "192.0.2.5",
        "198.18.0.1",
        "198.51.100.7",
        "203.0.113.9",
        "224.0.0.1",
        "255.255.255.255",
        "::",
        "::1",
        "fc00::1",
        "fd12:3456::1",
        "fe80::1",
        "fe80::1%eth0",
        "2001:db8::1",
        "::ffff:127.0.0.1",
        "::ffff:10.1.2.3",
        "fc::1",
        "fd::1",
        "fc1::",
        "FD00::1",
        "2001:db80::1",
    ],
)
def test_private_addresses(address):
    assert is_private_ip(address) is True


@pytest.mark.parametrize(
    "address",
    ["8.8.8.8", "1.1.1.1", "93.184.216.34", "172.32.0.1", "2606:4700:4700::1111", "::ffff:8.8.8.8"],
)
def test_public_addresses(address):
    assert is_private_ip(address) is False


@pytest.mark.parametrize("address", ["", "not-an-ip", "1.2.3", "1.2.3.4.5", "256.1.1.1", "1.2.3.-1"])
def test_unparseable_addresses_fail_closed(address):
    assert is_private_ip(address) is True


def test_allowlist_matching():
    assert is_hostname_allowed("example.com", ["example.com"]) is True
    assert is_hostname_allowed("sub.example.com", ["example.com"]) is True
    assert is_hostname_allowed("evil.com", ["example.com"]) is False
    assert is_hostname_allowed("notexample.com", ["example.com"]) is False
    assert is_hostname_allowed("Example.COM.", [" example.com "]) is True
    assert is_hostname_allowed("example.com", ["", "  "]) is False


def test_normalize_hostname():
    assert normalize_hostname("  Playlists.Example.COM. ") == "playlists.example.com"
    assert normalize_hostname(None) == ""


async def test_public_hostname_passes(fake_resolver):
    parsed = await assert_safe_url("https://playlists.example.com/get.php?u=a", resolver=fake_resolver)

    assert parsed.hostname == "playlists.example.com"
    assert fake_resolver.calls == ["playlists.example.com"]


async def test_every_resolved_address_is_checked(fake_resolver):
    await assert_safe_url("http://cdn.example.com/list.m3u", resolver=fake_resolver)

    with pytest.raises(ForbiddenHostError):
        await assert_safe_url("http://mixed.example.com/list.m3u", resolver=fake_resolver)


async def test_hostname_resolving_to_private_ip_is_blocked(fake_resolver):
    with pytest.raises(ForbiddenHostError):
        await assert_safe_url("http://internal.example.com/", resolver=fake_resolver)


async def test_short_unique_local_aaaa_record_is_blocked():
    resolver = FakeResolver({"v6.example.com": ["2606:4700:4700::1111", "fd::1"]})

    with pytest.raises(ForbiddenHostError):
        await assert_safe_url("http://v6.example.com/list.m3u", resolver=resolver)


@pytest.mark.parametrize(
    "url",
    [
        "http://127.0.0.1/list.m3u",
        "http://10.0.0.5:8080/",
        "http://[::1]/",
        "http://[fe80::1]/",
        "http://[::ffff:192.168.0.1]/",
    ],
)
async def test_private_ip_literals_are_blocked_without_dns(url, fake_resolver):
    with pytest.raises(ForbiddenHostError):
        await assert_safe_url(url, resolver=fake_resolver)
    assert fake_resolver.calls == []


async def test_public_ip_literal_skips_dns(fake_resolver):
    await assert_safe_url("http://8.8.8.8/list.m3u", resolver=fake_resolver)
    assert fake_resolver.calls == []


@pytest.mark.parametrize(
    "url",
    ["http://localhost/", "http://LOCALHOST./x", "http://api.localhost/", "http://printer.local/"],
)
async def test_local_hostnames_are_blocked(url, fake_resolver):
    with pytest.raises(ForbiddenHostError):
        await assert_safe_url(url, resolver=fake_resolver)


@pytest.mark.parametrize(
    "url",
    ["ftp://example.com/list.m3u", "file:///etc/passwd", "javascript:alert(1)", "not a url", "http://", "http://[::1"],
)
async def test_invalid_urls(url, fake_resolver):
    with pytest.raises(InvalidUrlError):
        await assert_safe_url(url, resolver=fake_resolver)


async def test_allowlist_is_enforced(fake_resolver):
    await assert_safe_url(
        "http://playlists.example.com/",
        ["example.com"],
        resolver=fake_resolver,
    )

    with pytest.raises(ForbiddenHostError):
        await assert_safe_url("http://8.8.8.8/", ["example.com"], resolver=fake_resolver)


async def test_unresolvable_host(fake_resolver):
    with pytest.raises(UnresolvableHostError):
        await assert_safe_url("http://nowhere.invalid/", resolver=fake_resolver)


async def test_empty_resolution_is_unresolvable():
    async def empty_resolver(hostname: str) -> list[str]:
        return []

    with pytest.raises(UnresolvableHostError):
        await assert_safe_url("http://empty.example.com/", resolver=empty_resolver)
