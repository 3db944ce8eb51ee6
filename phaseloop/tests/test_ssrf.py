"""
Tests for outbound URL checks on preview image URLs.
"""

import socket

import pytest

from phaseloop.url_validator import SSRFError, is_ip_blocked, validate_url


class TestValidateUrl:
    """validate_url without DNS resolution."""

    def test_allows_public_image_urls(self):
        url = "https://images.example.com/covers/album.jpg?w=1200"
        assert validate_url(url, resolve_dns=False) == url
        assert validate_url("http://8.8.8.8/a.png", resolve_dns=False) == "http://8.8.8.8/a.png"

    @pytest.mark.parametrize("url", [
        "file:///etc/passwd",
        "ftp://example.com/cover.jpg",
        "data:image/png;base64,AAAA",
        "not-a-url",
    ])
    def test_rejects_non_http_schemes(self, url):
        with pytest.raises(SSRFError, match="scheme.*not allowed"):
            validate_url(url, resolve_dns=False)

    def test_rejects_missing_hostname(self):
        with pytest.raises(SSRFError, match="hostname"):
            validate_url("http:///cover.jpg", resolve_dns=False)

    @pytest.mark.parametrize("url", [
        "http://localhost/admin",
        "http://LOCALHOST./admin",
        "http://metadata.google.internal/computeMetadata/v1/",
        "http://nas.local/share.jpg",
        "http://api.internal/",
        "http://app.localhost/",
    ])
    def test_rejects_internal_hostnames(self, url):
        with pytest.raises(SSRFError, match="not allowed"):
            validate_url(url, resolve_dns=False)

    @pytest.mark.parametrize("url", [
        "http://127.0.0.1/",
        "http://10.1.2.3/",
        "http://172.16.0.1/",
        "http://192.168.1.10/",
        "http://169.254.169.254/latest/meta-data/",
        "http://0.0.0.0/",
        "http://[::1]/",
        "http://[fe80::1]/",
        "http://[::ffff:127.0.0.1]/",
    ])
    def test_rejects_non_public_ip_literals(self, url):
        with pytest.raises(SSRFError, match="not allowed"):
            validate_url(url, resolve_dns=False)


class TestDnsResolution:
    """Hostnames are checked against every resolved address."""

    def _fake_getaddrinfo(self, *addresses):
        def fake(host, port, proto=0):
            return [(socket.AF_INET, socket.SOCK_STREAM, proto, "", (addr, port)) for addr in addresses]
        return fake

    def test_blocks_hostname_resolving_to_private_ip(self, monkeypatch):
        monkeypatch.setattr(socket, "getaddrinfo", self._fake_getaddrinfo("93.184.216.34", "10.0.0.5"))
        with pytest.raises(SSRFError, match="resolves to blocked"):
            validate_url("https://cdn.example.com/img.jpg")

    def test_allows_hostname_resolving_to_public_ip(self, monkeypatch):
        monkeypatch.setattr(socket, "getaddrinfo", self._fake_getaddrinfo("93.184.216.34"))
        assert validate_url("https://cdn.example.com/img.jpg") == "https://cdn.example.com/img.jpg"

    def test_unresolvable_hostname_is_left_to_the_fetch(self, monkeypatch):
        def fail(*args, **kwargs):
            raise socket.gaierror("Name or service not known")
        monkeypatch.setattr(socket, "getaddrinfo", fail)
        assert validate_url("https://nowhere.example/img.jpg") == "https://nowhere.example/img.jpg"


def test_is_ip_blocked():
    assert is_ip_blocked("127.0.0.1") is True
    assert is_ip_blocked("192.168.0.1") is True
    assert is_ip_blocked("::ffff:10.0.0.1") is True
    assert is_ip_blocked("8.8.8.8") is False
    assert is_ip_blocked("1.1.1.1") is False
    assert is_ip_blocked("not-an-ip") is False
