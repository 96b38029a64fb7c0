"""Tests for audit URL normalisation and private-host rejection."""

import pytest

from site_audit.exceptions import ValidationFailure
from site_audit.url_safety import is_private_host, normalise_url


class TestNormaliseUrl:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("example.com", "https://example.com/"),
            ("  example.com/shop ", "https://example.com/shop"),
            ("http://example.com", "http://example.com/"),
            ("HTTPS://Example.com/a?b=1", "HTTPS://Example.com/a?b=1"),
        ],
    )
    def test_accepts_public_urls(self, raw, expected):
        assert normalise_url(raw) == expected

    @pytest.mark.parametrize(
        "raw, message",
        [
            ("", "URL is required"),
            ("   ", "URL is required"),
            ("ftp://example.com", "Only HTTP and HTTPS URLs are supported"),
            ("http://", "URL must have a valid hostname"),
            ("localhost:3000", "Internal or private URLs are not permitted"),
            ("http://127.0.0.1/admin", "Internal or private URLs are not permitted"),
            ("http://192.168.1.10", "Internal or private URLs are not permitted"),
            ("http://[::1]/", "Internal or private URLs are not permitted"),
            ("http://[", "Invalid URL format"),
        ],
    )
    def test_rejects(self, raw, message):
        with pytest.raises(ValidationFailure) as exc_info:
            normalise_url(raw)
        assert exc_info.value.message == message


class TestPrivateHosts:
    @pytest.mark.parametrize(
        "host",
        ["localhost", "app.localhost", "10.1.2.3", "172.16.0.1", "172.31.255.255", "169.254.169.254", "0.0.0.0", "fe80::1"],
    )
    def test_private(self, host):
        assert is_private_host(host)

    @pytest.mark.parametrize("host", ["example.com", "8.8.8.8", "172.32.0.1", "2606:4700::1111"])
    def test_public(self, host):
        assert not is_private_host(host)
