"""Audit URL normalisation and private-host rejection."""

from __future__ import annotations

import ipaddress
import re
from urllib.parse import urlsplit

from .exceptions import ValidationFailure

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)

PRIVATE_HOST_PATTERNS = (
    re.compile(r"^127\."),
    re.compile(r"^10\."),
    re.compile(r"^192\.168\."),
    re.compile(r"^172\.(1[6-9]|2\d|3[01])\."),
    re.compile(r"^0\."),
    re.compile(r"^169\.254\."),
    re.compile(r"^::1$"),
    re.compile(r"^fc00:", re.IGNORECASE),
    re.compile(r"^fe80:", re.IGNORECASE),
    re.compile(r"^localhost$", re.IGNORECASE),
)


def is_private_host(hostname: str) -> bool:
    host = hostname.strip("[]").lower()
    if host == "localhost" or host.endswith(".localhost"):
        return True
    if any(pattern.search(host) for pattern in PRIVATE_HOST_PATTERNS):
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_reserved
        or address.is_unspecified
    )


def validate_audit_url(url: str) -> str:
    """Return ``url`` unchanged if it may be audited.

    Raises:
        ValidationFailure: bad format, non-http(s) scheme, empty or private host
    """
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        raise ValidationFailure("Invalid URL format", url)
    if parts.scheme.lower() not in ("http", "https"):
        raise ValidationFailure("Only HTTP and HTTPS URLs are supported", url)
    if not hostname:
        raise ValidationFailure("URL must have a valid hostname", url)
    if is_private_host(hostname):
        raise ValidationFailure("Internal or private URLs are not permitted", url)
    return url


def normalise_url(raw_url: str) -> str:
    """Trim, default to ``https://`` and validate.

    Example:
        >>> normalise_url("  example.com/shop ")
        'https://example.com/shop'
    """
    url = (raw_url or "").strip()
    if not url:
        raise ValidationFailure("URL is required")
    if not _SCHEME_RE.match(url):
        if "://" in url:
            raise ValidationFailure("Only HTTP and HTTPS URLs are supported", url)
        url = f"https://{url}"
    validate_audit_url(url)
    parts = urlsplit(url)
    # bare host gets a root path
    if not parts.path:
        url = parts._replace(path="/").geturl()
    return url
