"""HTTPS, certificate, redirect chain and security header checks."""

from __future__ import annotations

import asyncio
import ssl
from typing import Optional
from urllib.parse import urljoin, urlparse

from ..bundle import RedirectHop, SecurityHeadersData, SslDnsData
from ..logging_config import get_logger
from .http import CollectorContext, fetch

logger = get_logger(__name__)

MAX_REDIRECTS = 10

SECURITY_HEADERS = (
    "strict-transport-security",
    "content-security-policy",
    "x-frame-options",
    "x-content-type-options",
    "referrer-policy",
    "permissions-policy",
)


def header_grade(missing: int) -> str:
    if missing == 0:
        return "A"
    if missing <= 1:
        return "B"
    if missing <= 2:
        return "C"
    if missing <= 4:
        return "D"
    return "F"


async def trace_redirects(ctx: CollectorContext, start_url: str) -> list[RedirectHop]:
    """Follow redirects one hop at a time, recording each status."""
    chain: list[RedirectHop] = []
    current = start_url
    for _ in range(MAX_REDIRECTS):
        response = await fetch(
            ctx,
            current,
            "redirect-trace",
            method="HEAD",
            follow_redirects=False,
            raise_for_status=False,
            retry=False,
        )
        chain.append(RedirectHop(url=current, status_code=response.status_code))
        location = response.headers.get("location")
        if not (300 <= response.status_code < 400 and location):
            break
        current = urljoin(current, location)
    return chain


async def peer_certificate(host: str, timeout: float) -> tuple[Optional[str], Optional[str], Optional[str]]:
    """Issuer organisation, expiry and TLS version of ``host:443``."""
    context = ssl.create_default_context()
    reader, writer = await asyncio.wait_for(
        asyncio.open_connection(host, 443, ssl=context, server_hostname=host),
        timeout=timeout,
    )
    try:
        ssl_object = writer.get_extra_info("ssl_object")
        cert = ssl_object.getpeercert() if ssl_object else None
        protocol = ssl_object.version() if ssl_object else None
    finally:
        writer.close()
        await writer.wait_closed()
    if not cert:
        return None, None, protocol
    issuer = dict(item for rdn in cert.get("issuer", ()) for item in rdn)
    return issuer.get("organizationName") or issuer.get("commonName"), cert.get("notAfter"), protocol


async def collect_ssl_dns(ctx: CollectorContext, url: str, job_id: str) -> SslDnsData:
    parsed = urlparse(url)
    host = parsed.hostname or ""
    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"

    chain = await trace_redirects(ctx, f"http://{host}{path}")
    final_url = chain[-1].url if chain else url
    is_https = urlparse(final_url).scheme == "https"

    issuer = expiry = protocol = None
    if is_https:
        try:
            issuer, expiry, protocol = await peer_certificate(host, ctx.config.http_timeout_seconds)
        except (OSError, ssl.SSLError, asyncio.TimeoutError) as e:
            logger.debug(f"Certificate lookup for {host} failed: {e}")

    return SslDnsData(
        is_https=is_https,
        cert_issuer=issuer,
        cert_expiry=expiry,
        protocol=protocol,
        redirect_chain=chain,
    )


async def collect_security_headers(ctx: CollectorContext, url: str, job_id: str) -> SecurityHeadersData:
    response = await fetch(ctx, url, "security-headers", method="HEAD", raise_for_status=False)
    headers = {name: response.headers.get(name) for name in SECURITY_HEADERS}
    missing = [name for name, value in headers.items() if value is None]
    return SecurityHeadersData(headers=headers, missing_headers=missing, grade=header_grade(len(missing)))
