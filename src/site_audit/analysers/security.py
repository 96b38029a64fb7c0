"""Security & Trust: HTTPS, redirects and security response headers."""

from ..models import EvidenceKind, Impact
from .base import SectionAnalyser

HEADER_IMPACT = {
    "strict-transport-security": Impact.HIGH,
    "content-security-policy": Impact.HIGH,
    "x-frame-options": Impact.MEDIUM,
    "x-content-type-options": Impact.MEDIUM,
    "referrer-policy": Impact.LOW,
    "permissions-policy": Impact.LOW,
}

HEADER_FIX = {
    "strict-transport-security": "Strict-Transport-Security: max-age=31536000; includeSubDomains",
    "content-security-policy": "Content-Security-Policy-Report-Only: default-src 'self' (then tighten)",
    "x-frame-options": "X-Frame-Options: DENY",
    "x-content-type-options": "X-Content-Type-Options: nosniff",
    "referrer-policy": "Referrer-Policy: strict-origin-when-cross-origin",
    "permissions-policy": "Permissions-Policy: camera=(), microphone=(), geolocation=()",
}


class SecurityAnalyser(SectionAnalyser):
    title = "Security & Trust"
    icon_key = "shield"
    prefix = "sec"
    reads = ("ssl_dns", "security_headers")
    primary = "openai_fast"
    secondary = "gemini_fast"
    instructions = "Assess transport security, redirect hygiene and missing security headers."
    why_it_matters = (
        "Security headers protect visitors from clickjacking, XSS and interception. "
        "Missing them erodes trust."
    )

    def findings(self, bundle):
        ssl = bundle.ssl_dns
        headers = bundle.security_headers
        out = []

        if ssl is None and headers is None:
            out.append(self.finding(
                1, "Security data unavailable",
                "SSL and security header data could not be collected.",
                "ssl_dns and security_headers collectors failed", EvidenceKind.MISSING, Impact.HIGH,
                "Make sure the site is reachable and rerun the audit.", "Data",
            ))
            return out

        if ssl is not None:
            if not ssl.is_https:
                out.append(self.finding(
                    2, "Site not using HTTPS", "Traffic between visitors and the server is unencrypted.",
                    "Final URL is served over plain HTTP", EvidenceKind.HEADER, Impact.HIGH,
                    "Install a TLS certificate and redirect all HTTP traffic to HTTPS.", "Encryption",
                ))
            if len(ssl.redirect_chain) > 2:
                chain = " -> ".join(f"{hop.status_code} {hop.url}" for hop in ssl.redirect_chain)
                out.append(self.finding(
                    3, "Excessive redirect chain",
                    f"The URL passes through {len(ssl.redirect_chain)} redirects before the final page.",
                    chain, EvidenceKind.HEADER, Impact.MEDIUM,
                    "Redirect straight to the canonical HTTPS URL in one hop.", "Redirects",
                ))

        if headers is not None:
            for n, header in enumerate(headers.missing_headers, start=10):
                out.append(self.finding(
                    n, f"Missing security header: {header}",
                    f"The {header} header is not set on the page response.",
                    f"Header \"{header}\" not present", EvidenceKind.HEADER,
                    HEADER_IMPACT.get(header, Impact.LOW),
                    f"Add the header: {HEADER_FIX.get(header, header)}", "Headers",
                    evidence_detail=f"grade {headers.grade}" if headers.grade else None,
                ))
        return out
