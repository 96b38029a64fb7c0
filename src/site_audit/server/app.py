"""Starlette ASGI application: audit, history and health endpoints."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Optional, Protocol, Sequence

from pydantic import BaseModel, Field, ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from .. import __version__
from ..exceptions import ErrorCode, SiteAuditError, ValidationFailure
from ..models import HistoryEntry, PageLabel
from ..report.models import FinalReport
from ..url_safety import normalise_url
from .ratelimit import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


class Auditor(Protocol):
    async def audit_pages(self, pages: Sequence[tuple[str, PageLabel]]) -> list[FinalReport]: ...

    def history(self, limit: int = 20) -> list[HistoryEntry]: ...

    async def aclose(self) -> None: ...


class PageRequest(BaseModel):
    url: str = Field(min_length=1)
    label: PageLabel = "homepage"


class AuditRequest(BaseModel):
    """Either ``{"url": ...}`` or ``{"pages": [{"url", "label"}, ...]}``."""

    url: Optional[str] = None
    pages: Optional[list[PageRequest]] = None


def parse_pages(body: Any, max_pages: int) -> list[tuple[str, PageLabel]]:
    """Raises:
        ValidationFailure: malformed body or wrong number of pages
    """
    try:
        request = AuditRequest.model_validate(body)
    except ValidationError as e:
        raise ValidationFailure(f"Validation failed: {e.errors()[0]['msg']}")
    if request.pages is not None:
        if not 1 <= len(request.pages) <= max_pages:
            raise ValidationFailure(f"Between 1 and {max_pages} pages may be audited per request")
        return [(normalise_url(page.url), page.label) for page in request.pages]
    if request.url:
        return [(normalise_url(request.url), "homepage")]
    raise ValidationFailure("URL is required")


def client_key(request: Request) -> str:
    """First ``X-Forwarded-For`` entry, then ``X-Real-IP``, then the peer address."""
    forwarded = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
    if forwarded:
        return forwarded
    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    if request.client is not None:
        return request.client.host
    return "unknown"


def error_response(code: ErrorCode, message: str) -> JSONResponse:
    return JSONResponse(
        {"success": False, "error": message, "code": code.value},
        status_code=code.http_status,
    )


def create_app(
    service: Auditor,
    limiter: Optional[SlidingWindowRateLimiter] = None,
    max_duration_seconds: float = 300.0,
    max_pages: int = 2,
) -> Starlette:
    """Build the Starlette application around *service*.

    Args:
        service: Runs audits and reads history
        limiter: Per-client rate limiter for ``POST /api/audit``
        max_duration_seconds: Budget for one audit request
        max_pages: Pages accepted by one audit request
    """
    if limiter is None:
        limiter = SlidingWindowRateLimiter()

    async def audit(request: Request) -> JSONResponse:
        try:
            limiter.check(client_key(request))
            try:
                body = await request.json()
            except ValueError:
                raise ValidationFailure("Request body must be JSON")
            pages = parse_pages(body, max_pages)
            reports = await asyncio.wait_for(
                service.audit_pages(pages), timeout=max_duration_seconds
            )
        except SiteAuditError as e:
            if e.code is ErrorCode.AU500:
                logger.error(f"Audit failed: {e}")
                return error_response(e.code, "An unexpected error occurred. Please try again.")
            logger.info(f"Audit request rejected ({e.code.value}): {e}")
            return error_response(e.code, e.message)
        except asyncio.TimeoutError:
            logger.error(f"Audit exceeded {max_duration_seconds:g}s")
            return error_response(ErrorCode.AU500, "The audit took too long. Please try again.")
        except Exception:
            logger.exception("Unexpected audit error")
            return error_response(ErrorCode.AU500, "An unexpected error occurred. Please try again.")
        return JSONResponse({"success": True, "data": [r.to_json_dict() for r in reports]})

    async def history(request: Request) -> JSONResponse:
        raw = request.query_params.get("limit", "20")
        try:
            limit = int(raw)
        except ValueError:
            return error_response(ErrorCode.AU400, f"limit must be an integer, got {raw!r}")
        limit = max(1, min(limit, 100))
        entries = await asyncio.to_thread(service.history, limit)
        return JSONResponse({"success": True, "data": [e.to_json_dict() for e in entries]})

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "version": __version__})

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        yield
        await service.aclose()

    return Starlette(
        routes=[
            Route("/api/audit", audit, methods=["POST"]),
            Route("/api/history", history, methods=["GET"]),
            Route("/api/health", health, methods=["GET"]),
        ],
        lifespan=lifespan,
    )
