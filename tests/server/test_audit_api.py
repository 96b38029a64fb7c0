"""Tests for the HTTP API: status codes, envelopes and rate limiting."""

import asyncio

import pytest
from starlette.testclient import TestClient

from site_audit import __version__
from site_audit.exceptions import RequiredCollectorFailure, ValidationFailure
from site_audit.models import HistoryEntry, StageTimings, TargetJob
from site_audit.orchestration import local_synthesis
from site_audit.report import build_report
from site_audit.server.app import create_app, parse_pages
from site_audit.server.ratelimit import SlidingWindowRateLimiter


def _report(url, label, bundle, make_result):
    job = TargetJob(url=url, label=label)
    results = [make_result("Visual & Design", score=70), make_result("SEO", score=90)]
    return build_report(
        job,
        bundle,
        results,
        local_synthesis(results, [1.0, 1.0], job.hostname),
        StageTimings(total_ms=1500),
        ["Visual & Design", "SEO"],
        ["palette", "search"],
    )


class FakeService:
    def __init__(self, make_report, error=None, delay=0.0):
        self.make_report = make_report
        self.error = error
        self.delay = delay
        self.audited = []
        self.history_limits = []
        self.closed = False

    async def audit_pages(self, pages):
        self.audited.append(list(pages))
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [self.make_report(url, label) for url, label in pages]

    def history(self, limit=20):
        self.history_limits.append(limit)
        return [
            HistoryEntry(
                job_id="audit_1_abc",
                url="https://acme.test/",
                hostname="acme.test",
                overall_score=80,
                status="complete",
                created_at="2024-01-01T00:00:00Z",
            )
        ]

    async def aclose(self):
        self.closed = True


@pytest.fixture
def make_report(bundle, make_result):
    return lambda url, label: _report(url, label, bundle, make_result)


@pytest.fixture
def service(make_report):
    return FakeService(make_report)


@pytest.fixture
def client(service):
    with TestClient(create_app(service)) as test_client:
        yield test_client


class TestAudit:
    def test_single_url(self, client, service):
        response = client.post("/api/audit", json={"url": "acme.test"})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert len(body["data"]) == 1
        report = body["data"][0]
        assert report["url"] == "https://acme.test/"
        assert report["pageLabel"] == "homepage"
        assert [s["id"] for s in report["sections"]] == ["visual-design", "seo"]
        assert service.audited == [[("https://acme.test/", "homepage")]]

    def test_two_pages(self, client, service):
        response = client.post("/api/audit", json={"pages": [
            {"url": "https://acme.test/"},
            {"url": "https://acme.test/p/1", "label": "product-page"},
        ]})
        assert response.status_code == 200
        assert [r["pageLabel"] for r in response.json()["data"]] == ["homepage", "product-page"]

    @pytest.mark.parametrize(
        "payload",
        [
            {"url": "http://127.0.0.1/admin"},
            {"url": "ftp://acme.test"},
            {},
            {"pages": []},
            {"pages": [{"url": "a.test"}, {"url": "b.test"}, {"url": "c.test"}]},
            {"pages": [{"url": "a.test", "label": "checkout"}]},
        ],
    )
    def test_rejected_before_pipeline(self, client, service, payload):
        response = client.post("/api/audit", json=payload)
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "AU400"
        assert service.audited == []

    def test_private_url_message(self, client):
        response = client.post("/api/audit", json={"url": "localhost:8080"})
        assert response.json()["error"] == "Internal or private URLs are not permitted"

    def test_body_must_be_json(self, client):
        response = client.post("/api/audit", content=b"{nope", headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert response.json()["error"] == "Request body must be JSON"

    def test_required_collector_failure(self, make_report):
        failing = FakeService(make_report, error=RequiredCollectorFailure([("html", "HTTP 503")]))
        with TestClient(create_app(failing)) as client:
            response = client.post("/api/audit", json={"url": "acme.test"})
        assert response.status_code == 502
        assert response.json()["code"] == "AU502"
        assert "html" in response.json()["error"]

    def test_unexpected_error_is_generic(self, make_report):
        failing = FakeService(make_report, error=RuntimeError("secret internals"))
        with TestClient(create_app(failing)) as client:
            response = client.post("/api/audit", json={"url": "acme.test"})
        assert response.status_code == 500
        assert response.json()["code"] == "AU500"
        assert "secret" not in response.json()["error"]

    def test_overall_time_budget(self, make_report):
        slow = FakeService(make_report, delay=2)
        with TestClient(create_app(slow, max_duration_seconds=0.05)) as client:
            response = client.post("/api/audit", json={"url": "acme.test"})
        assert response.status_code == 500
        assert "took too long" in response.json()["error"]


class TestRateLimit:
    def test_sixth_request_in_window_is_rejected(self, client, service):
        for _ in range(5):
            assert client.post("/api/audit", json={"url": "acme.test"}).status_code == 200
        response = client.post("/api/audit", json={"url": "acme.test"})
        assert response.status_code == 429
        assert response.json()["code"] == "AU429"
        assert len(service.audited) == 5

    def test_keys_by_forwarded_address(self, service):
        app = create_app(service, SlidingWindowRateLimiter(max_requests=1, window_seconds=60))
        with TestClient(app) as client:
            first = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}
            assert client.post("/api/audit", json={"url": "acme.test"}, headers=first).status_code == 200
            assert client.post("/api/audit", json={"url": "acme.test"}, headers=first).status_code == 429
            other = {"X-Real-IP": "198.51.100.2"}
            assert client.post("/api/audit", json={"url": "acme.test"}, headers=other).status_code == 200

    def test_uses_supplied_limiter_budget(self, service):
        limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=60)
        assert len(limiter) == 0
        with TestClient(create_app(service, limiter)) as client:
            codes = [client.post("/api/audit", json={"url": "acme.test"}).status_code for _ in range(3)]
        assert codes == [200, 429, 429]
        assert len(limiter) == 1


class TestReadEndpoints:
    def test_history(self, client, service):
        response = client.get("/api/history?limit=500")
        assert response.status_code == 200
        assert response.json()["data"][0]["jobId"] == "audit_1_abc"
        assert service.history_limits == [100]

    def test_history_bad_limit(self, client):
        response = client.get("/api/history?limit=abc")
        assert response.status_code == 400
        assert response.json()["code"] == "AU400"

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok", "version": __version__}

    def test_lifespan_closes_service(self, service):
        with TestClient(create_app(service)):
            assert not service.closed
        assert service.closed


def test_parse_pages_normalises_urls():
    assert parse_pages({"url": " acme.test "}, max_pages=2) == [("https://acme.test/", "homepage")]
    with pytest.raises(ValidationFailure):
        parse_pages(["not", "an", "object"], max_pages=2)
