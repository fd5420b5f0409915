import pytest
from fastapi.testclient import TestClient

from shortener_app.config import Settings
from shortener_app.models import MetaType, ShortURL


class TestManagementAPI:
    """Authenticated /v1 endpoints"""

    def test_create_short_url(self, api_client: TestClient, auth_headers):
        """Registering a code returns 201"""
        response = api_client.post(
            "/v1/url/abc", json={"url": "https://example.com"}, headers=auth_headers
        )
        assert response.status_code == 201
        assert response.json() == {"short_code": "abc", "url": "https://example.com"}

    def test_duplicate_code_conflicts(self, api_client: TestClient, auth_headers):
        """Registering an active code again returns 409"""
        api_client.post("/v1/url/abc", json={"url": "https://example.com"}, headers=auth_headers)

        response = api_client.post(
            "/v1/url/abc", json={"url": "https://other.example"}, headers=auth_headers
        )
        assert response.status_code == 409

    def test_empty_url_rejected(self, api_client: TestClient, auth_headers):
        response = api_client.post("/v1/url/abc", json={"url": ""}, headers=auth_headers)
        assert response.status_code == 422

    def test_delete(self, api_client: TestClient, auth_headers):
        """Deleting returns 200 once, then 400"""
        api_client.post("/v1/url/abc", json={"url": "https://example.com"}, headers=auth_headers)

        first = api_client.delete("/v1/url/abc", headers=auth_headers)
        second = api_client.delete("/v1/url/abc", headers=auth_headers)

        assert first.status_code == 200
        assert first.json() == {"removed": 1}
        assert second.status_code == 400

    def test_list_urls(self, api_client: TestClient, auth_headers):
        api_client.post("/v1/url/a", json={"url": "https://a.example"}, headers=auth_headers)
        api_client.post("/v1/url/b", json={"url": "https://b.example"}, headers=auth_headers)

        response = api_client.get("/v1/urls", headers=auth_headers)

        assert response.status_code == 200
        assert [item["short_code"] for item in response.json()] == ["a", "b"]

    def test_missing_api_key(self, api_client: TestClient):
        response = api_client.post("/v1/url/abc", json={"url": "https://example.com"})
        assert response.status_code == 401

    def test_invalid_api_key(self, api_client: TestClient, api_key):
        """Every /v1 route rejects an unknown key"""
        headers = {"x-api-key": "garbage"}
        assert api_client.post("/v1/url/abc", json={"url": "https://x.example"}, headers=headers).status_code == 401
        assert api_client.delete("/v1/url/abc", headers=headers).status_code == 401
        assert api_client.get("/v1/logs", headers=headers).status_code == 401
        assert api_client.get("/v1/urls", headers=headers).status_code == 401

    def test_persistence_failure_returns_500(self, api_client: TestClient, auth_headers, engine):
        ShortURL.__table__.drop(engine)

        response = api_client.post(
            "/v1/url/abc", json={"url": "https://example.com"}, headers=auth_headers
        )
        assert response.status_code == 500

    def test_health(self, api_client: TestClient):
        assert api_client.get("/health").json() == {"status": "healthy"}


class TestRedirectService:
    """Unauthenticated GET /{short_code}"""

    def test_redirect_permanent_by_default(self, store, meta, service_client: TestClient):
        store.insert("abc", "https://example.com", meta)

        response = service_client.get("/abc", follow_redirects=False)

        assert response.status_code == 301
        assert response.headers["location"] == "https://example.com"

    def test_redirect_302_when_configured(self, store, meta, make_service_client):
        store.insert("abc", "https://example.com", meta)
        client = make_service_client(Settings(_env_file=None, use_302="1"))

        response = client.get("/abc", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com"

    def test_not_found(self, service_client: TestClient):
        response = service_client.get("/missing-code", follow_redirects=False)
        assert response.status_code == 404

    def test_fallback_redirect(self, make_service_client):
        """Scenario D: misses go to the configured fallback URL"""
        client = make_service_client(
            Settings(
                _env_file=None,
                use_302=None,
                address_to_redirect_if_not_found="https://fallback.example",
            )
        )

        response = client.get("/missing-code", follow_redirects=False)

        assert response.status_code == 301
        assert response.headers["location"] == "https://fallback.example"

    @pytest.mark.parametrize("code", ["health", "docs", "redoc", "openapi.json"])
    def test_every_code_is_a_redirect(self, store, meta, service_client: TestClient, audit_rows, code):
        """No path on the redirect service is reserved for anything else"""
        store.insert(code, "https://example.com", meta)

        response = service_client.get(f"/{code}", follow_redirects=False)

        assert response.status_code == 301
        assert response.headers["location"] == "https://example.com"
        assert [r.meta_type for r in audit_rows(code)] == [MetaType.CREATE, MetaType.ACCESS]

    def test_redirect_records_client_metadata(self, store, meta, service_client, audit_rows):
        store.insert("abc", "https://example.com", meta)

        service_client.get("/abc", headers={"user-agent": "probe"}, follow_redirects=False)

        event = audit_rows("abc")[-1]
        assert event.address is not None
        assert '"user-agent": "probe"' in event.header


class TestScenarios:
    """End-to-end flow across both listeners"""

    def test_create_conflict_delete_and_logs(
        self, api_client: TestClient, service_client: TestClient, auth_headers
    ):
        # A: create and resolve
        created = api_client.post(
            "/v1/url/abc", json={"url": "https://example.com"}, headers=auth_headers
        )
        assert created.status_code == 201
        response = service_client.get("/abc", follow_redirects=False)
        assert response.status_code == 301
        assert response.headers["location"] == "https://example.com"

        # B: duplicate registration leaves the original in place
        duplicate = api_client.post(
            "/v1/url/abc", json={"url": "https://other.example"}, headers=auth_headers
        )
        assert duplicate.status_code == 409
        response = service_client.get("/abc", follow_redirects=False)
        assert response.headers["location"] == "https://example.com"

        # C: delete, then the code no longer resolves
        assert api_client.delete("/v1/url/abc", headers=auth_headers).status_code == 200
        assert service_client.get("/abc", follow_redirects=False).status_code == 404

        # E: every resolve attempt is counted, including the miss
        logs = api_client.get("/v1/logs", headers=auth_headers)
        assert logs.status_code == 200
        entry = next(item for item in logs.json() if item["code"] == "abc")
        assert entry["access_count"] == 3
        assert entry["url"] == "https://example.com"
        assert entry["last_access"] is not None
