"""Tests for API middleware."""

from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    def test_generates_request_id_if_not_provided(self, client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = client.get("/health")
        assert response.status_code == 200
        assert "X-Request-ID" in response.headers
        # UUID format
        request_id = response.headers["X-Request-ID"]
        assert len(request_id) == 36

    def test_uses_provided_request_id(self, client: TestClient) -> None:
        """Should use request ID from request headers."""
        custom_id = "custom-request-id-12345"
        response = client.get(
            "/health",
            headers={"X-Request-ID": custom_id},
        )
        assert response.status_code == 200
        assert response.headers["X-Request-ID"] == custom_id


class TestErrorHandling:
    """Tests for consistent error bodies."""

    def test_unhandled_exception_returns_internal_error(
        self, client: TestClient, facet_computer: MagicMock
    ) -> None:
        """Unexpected failures should not leak details."""
        facet_computer.compute_facets.side_effect = RuntimeError("boom")

        response = client.get("/facets")

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "INTERNAL_ERROR"
        assert "boom" not in data["message"]

    def test_unknown_route_uses_error_format(self, client: TestClient) -> None:
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert response.json()["error_code"] == "ERROR"

    def test_store_failure_outside_services_returns_503(
        self, client: TestClient, facet_computer: MagicMock
    ) -> None:
        facet_computer.compute_facets.side_effect = OperationalError(
            "COMMIT", {}, Exception("database is locked")
        )

        response = client.get("/facets")

        assert response.status_code == 503
        data = response.json()
        assert data["error_code"] == "CATALOG_UNAVAILABLE"
        assert "locked" not in data["message"]
        assert data["request_id"] == response.headers["X-Request-ID"]
