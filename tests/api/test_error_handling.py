"""Tests for authentication and the uniform error envelope.

Tests cover:
- Missing/incorrect API key returns 401 UNAUTHORIZED
- No configured API key rejects every request
- Unknown paths return 404, wrong methods return 400 with allowed methods
- Unexpected exceptions return INTERNAL_ERROR without details
"""

from collections.abc import Callable
from unittest.mock import AsyncMock, patch

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Mount, Route, Router

from seo_platform.core.config import Settings, get_settings
from seo_platform.main import _allowed_methods, create_app


class TestAuthentication:
    async def test_missing_api_key_is_unauthorized(self, anon_client: AsyncClient) -> None:
        response = await anon_client.get("/api/pages")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UNAUTHORIZED"
        assert body["error"]["message"] == "Invalid or missing API key"

    async def test_wrong_api_key_is_unauthorized(self, anon_client: AsyncClient) -> None:
        response = await anon_client.get(
            "/api/competitors", headers={"x-api-key": "wrong-key"}
        )

        assert response.status_code == 401

    async def test_unconfigured_api_key_rejects_everything(
        self,
        app: FastAPI,
        mock_db_manager: object,
        make_settings: Callable[..., Settings],
    ) -> None:
        app.dependency_overrides[get_settings] = lambda: make_settings(api_key=None)
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.get("/api/pages", headers={"x-api-key": ""})

        assert response.status_code == 401

    async def test_health_needs_no_key(self, anon_client: AsyncClient) -> None:
        response = await anon_client.get("/api/health")

        assert response.status_code == 200


class TestRoutingErrors:
    async def test_unknown_path_returns_not_found(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_wrong_method_lists_allowed_methods(
        self, async_client: AsyncClient
    ) -> None:
        response = await async_client.delete("/api/pages")

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "Method DELETE not allowed"
        assert error["details"]["allowed"] == ["GET", "POST"]

    async def test_wrong_method_on_post_only_route(
        self, async_client: AsyncClient
    ) -> None:
        response = await async_client.get("/api/enrich/keywords")

        assert response.status_code == 400
        assert response.json()["error"]["details"]["allowed"] == ["POST"]


class TestValidationErrors:
    async def test_malformed_body_is_validation_error(
        self, async_client: AsyncClient
    ) -> None:
        response = await async_client.post("/api/pages", json={"url": "/x"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        fields = {e["field"] for e in body["error"]["details"]["errors"]}
        assert {"page_name", "cluster"} <= fields


class TestUnexpectedErrors:
    async def test_unexpected_exception_is_internal_error(
        self, async_client: AsyncClient
    ) -> None:
        with patch(
            "seo_platform.api.v1.endpoints.competitors.CompetitorRepository.list_competitors",
            new=AsyncMock(side_effect=RuntimeError("boom")),
        ):
            response = await async_client.get("/api/competitors")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert body["error"]["message"] == "An unexpected error occurred"
        assert "boom" not in response.text
        assert "X-Request-ID" in response.headers


async def _noop(request: Request) -> PlainTextResponse:
    return PlainTextResponse("")


class TestAllowedMethods:
    """Allowed methods come from every matching route, including nested routers."""

    def _request(self, app: FastAPI, method: str, path: str) -> Request:
        return Request(
            {
                "type": "http",
                "method": method,
                "path": path,
                "root_path": "",
                "headers": [],
                "query_string": b"",
                "app": app,
            }
        )

    def test_descends_into_mounted_router(self) -> None:
        nested = Router(
            routes=[
                Route("/items", _noop, methods=["GET"]),
                Route("/items", _noop, methods=["POST"]),
                Route("/other", _noop, methods=["DELETE"]),
            ]
        )
        app = FastAPI()
        app.router.routes.append(Mount("/v2", app=nested))

        request = self._request(app, "PUT", "/v2/items")

        assert _allowed_methods(request) == ["GET", "POST"]

    def test_included_api_routes_are_found(self) -> None:
        request = self._request(create_app(), "DELETE", "/api/keywords/batch")

        assert _allowed_methods(request) == ["POST"]

    def test_unmatched_path_has_no_methods(self) -> None:
        request = self._request(FastAPI(), "GET", "/nowhere")

        assert _allowed_methods(request) == []
