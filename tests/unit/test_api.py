"""HTTP-level tests: health, auth guards, request validation (no database)."""

from collections.abc import AsyncIterator, Iterator
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from src.main import app
from src.mm_common.database import get_db_session
from src.mm_gateway.auth.dependencies import _admin_service, get_current_member


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_member_summary_requires_token(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/member/summary")
    assert resp.status_code == 401


async def test_admin_route_requires_token(client: AsyncClient) -> None:
    resp = await client.post("/api/v1/admin/transactions", json={})
    assert resp.status_code == 401


async def test_invalid_token_rejected(client: AsyncClient) -> None:
    resp = await client.get(
        "/api/v1/auth/session", headers={"Authorization": "Bearer not-a-token"}
    )
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"


async def test_login_validation_error(client: AsyncClient) -> None:
    resp = await client.post("/api/v1/auth/login", json={"mobile": ""})
    assert resp.status_code == 422


async def test_request_id_header(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.headers["X-Request-ID"].startswith("req_")


async def test_inbound_request_id_echoed(client: AsyncClient) -> None:
    resp = await client.get("/health", headers={"X-Request-ID": "trace-42"})
    assert resp.headers["X-Request-ID"] == "trace-42"


async def test_oversized_inbound_request_id_replaced(client: AsyncClient) -> None:
    resp = await client.get("/health", headers={"X-Request-ID": "x" * 200})
    assert resp.headers["X-Request-ID"].startswith("req_")


class TestAdminGuard:
    @pytest.fixture
    def as_member(self) -> Iterator[None]:
        async def fake_db() -> AsyncIterator[AsyncMock]:
            yield AsyncMock()

        app.dependency_overrides[get_current_member] = lambda: SimpleNamespace(member_id="11111")
        app.dependency_overrides[get_db_session] = fake_db
        yield
        app.dependency_overrides.clear()

    async def test_non_admin_forbidden(self, client: AsyncClient, as_member: None) -> None:
        with patch.object(_admin_service, "is_admin", AsyncMock(return_value=False)):
            resp = await client.get("/api/v1/admin/items")
        assert resp.status_code == 403
        assert resp.json()["code"] == 1003

    async def test_admin_negative_amount_rejected(
        self, client: AsyncClient, as_member: None
    ) -> None:
        with patch.object(_admin_service, "is_admin", AsyncMock(return_value=True)):
            resp = await client.post(
                "/api/v1/admin/transactions",
                json={
                    "member_ids": ["11111"],
                    "item_code": "B1",
                    "transaction_type": "REGULAR",
                    "principal_amount": -100,
                },
            )
        assert resp.status_code == 422
