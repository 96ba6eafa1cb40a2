"""Per-request transaction and event ordering, and tenant resolution failures."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from app.api.v1.dependencies import Publisher, TenantDb, get_event_bus
from app.domain.events import BaseEvent, Topic
from app.domain.exceptions import BusinessRuleException
from tests.conftest import TENANT_HEADERS, FakeTenantManager


@pytest.fixture
def journal() -> list[str]:
    return []


@pytest.fixture
def tenant_client(fake_manager: FakeTenantManager, journal: list[str]) -> MagicMock:
    """Tenant database client whose transaction records how it ended."""
    client = MagicMock()
    session = MagicMock()
    client.session.return_value.__aenter__.return_value = session
    session.begin.return_value.__aexit__.side_effect = lambda exc_type, *_: journal.append(
        "commit" if exc_type is None else "rollback"
    )
    fake_manager.client = client
    return client


@pytest.fixture
def bus(app: FastAPI, journal: list[str]) -> MagicMock:
    bus = MagicMock()
    bus.build_event.side_effect = lambda event_type, payload, context=None: BaseEvent(
        type=event_type, source="office-api", payload=payload
    )
    bus.publish_event = AsyncMock(side_effect=lambda *args, **kwargs: journal.append("publish"))
    bus.send_event = AsyncMock(side_effect=lambda *args, **kwargs: journal.append("send"))
    app.dependency_overrides[get_event_bus] = lambda: bus
    return bus


@pytest.fixture
def write_route(app: FastAPI, journal: list[str]) -> None:
    async def record_department(db: TenantDb, publisher: Publisher, fail: bool = False) -> dict:
        journal.append("write")
        await publisher.publish_to_topic(Topic.EMPLOYEE_EVENTS, "department.created", {"id": "d"})
        await publisher.send_to_queue("oms-audit-log", "audit.log", {"id": "d"})
        journal.append("emitted")
        if fail:
            raise BusinessRuleException("Department code already retired")
        return {"ok": True}

    app.add_api_route("/api/v1/departments-under-test", record_department, methods=["POST"])


@pytest.mark.usefixtures("tenant_client", "write_route")
async def test_events_are_sent_after_commit(
    client: AsyncClient, bus: MagicMock, journal: list[str]
) -> None:
    response = await client.post("/api/v1/departments-under-test", headers=TENANT_HEADERS)

    assert response.status_code == 200
    assert journal == ["write", "emitted", "commit", "publish", "send"]
    event = bus.publish_event.await_args.args[1]
    assert event.type == "department.created"


@pytest.mark.usefixtures("tenant_client", "write_route")
async def test_failed_request_rolls_back_and_sends_nothing(
    client: AsyncClient, bus: MagicMock, journal: list[str]
) -> None:
    response = await client.post(
        "/api/v1/departments-under-test", params={"fail": True}, headers=TENANT_HEADERS
    )

    assert response.status_code == 422
    assert journal == ["write", "emitted", "rollback"]
    bus.publish_event.assert_not_awaited()
    bus.send_event.assert_not_awaited()


async def test_unexpected_tenant_lookup_error_is_500(
    client: AsyncClient, fake_manager: FakeTenantManager, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        fake_manager, "get_tenant_client", AsyncMock(side_effect=RuntimeError("pool exhausted"))
    )

    response = await client.get("/api/v1/employees", headers=TENANT_HEADERS)

    assert response.status_code == 500
    assert response.json() == {
        "error": "TENANT_CONTEXT_ERROR",
        "message": "Failed to establish tenant context",
        "details": {},
    }
