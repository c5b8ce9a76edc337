"""Unit tests for the audit recorder."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from sidesa.core.audit.service import AuditContext, AuditOutcome, AuditRecorder
from sidesa.modules.users.models import User


pytestmark = pytest.mark.unit


def _request(headers: dict[str, str] | None = None) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": ("192.0.2.10", 51000),
    }
    return Request(scope)


class TestAuditContext:
    """Tests for AuditContext.from_request."""

    def test_without_request(self):
        context = AuditContext.from_request(None)

        assert context.ip_address is None
        assert context.request_id is None

    def test_uses_client_address(self):
        request = _request()
        request.state.request_id = "req-1"

        context = AuditContext.from_request(request)

        assert context.ip_address == "192.0.2.10"
        assert context.request_id == "req-1"

    def test_prefers_forwarded_for(self):
        request = _request({"X-Forwarded-For": "203.0.113.5, 10.0.0.1"})

        context = AuditContext.from_request(request)

        assert context.ip_address == "203.0.113.5"
        assert context.request_id is None


class TestRecord:
    """Tests for AuditRecorder.record."""

    async def test_record_stores_entry(self, db: AsyncSession, operator: User):
        recorder = AuditRecorder(
            db, AuditContext(ip_address="198.51.100.7", request_id="req-9")
        )

        entry = await recorder.record(
            actor_id=operator.id,
            action="create_role",
            resource="roles",
            resource_id="Staff",
            description="Created role: Staff",
            metadata={"permissions": ["citizens.read"]},
        )
        await db.commit()

        assert entry is not None
        assert entry.id is not None
        assert entry.outcome == "success"
        assert entry.ip_address == "198.51.100.7"
        assert entry.request_id == "req-9"
        assert entry.metadata_ == {"permissions": ["citizens.read"]}

    async def test_record_without_actor(self, db: AsyncSession, roles):
        entry = await AuditRecorder(db).record(
            actor_id=None, action="seed_roles", resource="roles"
        )

        assert entry is not None
        assert entry.actor_id is None

    async def test_storage_failure_is_swallowed(self):
        session = AsyncMock()
        session.add = MagicMock()
        session.begin_nested = MagicMock(
            side_effect=OperationalError("INSERT", {}, Exception("disk full"))
        )

        entry = await AuditRecorder(session).record(
            actor_id=uuid4(),
            action="permission_denied",
            resource="citizens",
            outcome=AuditOutcome.DENIED,
            commit=True,
        )

        assert entry is None
        session.commit.assert_not_awaited()

    async def test_primary_flush_errors_propagate(self):
        session = AsyncMock()
        session.flush.side_effect = OperationalError("UPDATE", {}, Exception("locked"))

        with pytest.raises(OperationalError):
            await AuditRecorder(session).record(
                actor_id=None, action="update_role", resource="roles"
            )


class TestSearch:
    """Tests for AuditRecorder.search."""

    @pytest.fixture
    async def entries(self, db: AsyncSession, operator: User, viewer: User):
        recorder = AuditRecorder(db)
        await recorder.record(operator.id, "create_role", "roles", resource_id="A")
        await recorder.record(operator.id, "update_role", "roles", resource_id="A")
        await recorder.record(
            viewer.id,
            "permission_denied",
            "citizens",
            outcome=AuditOutcome.DENIED,
        )
        await db.commit()

    async def test_filter_by_actor(self, db: AsyncSession, entries, operator: User):
        items, total = await AuditRecorder(db).search(actor_id=operator.id)

        assert total == 2
        assert {e.action for e in items} == {"create_role", "update_role"}

    async def test_filter_by_outcome(self, db: AsyncSession, entries, viewer: User):
        items, total = await AuditRecorder(db).search(outcome=AuditOutcome.DENIED)

        assert total == 1
        assert items[0].actor_id == viewer.id
        assert items[0].resource == "citizens"

    async def test_filter_by_action_and_resource(self, db: AsyncSession, entries):
        _, total = await AuditRecorder(db).search(action="create_role", resource="roles")
        _, none_total = await AuditRecorder(db).search(
            action="create_role", resource="citizens"
        )

        assert total == 1
        assert none_total == 0

    async def test_pagination(self, db: AsyncSession, entries, operator: User):
        items, total = await AuditRecorder(db).search(
            actor_id=operator.id, page=2, page_size=1
        )

        assert total == 2
        assert len(items) == 1
