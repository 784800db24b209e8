from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.services.settings import VerificationSettings
from tests.factories import NOW


async def _update_fields(record, **fields):
    for name, value in fields.items():
        setattr(record, name, value)
    return record


async def _passthrough(entity):
    return entity


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    # Mock repositories
    uow.invites = MagicMock()
    uow.invites.get_by_token = AsyncMock(return_value=None)
    uow.invites.get_by_identity_ref = AsyncMock(return_value=None)
    uow.invites.get_latest_pending = AsyncMock(return_value=None)
    uow.invites.list_by_identity_key = AsyncMock(return_value=[])
    uow.invites.list_pending_by_email_and_brand = AsyncMock(return_value=[])
    uow.invites.list_by_email_and_brand = AsyncMock(return_value=[])
    uow.invites.create = AsyncMock(side_effect=_passthrough)
    uow.invites.update = AsyncMock(side_effect=_passthrough)
    uow.invites.update_fields = AsyncMock(side_effect=_update_fields)

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock(side_effect=_passthrough)
    uow.audit_events.list_by_trace_id = AsyncMock(return_value=[])

    return uow


@pytest.fixture
def settings():
    return VerificationSettings(public_base_url="https://invites.example.com")


@pytest.fixture
def clock():
    return lambda: NOW
