import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.adapter.services.lock_service import InMemoryLockService, RedisLockService
from src.app.services.lock_service import LockTimeout
from src.app.services.settings import VerificationSettings
from src.app.services.token_service import CONSUME_LOCK_KEY, TokenService
from src.domain.entities import LockState, OtpStatus, TokenStatus
from src.domain.errors import RETRYABLE_CODES, ErrorCode
from tests.factories import BOOKING_URL, NOW, make_pending_record, make_record


@pytest.fixture
def lock_service():
    return InMemoryLockService()


# ============================================================================
# issue_token
# ============================================================================


@pytest.mark.asyncio
async def test_issue_token_for_verified_row(mock_uow, settings, clock):
    record = make_record(token=None, token_status=None, token_expires_at=None)

    result = await TokenService(mock_uow, settings, clock=clock).issue_token(record)

    assert result.is_ok()
    assert record.token_status == TokenStatus.issued
    assert len(record.token) >= 40
    assert record.token_expires_at == NOW + timedelta(hours=48)
    audit = mock_uow.audit_events.create.call_args.args[0]
    assert audit.action == "TOKEN_ISSUED"
    assert audit.event_metadata["token"] == record.token[:8] + "..."


@pytest.mark.asyncio
async def test_issue_token_uses_brand_override(mock_uow, clock):
    settings = VerificationSettings(brand_token_expiry={"COSTA": timedelta(hours=24)})
    record = make_record(brand="COSTA", token=None, token_status=None, token_expires_at=None)

    await TokenService(mock_uow, settings, clock=clock).issue_token(record)

    assert record.token_expires_at == NOW + timedelta(hours=24)


@pytest.mark.asyncio
async def test_issue_token_requires_verified_otp(mock_uow, settings):
    record = make_pending_record()

    result = await TokenService(mock_uow, settings).issue_token(record)

    assert result.error.code == ErrorCode.TOKEN_NOT_ISSUABLE
    mock_uow.invites.update_fields.assert_not_called()


@pytest.mark.asyncio
async def test_issue_token_only_once(mock_uow, settings):
    result = await TokenService(mock_uow, settings).issue_token(make_record())

    assert result.error.code == ErrorCode.TOKEN_NOT_ISSUABLE


# ============================================================================
# validate
# ============================================================================


@pytest.mark.asyncio
async def test_validate_confirms_issued_token(mock_uow, settings, clock):
    record = make_record()
    mock_uow.invites.get_by_token.return_value = record

    result = await TokenService(mock_uow, settings, clock=clock).validate(record.token)

    assert result.is_ok()
    assert record.token_status == TokenStatus.confirmed


@pytest.mark.asyncio
async def test_validate_is_idempotent_after_confirmed(mock_uow, settings, clock):
    record = make_record()
    mock_uow.invites.get_by_token.return_value = record
    service = TokenService(mock_uow, settings, clock=clock)

    await service.validate(record.token)
    second = await service.validate(record.token)
    third = await service.validate(record.token)

    assert second.is_ok() and third.is_ok()
    assert record.token_status == TokenStatus.confirmed
    assert record.used_at is None
    assert mock_uow.invites.update_fields.await_count == 1


@pytest.mark.asyncio
async def test_validate_unknown_token(mock_uow, settings):
    result = await TokenService(mock_uow, settings).validate("nope")

    assert result.error.code == ErrorCode.TOKEN_NOT_FOUND


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, code",
    [
        (TokenStatus.used, ErrorCode.TOKEN_ALREADY_USED),
        (TokenStatus.revoked, ErrorCode.TOKEN_REVOKED),
        (TokenStatus.expired, ErrorCode.TOKEN_EXPIRED),
    ],
)
async def test_validate_reports_terminal_states(mock_uow, settings, clock, status, code):
    mock_uow.invites.get_by_token.return_value = make_record(token_status=status)

    result = await TokenService(mock_uow, settings, clock=clock).validate("tok")

    assert result.error.code == code
    mock_uow.invites.update_fields.assert_not_called()


@pytest.mark.asyncio
async def test_validate_flips_expired_token(mock_uow, settings):
    record = make_record(token_expires_at=NOW - timedelta(seconds=1))
    mock_uow.invites.get_by_token.return_value = record

    result = await TokenService(mock_uow, settings, clock=lambda: NOW).validate(record.token)

    assert result.error.code == ErrorCode.TOKEN_EXPIRED
    assert record.token_status == TokenStatus.expired
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_validate_brand_mismatch(mock_uow, settings, clock):
    mock_uow.invites.get_by_token.return_value = make_record(brand="ROYAL")

    result = await TokenService(mock_uow, settings, clock=clock).validate("tok", brand="costa")

    assert result.error.code == ErrorCode.BRAND_MISMATCH


@pytest.mark.asyncio
async def test_validate_locked_invite_reports_used(mock_uow, settings, clock):
    mock_uow.invites.get_by_token.return_value = make_record(locked=LockState.locked)

    result = await TokenService(mock_uow, settings, clock=clock).validate("tok")

    assert result.error.code == ErrorCode.TOKEN_ALREADY_USED


# ============================================================================
# consume
# ============================================================================


@pytest.mark.asyncio
async def test_consume_marks_used_before_returning_url(mock_uow, settings, clock, lock_service):
    record = make_record(token_status=TokenStatus.confirmed)
    mock_uow.invites.get_by_token.return_value = record
    mock_uow.invites.list_by_identity_key.return_value = [record]

    committed_states = []
    mock_uow.commit.side_effect = lambda: committed_states.append(record.token_status)

    result = await TokenService(
        mock_uow, settings, lock_service=lock_service, clock=clock
    ).consume(record.token, trace_id="tr-9")

    assert result.is_ok()
    assert result.value.booking_url == BOOKING_URL
    assert record.token_status == TokenStatus.used
    assert record.used_at == NOW
    assert record.locked == LockState.locked
    assert committed_states == [TokenStatus.used]
    mock_uow.invites.get_by_token.assert_awaited_once_with(record.token, for_update=True)


@pytest.mark.asyncio
async def test_consume_twice_returns_already_used(mock_uow, settings, clock, lock_service):
    record = make_record()
    mock_uow.invites.get_by_token.return_value = record
    mock_uow.invites.list_by_identity_key.return_value = [record]
    service = TokenService(mock_uow, settings, lock_service=lock_service, clock=clock)

    first = await service.consume(record.token)
    second = await service.consume(record.token)

    assert first.is_ok()
    assert second.error.code == ErrorCode.TOKEN_ALREADY_USED


@pytest.mark.asyncio
async def test_concurrent_consume_releases_url_once(mock_uow, settings, clock, lock_service):
    record = make_record()

    async def slow_read(token, for_update=False):
        await asyncio.sleep(0.01)
        return record

    mock_uow.invites.get_by_token.side_effect = slow_read
    mock_uow.invites.list_by_identity_key.return_value = [record]
    service = TokenService(mock_uow, settings, lock_service=lock_service, clock=clock)

    results = await asyncio.gather(service.consume(record.token), service.consume(record.token))

    assert sum(1 for r in results if r.is_ok()) == 1
    assert [r.error.code for r in results if r.is_err()] == [ErrorCode.TOKEN_ALREADY_USED]


@pytest.mark.asyncio
async def test_consume_lock_timeout_is_retryable_error(mock_uow, settings, clock):
    locks = InMemoryLockService()
    service = TokenService(
        mock_uow,
        VerificationSettings(lock_timeout=timedelta(milliseconds=10)),
        lock_service=locks,
        clock=clock,
    )

    async with locks.acquire(CONSUME_LOCK_KEY, timeout=1):
        result = await service.consume("tok")

    assert result.error.code == ErrorCode.LOCK_TIMEOUT
    mock_uow.invites.get_by_token.assert_not_called()


@pytest.mark.asyncio
async def test_consume_with_redis_down_is_retryable_error(mock_uow, settings, clock):
    lock = MagicMock()
    lock.acquire = AsyncMock(side_effect=RedisConnectionError("redis down"))
    client = MagicMock()
    client.lock = MagicMock(return_value=lock)
    service = TokenService(
        mock_uow, settings, lock_service=RedisLockService(client), clock=clock
    )

    result = await service.consume("tok")

    assert result.error.code == ErrorCode.STORE_UNAVAILABLE
    assert result.error.code in RETRYABLE_CODES
    mock_uow.invites.get_by_token.assert_not_called()


@pytest.mark.asyncio
async def test_consume_requires_verified_otp(mock_uow, settings, clock, lock_service):
    mock_uow.invites.get_by_token.return_value = make_record(otp_status=OtpStatus.pending)

    result = await TokenService(
        mock_uow, settings, lock_service=lock_service, clock=clock
    ).consume("tok")

    assert result.error.code == ErrorCode.TOKEN_NOT_VERIFIED


@pytest.mark.asyncio
async def test_consume_expired_token(mock_uow, settings, lock_service):
    record = make_record(token_expires_at=NOW - timedelta(minutes=1))
    mock_uow.invites.get_by_token.return_value = record

    result = await TokenService(
        mock_uow, settings, lock_service=lock_service, clock=lambda: NOW
    ).consume(record.token)

    assert result.error.code == ErrorCode.TOKEN_EXPIRED
    assert record.token_status == TokenStatus.expired


@pytest.mark.asyncio
async def test_consume_bad_booking_url_keeps_token_usable(mock_uow, settings, clock, lock_service):
    record = make_record(booking_url="https://script.google.com/macros/s/abc/exec")
    mock_uow.invites.get_by_token.return_value = record

    result = await TokenService(
        mock_uow, settings, lock_service=lock_service, clock=clock
    ).consume(record.token)

    assert result.error.code == ErrorCode.BAD_BOOKING_URL
    assert record.token_status == TokenStatus.issued
    assert record.locked == LockState.none


@pytest.mark.asyncio
async def test_consume_falls_back_to_candidate_source(mock_uow, settings, clock, lock_service):
    record = make_record(booking_url=None)
    mock_uow.invites.get_by_token.return_value = record
    candidate_source = AsyncMock()
    candidate_source.get_booking_url.return_value = (
        "https://calendar.google.com/calendar/u/0/appointments/schedules/Fallback"
    )

    result = await TokenService(
        mock_uow,
        settings,
        lock_service=lock_service,
        candidate_source=candidate_source,
        clock=clock,
    ).consume(record.token)

    assert result.value.booking_url == (
        "https://calendar.google.com/calendar/appointments/schedules/Fallback"
    )


@pytest.mark.asyncio
async def test_consume_without_any_booking_url(mock_uow, settings, clock, lock_service):
    mock_uow.invites.get_by_token.return_value = make_record(booking_url=None)

    result = await TokenService(
        mock_uow, settings, lock_service=lock_service, clock=clock
    ).consume("tok")

    assert result.error.code == ErrorCode.NO_BOOKING_URL


@pytest.mark.asyncio
async def test_lock_timeout_type_carries_key():
    error = LockTimeout("k", 1.5)

    assert error.key == "k"
    assert "1.5" in str(error)


# ============================================================================
# revoke
# ============================================================================


@pytest.mark.asyncio
async def test_revoke_active_tokens_only(mock_uow, settings):
    issued = make_record()
    confirmed = make_record(token_status=TokenStatus.confirmed)
    used = make_record(token_status=TokenStatus.used)
    mock_uow.invites.list_by_email_and_brand.return_value = [issued, confirmed, used]

    result = await TokenService(mock_uow, settings).revoke("ROYAL", "a@x.com", actor="ops")

    assert result.value == 2
    assert issued.token_status == TokenStatus.revoked
    assert confirmed.token_status == TokenStatus.revoked
    assert used.token_status == TokenStatus.used
    audit = mock_uow.audit_events.create.call_args.args[0]
    assert audit.action == "TOKENS_REVOKED"
    assert audit.actor == "ops"


@pytest.mark.asyncio
async def test_revoke_scoped_to_position(mock_uow, settings):
    await TokenService(mock_uow, settings).revoke("ROYAL", "a@x.com", "Waiter-CL200")

    mock_uow.invites.list_by_identity_key.assert_awaited_once()
    mock_uow.invites.list_by_email_and_brand.assert_not_called()
