"""
Unit tests for Request OTP Use Case
"""

import time
from unittest.mock import AsyncMock

import pytest

from src.adapter.services.secret_provider import StaticSecretProvider
from src.app.services.link_signer import LinkSigner, invite_parts
from src.app.use_cases.verification import RequestOtpCommand, RequestOtpUseCase
from src.domain.entities import OtpStatus, TokenStatus
from src.domain.errors import ErrorCode
from tests.factories import BOOKING_URL, TEST_SECRET, make_record


def _command(**overrides) -> RequestOtpCommand:
    issued_at = overrides.pop("issued_at", int(time.time()))
    values = dict(brand="ROYAL", email="a@x.com", text_for_email="Waiter-CL200")
    values.update(overrides)
    signature = LinkSigner(TEST_SECRET).sign(
        invite_parts(values["brand"], values["email"], values["text_for_email"]), issued_at
    )
    values.setdefault("signature", signature)
    return RequestOtpCommand(issued_at=issued_at, trace_id="tr-1", **values)


@pytest.fixture
def candidate_source():
    source = AsyncMock()
    source.verify_candidate.return_value = True
    source.get_booking_url.return_value = BOOKING_URL
    return source


@pytest.fixture
def notifier():
    service = AsyncMock()
    service.send_otp_email.return_value = True
    return service


@pytest.fixture
def use_case(mock_uow, settings, candidate_source, notifier):
    return RequestOtpUseCase(
        mock_uow,
        settings,
        StaticSecretProvider(TEST_SECRET.decode()),
        candidate_source,
        notifier,
    )


@pytest.mark.asyncio
async def test_request_otp_success(use_case, mock_uow, notifier):
    result = await use_case.execute(_command())

    assert result.is_ok()
    assert result.value.email_sent is True
    assert result.value.trace_id == "tr-1"

    created = mock_uow.invites.create.call_args.args[0]
    assert created.otp_status == OtpStatus.pending
    assert created.booking_url == BOOKING_URL
    mock_uow.commit.assert_called_once()

    email, brand, code, _, verify_url = notifier.send_otp_email.call_args.args
    assert (email, brand, code) == ("a@x.com", "ROYAL", created.otp)
    assert verify_url == f"https://invites.example.com/verify?ref={created.identity_ref}"


@pytest.mark.asyncio
async def test_request_otp_email_is_normalized_before_signature_check(use_case):
    command = _command()
    command.email = "  A@X.COM "

    result = await use_case.execute(command)

    assert result.is_ok()


@pytest.mark.asyncio
async def test_request_otp_tampered_position(use_case, mock_uow, notifier):
    command = _command()
    command.text_for_email = "Captain-CL999"

    result = await use_case.execute(command)

    assert result.error.code == ErrorCode.SIGNATURE_INVALID
    mock_uow.invites.create.assert_not_called()
    notifier.send_otp_email.assert_not_called()


@pytest.mark.asyncio
async def test_request_otp_expired_link(use_case):
    result = await use_case.execute(_command(issued_at=int(time.time()) - 8 * 24 * 3600))

    assert result.error.code == ErrorCode.LINK_EXPIRED


@pytest.mark.asyncio
async def test_request_otp_unknown_brand(use_case):
    result = await use_case.execute(_command(brand="ACME"))

    assert result.error.code == ErrorCode.INVALID_BRAND


@pytest.mark.asyncio
async def test_request_otp_missing_fields(use_case):
    result = await use_case.execute(_command(email=" "))

    assert result.error.code == ErrorCode.MISSING_PARAMS


@pytest.mark.asyncio
async def test_request_otp_candidate_not_on_roster(use_case, candidate_source, mock_uow):
    candidate_source.verify_candidate.return_value = False

    result = await use_case.execute(_command())

    assert result.error.code == ErrorCode.CANDIDATE_NOT_VERIFIED
    mock_uow.invites.create.assert_not_called()


@pytest.mark.asyncio
async def test_request_otp_blocked_invite_is_audited(use_case, mock_uow, notifier):
    mock_uow.invites.list_by_identity_key.return_value = [
        make_record(token_status=TokenStatus.used)
    ]

    result = await use_case.execute(_command())

    assert result.error.code == ErrorCode.INVITE_BLOCKED
    mock_uow.invites.create.assert_not_called()
    mock_uow.invites.update_fields.assert_not_called()
    audit = mock_uow.audit_events.create.call_args.args[0]
    assert audit.action == "INVITE_BLOCKED"
    assert audit.event_metadata == {"reason": "TOKEN_USED"}
    mock_uow.commit.assert_called_once()
    notifier.send_otp_email.assert_not_called()


@pytest.mark.asyncio
async def test_request_otp_email_failure_keeps_row(use_case, mock_uow, notifier):
    notifier.send_otp_email.return_value = False

    result = await use_case.execute(_command())

    assert result.is_ok()
    assert result.value.email_sent is False
    mock_uow.commit.assert_called_once()
