"""
Candidate Invite Routes

Signed invite link page, OTP request and OTP verification.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr, Field

from src.api.error import to_http_error
from src.app.services.candidate_source import CandidateSource
from src.app.services.notification_service import NotificationService
from src.app.services.secret_provider import SecretProvider
from src.app.services.settings import VerificationSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.verification import (
    InspectInviteLinkCommand,
    InspectInviteLinkUseCase,
    InviteLinkResponse,
    RequestOtpCommand,
    RequestOtpResponse,
    RequestOtpUseCase,
    VerifyOtpCommand,
    VerifyOtpResponse,
    VerifyOtpUseCase,
)
from src.depends import (
    get_candidate_source,
    get_notification_service,
    get_secret_provider,
    get_settings,
    get_trace_id,
    get_unit_of_work,
)

router = APIRouter(prefix="/invites", tags=["Invites"])


@router.get("/link", status_code=status.HTTP_200_OK, response_model=InviteLinkResponse)
async def inspect_invite_link(
    brand: str = Query(...),
    t: str = Query(..., description="Text for email (position)"),
    ts: int = Query(..., description="Issue timestamp, unix seconds"),
    sig: str = Query(...),
    e: Optional[str] = Query(None, description="Candidate email, when already known"),
    secret_provider: SecretProvider = Depends(get_secret_provider),
    settings: VerificationSettings = Depends(get_settings),
):
    """
    Invite landing page data.

    Without `e` only brand, timestamp and signature shape are checked; the
    full signature is verified when the candidate requests a code.

    Raises:
        - 400 Bad Request: MISSING_PARAMS, INVALID_BRAND
        - 403 Forbidden: SIGNATURE_INVALID
        - 410 Gone: LINK_EXPIRED
    """
    command = InspectInviteLinkCommand(
        brand=brand, text_for_email=t, issued_at=ts, signature=sig, email=e
    )
    result = await InspectInviteLinkUseCase(secret_provider, settings).execute(command)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class RequestOtpRequest(BaseModel):
    brand: str = Field(..., min_length=1, max_length=32)
    email: EmailStr
    text_for_email: str = Field(..., min_length=1, max_length=500)
    ts: int = Field(..., description="Issue timestamp from the invite link")
    sig: str = Field(..., min_length=1, max_length=64)


@router.post("/otp", status_code=status.HTTP_200_OK, response_model=RequestOtpResponse)
async def request_otp(
    request: RequestOtpRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: VerificationSettings = Depends(get_settings),
    secret_provider: SecretProvider = Depends(get_secret_provider),
    candidate_source: CandidateSource = Depends(get_candidate_source),
    notification_service: NotificationService = Depends(get_notification_service),
    trace_id: str = Depends(get_trace_id),
):
    """
    Request a one-time code for a signed invite link.

    Raises:
        - 400 Bad Request: MISSING_PARAMS, INVALID_BRAND
        - 403 Forbidden: SIGNATURE_INVALID, CANDIDATE_NOT_VERIFIED
        - 409 Conflict: INVITE_BLOCKED
        - 410 Gone: LINK_EXPIRED
        - 503 Service Unavailable: STORE_UNAVAILABLE (retryable)
    """
    command = RequestOtpCommand(
        brand=request.brand,
        email=request.email,
        text_for_email=request.text_for_email,
        issued_at=request.ts,
        signature=request.sig,
        trace_id=trace_id,
    )
    use_case = RequestOtpUseCase(
        uow, settings, secret_provider, candidate_source, notification_service
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class VerifyOtpRequest(BaseModel):
    otp: str = Field(..., min_length=1, max_length=12)
    identity_ref: Optional[str] = Field(None, max_length=64)
    brand: Optional[str] = None
    email: Optional[EmailStr] = None
    text_for_email: Optional[str] = None


@router.post("/otp/verify", status_code=status.HTTP_200_OK, response_model=VerifyOtpResponse)
async def verify_otp(
    request: VerifyOtpRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: VerificationSettings = Depends(get_settings),
    notification_service: NotificationService = Depends(get_notification_service),
    trace_id: str = Depends(get_trace_id),
):
    """
    Verify a one-time code. On success the access link is emailed.

    Raises:
        - 400 Bad Request: OTP_INVALID (details.remaining_attempts)
        - 404 Not Found: OTP_NOT_FOUND
        - 409 Conflict: OTP_SUPERSEDED, OTP_ALREADY_VERIFIED
        - 410 Gone: OTP_EXPIRED
        - 429 Too Many Requests: OTP_LOCKED
    """
    command = VerifyOtpCommand(
        otp=request.otp,
        identity_ref=request.identity_ref,
        brand=request.brand,
        email=request.email,
        text_for_email=request.text_for_email,
        trace_id=trace_id,
    )
    result = await VerifyOtpUseCase(uow, settings, notification_service).execute(command)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
