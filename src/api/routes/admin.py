"""
Admin API Routes - Invite Support Endpoints

Authentication is via Admin API Key. Every mutating call is audited
under the actor named in X-Admin-Actor.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr, Field

from src.api.error import to_http_error
from src.api.utils.admin_auth import get_admin_actor, verify_admin_api_key
from src.app.services.candidate_source import CandidateSource
from src.app.services.secret_provider import SecretProvider
from src.app.services.settings import VerificationSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.admin import (
    GenerateInviteLinkResponse,
    GenerateInviteLinkUseCase,
    GetInviteHistoryUseCase,
    GetTraceEventsUseCase,
    InviteHistoryResponse,
    RevokeInviteResponse,
    RevokeInviteUseCase,
    RotateSigningSecretResponse,
    RotateSigningSecretUseCase,
    UnlockInviteResponse,
    UnlockInviteUseCase,
)
from src.depends import (
    get_candidate_source,
    get_secret_provider,
    get_settings,
    get_trace_id,
    get_unit_of_work,
)

router = APIRouter(
    prefix="/admin", tags=["Admin"], dependencies=[Depends(verify_admin_api_key)]
)


class GenerateInviteLinkRequest(BaseModel):
    brand: str
    email: EmailStr
    text_for_email: str = Field(..., min_length=1, max_length=500)
    skip_candidate_check: bool = False


@router.post(
    "/invites/link",
    status_code=status.HTTP_201_CREATED,
    response_model=GenerateInviteLinkResponse,
)
async def generate_invite_link(
    request: GenerateInviteLinkRequest,
    secret_provider: SecretProvider = Depends(get_secret_provider),
    settings: VerificationSettings = Depends(get_settings),
    candidate_source: CandidateSource = Depends(get_candidate_source),
):
    """
    Generate a signed invite link for a candidate.

    Raises:
        - 400 Bad Request: INVALID_BRAND, MISSING_PARAMS
        - 403 Forbidden: CANDIDATE_NOT_VERIFIED
    """
    use_case = GenerateInviteLinkUseCase(secret_provider, settings, candidate_source)
    result = await use_case.execute(
        request.brand,
        request.email,
        request.text_for_email,
        skip_candidate_check=request.skip_candidate_check,
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class RevokeInviteRequest(BaseModel):
    brand: str
    email: EmailStr
    text_for_email: Optional[str] = None


@router.post(
    "/invites/revoke", status_code=status.HTTP_200_OK, response_model=RevokeInviteResponse
)
async def revoke_invite(
    request: RevokeInviteRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: VerificationSettings = Depends(get_settings),
    actor: str = Depends(get_admin_actor),
    trace_id: str = Depends(get_trace_id),
):
    """
    Revoke outstanding access tokens. Omitting text_for_email revokes
    across every position of the candidate for the brand.
    """
    result = await RevokeInviteUseCase(uow, settings).execute(
        request.brand, request.email, request.text_for_email, actor=actor, trace_id=trace_id
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


class UnlockInviteRequest(BaseModel):
    brand: str
    email: EmailStr
    text_for_email: str = Field(..., min_length=1, max_length=500)
    reason: str = Field("", max_length=500)


@router.post(
    "/invites/unlock", status_code=status.HTTP_200_OK, response_model=UnlockInviteResponse
)
async def unlock_invite(
    request: UnlockInviteRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    actor: str = Depends(get_admin_actor),
    trace_id: str = Depends(get_trace_id),
):
    """
    Reopen OTP issuance for a used or locked invite.

    Raises:
        - 404 Not Found: INVITE_NOT_FOUND
    """
    result = await UnlockInviteUseCase(uow).execute(
        request.brand,
        request.email,
        request.text_for_email,
        actor=actor,
        reason=request.reason,
        trace_id=trace_id,
    )

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.get(
    "/invites/history", status_code=status.HTTP_200_OK, response_model=InviteHistoryResponse
)
async def get_invite_history(
    brand: str = Query(...),
    email: str = Query(...),
    text_for_email: Optional[str] = Query(None),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetInviteHistoryUseCase(uow).execute(brand, email, text_for_email)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.get("/events/{trace_id}", status_code=status.HTTP_200_OK)
async def get_trace_events(
    trace_id: str,
    limit: int = Query(200, ge=1, le=1000),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetTraceEventsUseCase(uow).execute(trace_id, limit=limit)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post(
    "/signing-secret/rotate",
    status_code=status.HTTP_200_OK,
    response_model=RotateSigningSecretResponse,
)
async def rotate_signing_secret(
    secret_provider: SecretProvider = Depends(get_secret_provider),
):
    """
    Rotate the link signing secret. Outstanding invite links stop working.

    Raises:
        - 409 Conflict: SECRET_NOT_ROTATABLE (static HMAC_SECRET configured)
    """
    result = await RotateSigningSecretUseCase(secret_provider).execute()

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
