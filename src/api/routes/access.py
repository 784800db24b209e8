"""
Access Link Routes

GET shows the confirm page state and never reveals the booking URL, so
mail scanners pre-fetching the link are harmless. POST with confirm=1
consumes the token and returns the booking URL once.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, status
from libs.result import Error

from src.api.error import ClientError, to_http_error
from src.app.services.candidate_source import CandidateSource
from src.app.services.lock_service import LockService
from src.app.services.settings import VerificationSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.verification import (
    AccessLinkResponse,
    ConfirmAccessCommand,
    ConfirmAccessResponse,
    ConfirmAccessUseCase,
    OpenAccessLinkCommand,
    OpenAccessLinkUseCase,
)
from src.depends import (
    get_candidate_source,
    get_lock_service,
    get_settings,
    get_trace_id,
    get_unit_of_work,
)
from src.domain.errors import ErrorCode

router = APIRouter(prefix="/access", tags=["Access"])


@router.get("", status_code=status.HTTP_200_OK, response_model=AccessLinkResponse)
async def open_access_link(
    token: str = Query(..., min_length=1),
    brand: Optional[str] = Query(None),
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: VerificationSettings = Depends(get_settings),
    trace_id: str = Depends(get_trace_id),
):
    """
    Raises:
        - 403 Forbidden: BRAND_MISMATCH, TOKEN_NOT_VERIFIED
        - 404 Not Found: TOKEN_NOT_FOUND
        - 409 Conflict: TOKEN_ALREADY_USED
        - 410 Gone: TOKEN_EXPIRED, TOKEN_REVOKED
    """
    command = OpenAccessLinkCommand(token=token, brand=brand, trace_id=trace_id)
    result = await OpenAccessLinkUseCase(uow, settings).execute(command)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value


@router.post("", status_code=status.HTTP_200_OK, response_model=ConfirmAccessResponse)
async def confirm_access(
    token: str = Form(...),
    confirm: str = Form(""),
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: VerificationSettings = Depends(get_settings),
    lock_service: LockService = Depends(get_lock_service),
    candidate_source: CandidateSource = Depends(get_candidate_source),
    trace_id: str = Depends(get_trace_id),
):
    """
    Consume the access token and return the booking URL for a client-side redirect.

    Raises:
        - 400 Bad Request: MISSING_PARAMS (confirm=1 not sent)
        - 409 Conflict: TOKEN_ALREADY_USED
        - 410 Gone: TOKEN_EXPIRED, TOKEN_REVOKED
        - 422 Unprocessable Entity: NO_BOOKING_URL, BAD_BOOKING_URL
        - 503 Service Unavailable: LOCK_TIMEOUT, STORE_UNAVAILABLE (retryable)
    """
    if confirm != "1":
        raise ClientError(
            Error(ErrorCode.MISSING_PARAMS, "Confirmation is required"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    command = ConfirmAccessCommand(token=token, trace_id=trace_id)
    use_case = ConfirmAccessUseCase(uow, settings, lock_service, candidate_source)
    result = await use_case.execute(command)

    if result.is_err():
        raise to_http_error(result.error)

    return result.value
