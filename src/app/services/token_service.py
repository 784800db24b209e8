"""
Token Engine

One-time access tokens issued after OTP verification. The token page
reads state through validate(); only consume() may release the booking
URL, and it does so at most once.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional

from libs.result import Error, Result, Return
from src.app.services.audit_log import record_event
from src.app.services.booking_url import check_booking_url, extract_cl_code, mask_url
from src.app.services.candidate_source import CandidateSource
from src.app.services.invite_guard import InviteGuard
from src.app.services.lock_service import LockService, LockTimeout, LockUnavailable
from src.app.services.settings import VerificationSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import (
    ACTIVE_TOKEN_STATUSES,
    InviteRecord,
    LockState,
    OtpStatus,
    TokenStatus,
)
from src.domain.errors import ErrorCode
from src.domain.identity import email_hash_variants, mask_token, normalize_brand

logger = logging.getLogger(__name__)

CONSUME_LOCK_KEY = "invite-records:consume"

TERMINAL_TOKEN_ERRORS = {
    TokenStatus.used: (
        ErrorCode.TOKEN_ALREADY_USED,
        "This link has already been used. Please request a new code.",
    ),
    TokenStatus.revoked: (ErrorCode.TOKEN_REVOKED, "This link has been revoked."),
    TokenStatus.expired: (
        ErrorCode.TOKEN_EXPIRED,
        "This link has expired. Please request a new code.",
    ),
}


@dataclass
class ConsumeOutcome:
    record: InviteRecord
    booking_url: str


class TokenService:
    """
    Token engine working on an already entered UnitOfWork.

    validate() and issue_token() flush and leave the commit to the caller.
    consume() commits inside the consume lock so the USED mark is durable
    before any other request can read the row.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: VerificationSettings,
        lock_service: Optional[LockService] = None,
        guard: Optional[InviteGuard] = None,
        candidate_source: Optional[CandidateSource] = None,
        clock: Callable = utcnow,
    ):
        self.uow = uow
        self.settings = settings
        self.lock_service = lock_service
        self.guard = guard or InviteGuard(uow)
        self.candidate_source = candidate_source
        self.clock = clock

    async def issue_token(self, record: InviteRecord, trace_id: str = "") -> Result[InviteRecord]:
        if record.otp_status != OtpStatus.verified or record.token:
            return Return.err(
                Error(ErrorCode.TOKEN_NOT_ISSUABLE, "Access link cannot be issued for this code")
            )

        now = self.clock()
        token = secrets.token_urlsafe(32)
        await self.uow.invites.update_fields(
            record,
            token=token,
            token_expires_at=now + self.settings.token_expiry_for(record.brand),
            token_status=TokenStatus.issued,
        )
        await record_event(
            self.uow,
            "TOKEN_ISSUED",
            trace_id=trace_id,
            brand=record.brand,
            email=record.email,
            metadata={
                "token": mask_token(token),
                "expires_at": record.token_expires_at.isoformat(),
            },
        )
        return Return.ok(record)

    def _terminal_error(self, record: InviteRecord) -> Optional[Error]:
        if record.locked == LockState.locked and record.token_status != TokenStatus.revoked:
            code, message = TERMINAL_TOKEN_ERRORS[TokenStatus.used]
            return Error(code, message)
        terminal = TERMINAL_TOKEN_ERRORS.get(record.token_status)
        if terminal:
            return Error(*terminal)
        return None

    async def _expire(self, record: InviteRecord, trace_id: str) -> Error:
        await self.uow.invites.update_fields(record, token_status=TokenStatus.expired)
        await record_event(
            self.uow,
            "TOKEN_EXPIRED",
            trace_id=trace_id,
            brand=record.brand,
            email=record.email,
            metadata={"token": mask_token(record.token)},
        )
        await self.uow.commit()
        return Error(*TERMINAL_TOKEN_ERRORS[TokenStatus.expired])

    async def validate(
        self, token: str, brand: Optional[str] = None, trace_id: str = ""
    ) -> Result[InviteRecord]:
        """
        Read path for the access page. Moves ISSUED to CONFIRMED and is
        idempotent afterwards. Never touches the booking URL.
        """
        if not token:
            return Return.err(Error(ErrorCode.TOKEN_NOT_FOUND, "Access link is invalid"))

        record = await self.uow.invites.get_by_token(token)
        if record is None:
            return Return.err(Error(ErrorCode.TOKEN_NOT_FOUND, "Access link is invalid"))

        terminal = self._terminal_error(record)
        if terminal:
            return Return.err(terminal)

        if record.is_token_expired(self.clock()):
            return Return.err(await self._expire(record, trace_id))

        if brand and normalize_brand(brand) != record.brand:
            return Return.err(
                Error(ErrorCode.BRAND_MISMATCH, "Access link does not belong to this brand")
            )

        if record.otp_status != OtpStatus.verified:
            return Return.err(
                Error(ErrorCode.TOKEN_NOT_VERIFIED, "Please verify your code first.")
            )

        if record.token_status == TokenStatus.issued:
            await self.uow.invites.update_fields(record, token_status=TokenStatus.confirmed)
            await record_event(
                self.uow,
                "TOKEN_CONFIRMED",
                trace_id=trace_id,
                brand=record.brand,
                email=record.email,
                metadata={"token": mask_token(token)},
            )
        return Return.ok(record)

    async def consume(self, token: str, trace_id: str = "") -> Result[ConsumeOutcome]:
        """
        Mark the token USED and return the booking URL, under the consume lock.

        Errors:
            - LOCK_TIMEOUT: lock not acquired in time, retryable
            - STORE_UNAVAILABLE: lock backend unreachable, retryable
            - TOKEN_NOT_FOUND / TOKEN_ALREADY_USED / TOKEN_REVOKED / TOKEN_EXPIRED
            - TOKEN_NOT_VERIFIED: OTP was never verified
            - NO_BOOKING_URL / BAD_BOOKING_URL: token stays usable
        """
        if not token:
            return Return.err(Error(ErrorCode.TOKEN_NOT_FOUND, "Access link is invalid"))
        if self.lock_service is None:
            raise RuntimeError("TokenService.consume requires a lock service")

        timeout = self.settings.lock_timeout.total_seconds()
        try:
            async with self.lock_service.acquire(CONSUME_LOCK_KEY, timeout):
                return await self._consume_locked(token, trace_id)
        except LockTimeout:
            logger.warning("Consume lock timeout token=%s trace=%s", mask_token(token), trace_id)
            return Return.err(
                Error(ErrorCode.LOCK_TIMEOUT, "System busy. Please try again.")
            )
        except LockUnavailable as e:
            logger.error(
                "Consume lock unavailable token=%s trace=%s: %s", mask_token(token), trace_id, e
            )
            return Return.err(
                Error(
                    ErrorCode.STORE_UNAVAILABLE,
                    "Service temporarily unavailable. Please try again.",
                )
            )

    async def _resolve_booking_url(self, record: InviteRecord) -> Optional[str]:
        if record.booking_url:
            return record.booking_url
        if self.candidate_source is None:
            return None
        return await self.candidate_source.get_booking_url(
            record.brand, record.email, record.text_for_email
        )

    async def _consume_locked(self, token: str, trace_id: str) -> Result[ConsumeOutcome]:
        # Fresh read: another request may have consumed the row since this session loaded it
        record = await self.uow.invites.get_by_token(token, for_update=True)
        if record is None:
            return Return.err(Error(ErrorCode.TOKEN_NOT_FOUND, "Access link is invalid"))

        terminal = self._terminal_error(record)
        if terminal:
            return Return.err(terminal)

        if record.is_token_expired(self.clock()):
            return Return.err(await self._expire(record, trace_id))

        if (
            record.token_status not in ACTIVE_TOKEN_STATUSES
            or record.otp_status != OtpStatus.verified
        ):
            return Return.err(
                Error(ErrorCode.TOKEN_NOT_VERIFIED, "Please verify your code first.")
            )

        checked = check_booking_url(await self._resolve_booking_url(record))
        if checked.is_err():
            await record_event(
                self.uow,
                "REDIRECT_BLOCKED",
                trace_id=trace_id,
                brand=record.brand,
                email=record.email,
                metadata={
                    "code": checked.error.code,
                    "cl_code": extract_cl_code(record.text_for_email),
                },
            )
            await self.uow.commit()
            return Return.err(checked.error)

        booking_url = checked.value
        await self.uow.invites.update_fields(
            record, token_status=TokenStatus.used, used_at=self.clock()
        )
        await self.guard.apply_lock(record.brand, record.email, record.text_for_email)
        await record_event(
            self.uow,
            "TOKEN_CONSUMED",
            trace_id=trace_id,
            brand=record.brand,
            email=record.email,
            metadata={
                "token": mask_token(token),
                "cl_code": extract_cl_code(record.text_for_email),
                "booking_url": mask_url(booking_url),
            },
        )
        await self.uow.commit()
        return Return.ok(ConsumeOutcome(record=record, booking_url=booking_url))

    async def revoke(
        self,
        brand: str,
        email: str,
        text_for_email: Optional[str] = None,
        actor: str = "SYSTEM",
        trace_id: str = "",
    ) -> Result[int]:
        """Move every ISSUED/CONFIRMED token of the candidate to REVOKED."""
        hashes = email_hash_variants(email)
        if text_for_email:
            rows = await self.uow.invites.list_by_identity_key(brand, email, hashes, text_for_email)
        else:
            rows = await self.uow.invites.list_by_email_and_brand(email, hashes, brand)

        revoked = 0
        for row in rows:
            if row.token_status in ACTIVE_TOKEN_STATUSES:
                await self.uow.invites.update_fields(row, token_status=TokenStatus.revoked)
                revoked += 1

        await record_event(
            self.uow,
            "TOKENS_REVOKED",
            trace_id=trace_id,
            brand=brand,
            email=email,
            metadata={"count": revoked, "text_for_email": text_for_email or ""},
            actor=actor,
        )
        return Return.ok(revoked)
