"""
OTP Engine

Issues and verifies numeric one-time passcodes bound to an identity key.
"""

import hmac
import logging
import secrets
from typing import Callable, Optional
from uuid import uuid4

from libs.result import Error, Result, Return
from src.app.services.audit_log import record_event
from src.app.services.invite_guard import InviteGuard
from src.app.services.settings import VerificationSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import InviteRecord, OtpStatus
from src.domain.errors import ErrorCode
from src.domain.identity import (
    email_hash_hex,
    mask_email,
    normalize_brand,
    normalize_email,
    normalize_text,
)

logger = logging.getLogger(__name__)

# Status of a non-PENDING row -> error reported when a code is submitted for it
CLOSED_OTP_ERRORS = {
    OtpStatus.expired: (ErrorCode.OTP_EXPIRED, "Code has expired. Please request a new one."),
    OtpStatus.failed: (ErrorCode.OTP_LOCKED, "Too many attempts. Please request a new code."),
    OtpStatus.superseded: (
        ErrorCode.OTP_SUPERSEDED,
        "A newer code was sent. Please use the latest email.",
    ),
    OtpStatus.verified: (ErrorCode.OTP_ALREADY_VERIFIED, "Code has already been used."),
}


def generate_otp(length: int = 6) -> str:
    """Uniform numeric code, zero padded to `length` digits."""
    return str(secrets.randbelow(10**length)).zfill(length)


class OtpService:
    """
    OTP engine working on an already entered UnitOfWork.

    Successful transitions are flushed and left for the caller to commit.
    Failure transitions (attempt counts, EXPIRED, FAILED) are committed
    here because the caller's unit of work rolls back when it returns an
    error.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: VerificationSettings,
        guard: Optional[InviteGuard] = None,
        clock: Callable = utcnow,
    ):
        self.uow = uow
        self.settings = settings
        self.guard = guard or InviteGuard(uow)
        self.clock = clock

    async def create_otp(
        self,
        brand: str,
        email: str,
        text_for_email: str,
        booking_url: Optional[str] = None,
        trace_id: str = "",
    ) -> Result[InviteRecord]:
        """
        Guard, supersede older PENDING rows, then append a new PENDING row.

        Errors:
            - INVITE_BLOCKED: identity key already consumed/revoked/locked.
              Nothing is written.
        """
        brand = normalize_brand(brand)
        email = normalize_email(email)
        text_for_email = normalize_text(text_for_email)

        decision = await self.guard.find_blocking(brand, email, text_for_email)
        if decision.blocked:
            logger.warning(
                "OTP blocked brand=%s email=%s reason=%s trace=%s",
                brand,
                mask_email(email),
                decision.reason,
                trace_id,
            )
            return Return.err(
                Error(
                    ErrorCode.INVITE_BLOCKED,
                    "This invite has already been used. Please contact your recruiter.",
                    details={"reason": decision.reason},
                )
            )

        superseded = 0
        for pending in await self.uow.invites.list_pending_by_email_and_brand(email, brand):
            await self.uow.invites.update_fields(pending, otp_status=OtpStatus.superseded)
            superseded += 1

        now = self.clock()
        record = InviteRecord(
            brand=brand,
            email=email,
            email_hash=email_hash_hex(email),
            text_for_email=text_for_email,
            booking_url=booking_url,
            identity_ref=uuid4().hex,
            otp=generate_otp(self.settings.otp_length),
            otp_expires_at=now + self.settings.otp_expiry,
            otp_attempts=0,
            otp_status=OtpStatus.pending,
            trace_id=trace_id,
            created_at=now,
        )
        await self.uow.invites.create(record)

        await record_event(
            self.uow,
            "OTP_CREATED",
            trace_id=trace_id,
            brand=brand,
            email=email,
            metadata={
                "identity_ref": record.identity_ref,
                "expires_at": record.otp_expires_at.isoformat(),
                "superseded": superseded,
            },
        )
        return Return.ok(record)

    async def _find_record(
        self,
        identity_ref: Optional[str],
        brand: Optional[str],
        email: Optional[str],
        text_for_email: Optional[str],
    ) -> Optional[InviteRecord]:
        if identity_ref:
            return await self.uow.invites.get_by_identity_ref(identity_ref)
        if brand and email:
            return await self.uow.invites.get_latest_pending(brand, email, text_for_email)
        return None

    async def _fail(
        self, record: InviteRecord, code: str, message: str, trace_id: str, **fields
    ) -> Result[InviteRecord]:
        if fields:
            await self.uow.invites.update_fields(record, **fields)
        await record_event(
            self.uow,
            "OTP_REJECTED",
            trace_id=trace_id,
            brand=record.brand,
            email=record.email,
            metadata={"code": code, "attempts": record.otp_attempts},
        )
        await self.uow.commit()
        return Return.err(Error(code, message))

    async def verify_otp(
        self,
        code: str,
        identity_ref: Optional[str] = None,
        brand: Optional[str] = None,
        email: Optional[str] = None,
        text_for_email: Optional[str] = None,
        trace_id: str = "",
    ) -> Result[InviteRecord]:
        """
        Check a submitted code against its row.

        Lookup is by identity_ref when given, otherwise the most recent
        PENDING row for brand + email (+ position).

        Errors:
            - OTP_NOT_FOUND: no matching row
            - OTP_EXPIRED / OTP_LOCKED / OTP_SUPERSEDED / OTP_ALREADY_VERIFIED
            - OTP_INVALID: wrong code, attempts remain
        """
        record = await self._find_record(identity_ref, brand, email, text_for_email)
        if record is None:
            return Return.err(
                Error(ErrorCode.OTP_NOT_FOUND, "No active code found. Please request a new one.")
            )

        if record.otp_status != OtpStatus.pending:
            error_code, message = CLOSED_OTP_ERRORS.get(
                OtpStatus(record.otp_status),
                (ErrorCode.OTP_EXPIRED, "Code is no longer valid. Please request a new one."),
            )
            return Return.err(Error(error_code, message))

        now = self.clock()
        if record.is_otp_expired(now):
            return await self._fail(
                record,
                ErrorCode.OTP_EXPIRED,
                "Code has expired. Please request a new one.",
                trace_id,
                otp_status=OtpStatus.expired,
            )

        max_attempts = self.settings.otp_max_attempts
        if record.otp_attempts >= max_attempts:
            return await self._fail(
                record,
                ErrorCode.OTP_LOCKED,
                "Too many attempts. Please request a new code.",
                trace_id,
                otp_status=OtpStatus.failed,
            )

        submitted = str(code or "").strip()
        if not hmac.compare_digest(submitted.encode("utf-8"), str(record.otp).encode("utf-8")):
            attempts = record.otp_attempts + 1
            if attempts >= max_attempts:
                return await self._fail(
                    record,
                    ErrorCode.OTP_LOCKED,
                    "Too many attempts. Please request a new code.",
                    trace_id,
                    otp_attempts=attempts,
                    otp_status=OtpStatus.failed,
                )

            await self.uow.invites.update_fields(record, otp_attempts=attempts)
            await self.uow.commit()
            remaining = max_attempts - attempts
            return Return.err(
                Error(
                    ErrorCode.OTP_INVALID,
                    f"Incorrect code. {remaining} attempt(s) remaining.",
                    details={"remaining_attempts": remaining},
                )
            )

        await self.uow.invites.update_fields(
            record, otp_status=OtpStatus.verified, verified_at=now
        )
        await record_event(
            self.uow,
            "OTP_VERIFIED",
            trace_id=trace_id,
            brand=record.brand,
            email=record.email,
            metadata={"identity_ref": record.identity_ref},
        )
        return Return.ok(record)
