"""
Invite Reuse Guard

Blocks new OTP issuance for an identity key (brand, email, position)
once any earlier row for that key was consumed, revoked or locked.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from libs.result import Error, Result, Return
from src.app.services.audit_log import record_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import BLOCKING_TOKEN_STATUSES, InviteRecord, LockState, OtpStatus
from src.domain.errors import ErrorCode
from src.domain.identity import email_hash_variants, mask_email

logger = logging.getLogger(__name__)


@dataclass
class GuardDecision:
    blocked: bool
    matched_record: Optional[InviteRecord] = None
    reason: str = ""


class InviteGuard:
    """
    Works on an already entered UnitOfWork; never commits.

    Rows are matched by brand, case-insensitive position and either the
    plain email or one of its hash encodings, newest first.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def _rows(self, brand: str, email: str, text_for_email: str):
        return await self.uow.invites.list_by_identity_key(
            brand, email, email_hash_variants(email), text_for_email
        )

    async def find_blocking(
        self, brand: str, email: str, text_for_email: str
    ) -> GuardDecision:
        for row in await self._rows(brand, email, text_for_email):
            # Admin override on a newer row reopens issuance
            if row.locked == LockState.unlocked:
                return GuardDecision(blocked=False, matched_record=row, reason="UNLOCKED")

            if row.locked == LockState.locked:
                return GuardDecision(blocked=True, matched_record=row, reason="LOCKED")

            if row.otp_status == OtpStatus.superseded:
                continue

            if row.token_status in BLOCKING_TOKEN_STATUSES:
                return GuardDecision(
                    blocked=True, matched_record=row, reason=f"TOKEN_{row.token_status.value}"
                )

        return GuardDecision(blocked=False)

    async def apply_lock(self, brand: str, email: str, text_for_email: str) -> int:
        """Write LOCKED to every row of the identity key. Returns rows changed."""
        changed = 0
        for row in await self._rows(brand, email, text_for_email):
            if row.locked != LockState.locked:
                await self.uow.invites.update_fields(row, locked=LockState.locked)
                changed += 1

        logger.info(
            "Invite lock applied brand=%s email=%s rows=%d", brand, mask_email(email), changed
        )
        return changed

    async def unlock(
        self,
        brand: str,
        email: str,
        text_for_email: str,
        actor: str,
        reason: str = "",
        trace_id: str = "",
    ) -> Result[InviteRecord]:
        """Admin override: mark the newest row UNLOCK and audit it."""
        rows = await self._rows(brand, email, text_for_email)
        if not rows:
            return Return.err(Error(ErrorCode.INVITE_NOT_FOUND, "No invite found for this candidate"))

        newest = rows[0]
        previous = LockState(newest.locked).value
        await self.uow.invites.update_fields(newest, locked=LockState.unlocked)

        await record_event(
            self.uow,
            "INVITE_OVERRIDE_UNLOCKED",
            trace_id=trace_id,
            brand=brand,
            email=email,
            metadata={
                "record_id": str(newest.id),
                "previous_lock": previous,
                "reason": reason,
            },
            actor=actor,
        )
        logger.warning(
            "Invite unlocked by %s brand=%s email=%s", actor, brand, mask_email(email)
        )
        return Return.ok(newest)
