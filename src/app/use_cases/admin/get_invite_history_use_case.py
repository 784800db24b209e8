"""
Use Case: Get Invite History

Lists every invite row for a candidate, newest first. OTP codes, full
tokens and email hashes are never exposed.
"""

from typing import List, Optional

from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.store_errors import handle_store_errors
from src.domain.brands import is_valid_brand
from src.domain.entities import InviteRecord
from src.domain.errors import ErrorCode
from src.domain.identity import email_hash_variants, mask_email, mask_token, text_key


class InviteHistoryItem(BaseModel):
    id: str
    created_at: str
    brand: str
    email: str
    text_for_email: str
    otp_status: str
    otp_attempts: int
    token_prefix: str
    token_status: Optional[str]
    locked: str
    verified_at: Optional[str]
    used_at: Optional[str]
    trace_id: str


class InviteHistoryResponse(BaseModel):
    """Response DTO for GetInviteHistoryUseCase"""

    items: List[InviteHistoryItem]
    total: int


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def to_history_item(record: InviteRecord) -> InviteHistoryItem:
    return InviteHistoryItem(
        id=str(record.id),
        created_at=record.created_at.isoformat(),
        brand=record.brand,
        email=mask_email(record.email),
        text_for_email=record.text_for_email,
        otp_status=record.otp_status.value,
        otp_attempts=record.otp_attempts,
        token_prefix=mask_token(record.token or ""),
        token_status=record.token_status.value if record.token_status else None,
        locked=record.locked.value,
        verified_at=_iso(record.verified_at),
        used_at=_iso(record.used_at),
        trace_id=record.trace_id,
    )


class GetInviteHistoryUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @handle_store_errors
    async def execute(
        self, brand: str, email: str, text_for_email: Optional[str] = None
    ) -> Result[InviteHistoryResponse]:
        if not is_valid_brand(brand):
            return Return.err(Error(ErrorCode.INVALID_BRAND, f"Unknown brand: {brand}"))
        if not email:
            return Return.err(Error(ErrorCode.MISSING_PARAMS, "email is required"))

        async with self.uow:
            records = await self.uow.invites.list_by_email_and_brand(
                email, email_hash_variants(email), brand
            )
            if text_for_email:
                records = [
                    r for r in records if text_key(r.text_for_email) == text_key(text_for_email)
                ]
            # Rows expire when the unit of work rolls back on exit
            items = [to_history_item(record) for record in records]

        return Return.ok(InviteHistoryResponse(items=items, total=len(items)))
