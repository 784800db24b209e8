"""
Use Case: Unlock Invite

Administrator override that reopens OTP issuance for an invite that was
already used, revoked or locked. Always audited.
"""

from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.services.invite_guard import InviteGuard
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.store_errors import handle_store_errors
from src.domain.brands import is_valid_brand
from src.domain.errors import ErrorCode


class UnlockInviteResponse(BaseModel):
    """Response DTO for UnlockInviteUseCase"""

    status: str
    record_id: str


class UnlockInviteUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @handle_store_errors
    async def execute(
        self,
        brand: str,
        email: str,
        text_for_email: str,
        actor: str = "ADMIN",
        reason: str = "",
        trace_id: str = "",
    ) -> Result[UnlockInviteResponse]:
        if not is_valid_brand(brand):
            return Return.err(Error(ErrorCode.INVALID_BRAND, f"Unknown brand: {brand}"))
        if not email or not text_for_email:
            return Return.err(
                Error(ErrorCode.MISSING_PARAMS, "email and text_for_email are required")
            )

        async with self.uow:
            unlocked = await InviteGuard(self.uow).unlock(
                brand, email, text_for_email, actor=actor, reason=reason, trace_id=trace_id
            )
            if unlocked.is_err():
                return Return.err(unlocked.error)
            await self.uow.commit()

        return Return.ok(
            UnlockInviteResponse(status="unlocked", record_id=str(unlocked.value.id))
        )
