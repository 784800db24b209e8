"""
Use Case: Revoke Invite

Revokes every outstanding access token for a candidate. A revoked token
also blocks new OTP issuance for the same invite.
"""

from typing import Optional

from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.services.settings import VerificationSettings
from src.app.services.token_service import TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.store_errors import handle_store_errors
from src.domain.brands import is_valid_brand
from src.domain.errors import ErrorCode


class RevokeInviteResponse(BaseModel):
    """Response DTO for RevokeInviteUseCase"""

    status: str
    tokens_revoked: int


class RevokeInviteUseCase:
    """Idempotent: revoking twice succeeds and revokes 0 tokens the second time"""

    def __init__(self, uow: UnitOfWork, settings: VerificationSettings):
        self.uow = uow
        self.settings = settings

    @handle_store_errors
    async def execute(
        self,
        brand: str,
        email: str,
        text_for_email: Optional[str] = None,
        actor: str = "ADMIN",
        trace_id: str = "",
    ) -> Result[RevokeInviteResponse]:
        if not is_valid_brand(brand):
            return Return.err(Error(ErrorCode.INVALID_BRAND, f"Unknown brand: {brand}"))
        if not email:
            return Return.err(Error(ErrorCode.MISSING_PARAMS, "email is required"))

        async with self.uow:
            revoked = await TokenService(self.uow, self.settings).revoke(
                brand, email, text_for_email, actor=actor, trace_id=trace_id
            )
            await self.uow.commit()

        return Return.ok(RevokeInviteResponse(status="revoked", tokens_revoked=revoked.value))
