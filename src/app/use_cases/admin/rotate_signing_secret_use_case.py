"""
Use Case: Rotate Signing Secret

Replaces the HMAC secret. Every invite link signed with the old secret
stops verifying, so this is the kill switch for leaked links.
"""

from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.services.secret_provider import SecretProvider
from src.app.use_cases.store_errors import handle_store_errors
from src.domain.errors import ErrorCode


class RotateSigningSecretResponse(BaseModel):
    """Response DTO for RotateSigningSecretUseCase"""

    status: str
    name: str
    rotated_at: str


class RotateSigningSecretUseCase:
    def __init__(self, secret_provider: SecretProvider):
        self.secret_provider = secret_provider

    @handle_store_errors
    async def execute(self) -> Result[RotateSigningSecretResponse]:
        rotate = getattr(self.secret_provider, "rotate", None)
        if rotate is None:
            return Return.err(
                Error(
                    ErrorCode.SECRET_NOT_ROTATABLE,
                    "Signing secret is configured statically and cannot be rotated here",
                )
            )

        secret = await rotate()
        rotated_at = secret.rotated_at or secret.created_at
        return Return.ok(
            RotateSigningSecretResponse(
                status="rotated", name=secret.name, rotated_at=rotated_at.isoformat()
            )
        )
