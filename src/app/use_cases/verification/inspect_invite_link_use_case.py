"""
Inspect Invite Link Use Case

Serves the landing page of a signed invite link. The candidate has not
typed their email yet, so only the parts of the signature that do not
depend on it can be checked here; the full check runs when a code is
requested.
"""

from datetime import datetime, timezone

from libs.result import Error, Result, Return
from src.app.services.link_signer import LinkSigner, invite_parts
from src.app.services.secret_provider import SecretProvider
from src.app.services.settings import VerificationSettings
from src.app.use_cases.store_errors import handle_store_errors
from src.domain.brands import get_brand
from src.domain.errors import ErrorCode
from src.domain.identity import normalize_text

from .dtos import InspectInviteLinkCommand, InviteLinkResponse


class InspectInviteLinkUseCase:
    def __init__(self, secret_provider: SecretProvider, settings: VerificationSettings):
        self.secret_provider = secret_provider
        self.settings = settings

    @handle_store_errors
    async def execute(self, command: InspectInviteLinkCommand) -> Result[InviteLinkResponse]:
        if not command.brand or not command.signature or not normalize_text(command.text_for_email):
            return Return.err(Error(ErrorCode.MISSING_PARAMS, "Invite link is incomplete"))

        brand = get_brand(command.brand)
        if brand is None:
            return Return.err(Error(ErrorCode.INVALID_BRAND, "Invalid brand"))

        signer = LinkSigner.from_settings(await self.secret_provider.get_secret(), self.settings)

        if command.email:
            checked = signer.verify(
                invite_parts(command.brand, command.email, command.text_for_email),
                command.signature,
                command.issued_at,
            )
        else:
            checked = signer.verify_partial(command.brand, command.issued_at, command.signature)
        if checked.is_err():
            return Return.err(checked.error)

        expires_at = datetime.fromtimestamp(command.issued_at, tz=timezone.utc) + (
            self.settings.link_max_age
        )
        return Return.ok(
            InviteLinkResponse(
                brand=brand.code,
                brand_name=brand.name,
                text_for_email=normalize_text(command.text_for_email),
                otp_enabled=brand.otp_enabled,
                fully_verified=bool(command.email),
                link_expires_at=expires_at.isoformat(),
            )
        )
