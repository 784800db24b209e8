"""
Use Case: Generate Invite Link

Recruiter tooling endpoint that produces the signed link emailed to a
candidate.
"""

import time
from datetime import datetime, timezone

from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.services.candidate_source import CandidateSource
from src.app.services.link_signer import LinkSigner
from src.app.services.secret_provider import SecretProvider
from src.app.services.settings import VerificationSettings
from src.app.use_cases.store_errors import handle_store_errors
from src.domain.brands import get_brand
from src.domain.errors import ErrorCode
from src.domain.identity import normalize_email, normalize_text


class GenerateInviteLinkResponse(BaseModel):
    """Response DTO for GenerateInviteLinkUseCase"""

    url: str
    brand: str
    issued_at: int
    expires_at: str


class GenerateInviteLinkUseCase:
    """
    Business Logic:
    1. Validate brand and required fields
    2. Candidate must be on the roster unless the check is skipped
    3. Sign (brand, email, position, ts) and build the invite URL
    """

    def __init__(
        self,
        secret_provider: SecretProvider,
        settings: VerificationSettings,
        candidate_source: CandidateSource,
    ):
        self.secret_provider = secret_provider
        self.settings = settings
        self.candidate_source = candidate_source

    @handle_store_errors
    async def execute(
        self,
        brand: str,
        email: str,
        text_for_email: str,
        skip_candidate_check: bool = False,
    ) -> Result[GenerateInviteLinkResponse]:
        email = normalize_email(email)
        text_for_email = normalize_text(text_for_email)
        if not email or not text_for_email:
            return Return.err(Error(ErrorCode.MISSING_PARAMS, "email and text_for_email are required"))

        registered = get_brand(brand)
        if registered is None:
            return Return.err(Error(ErrorCode.INVALID_BRAND, f"Unknown brand: {brand}"))

        if not skip_candidate_check and not await self.candidate_source.verify_candidate(
            registered.code, email, text_for_email
        ):
            return Return.err(
                Error(ErrorCode.CANDIDATE_NOT_VERIFIED, "Candidate is not on the roster")
            )

        signer = LinkSigner.from_settings(await self.secret_provider.get_secret(), self.settings)
        issued_at = int(time.time())
        try:
            url = signer.build_invite_link(
                self.settings.public_base_url,
                registered.code,
                email,
                text_for_email,
                issued_at=issued_at,
            )
        except ValueError as e:
            return Return.err(Error(ErrorCode.MISSING_PARAMS, str(e)))

        expires_at = datetime.fromtimestamp(issued_at, tz=timezone.utc) + self.settings.link_max_age
        return Return.ok(
            GenerateInviteLinkResponse(
                url=url,
                brand=registered.code,
                issued_at=issued_at,
                expires_at=expires_at.isoformat(),
            )
        )
