"""
Request OTP Use Case

Candidate submits their email on a signed invite link and receives a
one-time code by email.
"""

import logging

from libs.result import Error, Result, Return
from src.app.services.audit_log import record_event
from src.app.services.candidate_source import CandidateSource
from src.app.services.link_signer import LinkSigner, invite_parts
from src.app.services.notification_service import NotificationService
from src.app.services.otp_service import OtpService
from src.app.services.secret_provider import SecretProvider
from src.app.services.settings import VerificationSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.store_errors import handle_store_errors
from src.domain.brands import get_brand
from src.domain.errors import ErrorCode
from src.domain.identity import mask_email, normalize_email, normalize_text

from .dtos import RequestOtpCommand, RequestOtpResponse

logger = logging.getLogger(__name__)


class RequestOtpUseCase:
    """
    Business Rules:
    - The signed link must verify over (brand, email, position, ts)
    - The candidate must be on the roster; the error never says which part mismatched
    - OTP creation runs the invite reuse guard before writing anything
    - The email is sent after commit; a failed send keeps the row
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: VerificationSettings,
        secret_provider: SecretProvider,
        candidate_source: CandidateSource,
        notification_service: NotificationService,
    ):
        self.uow = uow
        self.settings = settings
        self.secret_provider = secret_provider
        self.candidate_source = candidate_source
        self.notification_service = notification_service

    @handle_store_errors
    async def execute(self, command: RequestOtpCommand) -> Result[RequestOtpResponse]:
        email = normalize_email(command.email)
        text_for_email = normalize_text(command.text_for_email)
        if not command.brand or not email or not text_for_email or not command.signature:
            return Return.err(Error(ErrorCode.MISSING_PARAMS, "Missing required fields"))

        brand = get_brand(command.brand)
        if brand is None:
            return Return.err(Error(ErrorCode.INVALID_BRAND, "Invalid brand"))
        if not brand.otp_enabled:
            return Return.err(
                Error(ErrorCode.INVALID_BRAND, "Verification is not enabled for this brand")
            )

        signer = LinkSigner.from_settings(await self.secret_provider.get_secret(), self.settings)
        checked = signer.verify(
            invite_parts(brand.code, email, text_for_email),
            command.signature,
            command.issued_at,
        )
        if checked.is_err():
            return Return.err(checked.error)

        if not await self.candidate_source.verify_candidate(brand.code, email, text_for_email):
            logger.info(
                "Candidate check failed brand=%s email=%s trace=%s",
                brand.code,
                mask_email(email),
                command.trace_id,
            )
            return Return.err(
                Error(
                    ErrorCode.CANDIDATE_NOT_VERIFIED,
                    "We could not verify your details for this invite.",
                )
            )

        booking_url = await self.candidate_source.get_booking_url(
            brand.code, email, text_for_email
        )

        async with self.uow:
            created = await OtpService(self.uow, self.settings).create_otp(
                brand.code,
                email,
                text_for_email,
                booking_url=booking_url,
                trace_id=command.trace_id,
            )
            if created.is_err():
                if created.error.code == ErrorCode.INVITE_BLOCKED:
                    await record_event(
                        self.uow,
                        "INVITE_BLOCKED",
                        trace_id=command.trace_id,
                        brand=brand.code,
                        email=email,
                        metadata=dict(created.error.details or {}),
                    )
                    await self.uow.commit()
                return Return.err(created.error)

            record = created.value
            await self.uow.commit()

        email_sent = await self.notification_service.send_otp_email(
            email,
            brand.code,
            record.otp,
            record.otp_expires_at,
            self.settings.verify_url(record.identity_ref),
        )
        if not email_sent:
            logger.error(
                "OTP email not delivered email=%s trace=%s", mask_email(email), command.trace_id
            )

        return Return.ok(
            RequestOtpResponse(
                identity_ref=record.identity_ref,
                expires_at=record.otp_expires_at.isoformat(),
                email_sent=email_sent,
                message=(
                    "A verification code has been sent to your email."
                    if email_sent
                    else "We could not send the email. Please try again shortly."
                ),
                trace_id=command.trace_id,
            )
        )
