"""
Verify OTP Use Case

Checks the submitted code, issues the one-time access token in the same
transaction and emails the access link. The token itself is never
returned to the caller.
"""

import logging

from libs.result import Result, Return
from src.app.services.notification_service import NotificationService
from src.app.services.otp_service import OtpService
from src.app.services.settings import VerificationSettings
from src.app.services.token_service import TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.store_errors import handle_store_errors
from src.domain.identity import mask_email

from .dtos import VerifyOtpCommand, VerifyOtpResponse

logger = logging.getLogger(__name__)


class VerifyOtpUseCase:
    def __init__(
        self,
        uow: UnitOfWork,
        settings: VerificationSettings,
        notification_service: NotificationService,
    ):
        self.uow = uow
        self.settings = settings
        self.notification_service = notification_service

    @handle_store_errors
    async def execute(self, command: VerifyOtpCommand) -> Result[VerifyOtpResponse]:
        async with self.uow:
            verified = await OtpService(self.uow, self.settings).verify_otp(
                command.otp,
                identity_ref=command.identity_ref,
                brand=command.brand,
                email=command.email,
                text_for_email=command.text_for_email,
                trace_id=command.trace_id,
            )
            if verified.is_err():
                return Return.err(verified.error)

            issued = await TokenService(self.uow, self.settings).issue_token(
                verified.value, trace_id=command.trace_id
            )
            if issued.is_err():
                return Return.err(issued.error)

            record = issued.value
            await self.uow.commit()

        # Only the access page URL is emailed, never the booking URL
        email_sent = await self.notification_service.send_access_link_email(
            record.email,
            record.brand,
            record.text_for_email,
            self.settings.access_url(record.token),
        )
        if not email_sent:
            logger.error(
                "Access link email not delivered email=%s trace=%s",
                mask_email(record.email),
                command.trace_id,
            )

        return Return.ok(
            VerifyOtpResponse(
                status=record.otp_status.value,
                token_expires_at=record.token_expires_at.isoformat(),
                email_sent=email_sent,
                message=(
                    "Verified. We have emailed you a link to schedule your interview."
                    if email_sent
                    else "Verified, but we could not send the email. Please contact your recruiter."
                ),
                trace_id=command.trace_id,
            )
        )
