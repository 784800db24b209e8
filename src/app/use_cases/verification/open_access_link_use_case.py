from libs.result import Result, Return
from src.app.services.settings import VerificationSettings
from src.app.services.token_service import TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.store_errors import handle_store_errors
from src.domain.brands import get_brand

from .dtos import AccessLinkResponse, OpenAccessLinkCommand


class OpenAccessLinkUseCase:
    """
    Access page read path. Confirms the token (ISSUED -> CONFIRMED) so the
    page can show a confirm button; mail scanners opening the link never
    receive the booking URL.
    """

    def __init__(self, uow: UnitOfWork, settings: VerificationSettings):
        self.uow = uow
        self.settings = settings

    @handle_store_errors
    async def execute(self, command: OpenAccessLinkCommand) -> Result[AccessLinkResponse]:
        async with self.uow:
            validated = await TokenService(self.uow, self.settings).validate(
                command.token, brand=command.brand, trace_id=command.trace_id
            )
            if validated.is_err():
                return Return.err(validated.error)

            record = validated.value
            await self.uow.commit()

        brand = get_brand(record.brand)
        return Return.ok(
            AccessLinkResponse(
                brand=record.brand,
                brand_name=brand.name if brand else record.brand,
                text_for_email=record.text_for_email,
                token_status=record.token_status.value,
                expires_at=record.token_expires_at.isoformat(),
            )
        )
