from typing import Optional

from libs.result import Result, Return
from src.app.services.candidate_source import CandidateSource
from src.app.services.lock_service import LockService
from src.app.services.settings import VerificationSettings
from src.app.services.token_service import TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.store_errors import handle_store_errors

from .dtos import ConfirmAccessCommand, ConfirmAccessResponse


class ConfirmAccessUseCase:
    """Consumes the access token and hands back the booking URL exactly once."""

    def __init__(
        self,
        uow: UnitOfWork,
        settings: VerificationSettings,
        lock_service: LockService,
        candidate_source: Optional[CandidateSource] = None,
    ):
        self.uow = uow
        self.settings = settings
        self.lock_service = lock_service
        self.candidate_source = candidate_source

    @handle_store_errors
    async def execute(self, command: ConfirmAccessCommand) -> Result[ConfirmAccessResponse]:
        async with self.uow:
            tokens = TokenService(
                self.uow,
                self.settings,
                lock_service=self.lock_service,
                candidate_source=self.candidate_source,
            )
            consumed = await tokens.consume(command.token, trace_id=command.trace_id)
            if consumed.is_err():
                return Return.err(consumed.error)

        return Return.ok(ConfirmAccessResponse(redirect_url=consumed.value.booking_url))
