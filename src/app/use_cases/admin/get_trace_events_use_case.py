"""
Use Case: Get Trace Events

Returns the audit events written while handling one request trace.
"""

from typing import Any, Dict, List

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.store_errors import handle_store_errors
from src.domain.errors import ErrorCode


class GetTraceEventsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @handle_store_errors
    async def execute(self, trace_id: str, limit: int = 200) -> Result[Dict[str, Any]]:
        if not trace_id:
            return Return.err(Error(ErrorCode.MISSING_PARAMS, "trace_id is required"))

        async with self.uow:
            events = await self.uow.audit_events.list_by_trace_id(trace_id, limit=limit)

            events_list: List[Dict[str, Any]] = []
            for event in events:
                events_list.append(
                    {
                        "action": event.action,
                        "brand": event.brand,
                        "email": event.email_masked,
                        "actor": event.actor,
                        "timestamp": event.created_at.isoformat() + "Z",
                        "metadata": event.event_metadata or {},
                    }
                )

        return Return.ok({"trace_id": trace_id, "events": events_list})
