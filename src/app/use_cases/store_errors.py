import functools
import logging

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Return
from src.domain.errors import ErrorCode

logger = logging.getLogger(__name__)


def handle_store_errors(func):
    """Turn database failures raised inside a use case into STORE_UNAVAILABLE."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error("Store unavailable in %s: %s", func.__qualname__, e)
            return Return.err(
                Error(
                    ErrorCode.STORE_UNAVAILABLE,
                    "Service temporarily unavailable. Please try again.",
                )
            )

    return wrapper
