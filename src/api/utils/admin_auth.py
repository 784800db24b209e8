"""
Admin API Key Authentication

Validates admin API keys for invite support endpoints.
"""

import hmac

from fastapi import Header, status
from libs.result import Error
from src.api.error import ClientError
from src.domain.errors import ErrorCode
from config import ApplicationConfig


async def verify_admin_api_key(x_admin_api_key: str = Header(None)):
    """
    Verify admin API key from X-Admin-API-Key header.

    Raises:
        ClientError: 401 if key is missing or invalid

    Returns:
        True if valid
    """
    if not x_admin_api_key:
        raise ClientError(
            Error(ErrorCode.UNAUTHORIZED, "Admin API key required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    valid_admin_key = ApplicationConfig.ADMIN_API_KEY
    if not valid_admin_key or not hmac.compare_digest(
        x_admin_api_key.encode("utf-8"), str(valid_admin_key).encode("utf-8")
    ):
        raise ClientError(
            Error(ErrorCode.INVALID_API_KEY, "Invalid admin API key"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return True


async def get_admin_actor(x_admin_actor: str = Header(None)) -> str:
    """Name recorded on audit events written by admin endpoints."""
    return (x_admin_actor or "ADMIN").strip()[:255] or "ADMIN"
