from fastapi import status
from libs.result import Error

from src.domain.errors import ErrorCode, is_retryable


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


CLIENT_ERROR_STATUS = {
    ErrorCode.MISSING_PARAMS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_BRAND: status.HTTP_400_BAD_REQUEST,
    ErrorCode.SIGNATURE_INVALID: status.HTTP_403_FORBIDDEN,
    ErrorCode.LINK_EXPIRED: status.HTTP_410_GONE,
    ErrorCode.CANDIDATE_NOT_VERIFIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVITE_BLOCKED: status.HTTP_409_CONFLICT,
    ErrorCode.INVITE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.OTP_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.OTP_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.OTP_EXPIRED: status.HTTP_410_GONE,
    ErrorCode.OTP_LOCKED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.OTP_SUPERSEDED: status.HTTP_409_CONFLICT,
    ErrorCode.OTP_ALREADY_VERIFIED: status.HTTP_409_CONFLICT,
    ErrorCode.TOKEN_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TOKEN_EXPIRED: status.HTTP_410_GONE,
    ErrorCode.TOKEN_ALREADY_USED: status.HTTP_409_CONFLICT,
    ErrorCode.TOKEN_REVOKED: status.HTTP_410_GONE,
    ErrorCode.TOKEN_NOT_VERIFIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.TOKEN_NOT_ISSUABLE: status.HTTP_409_CONFLICT,
    ErrorCode.BRAND_MISMATCH: status.HTTP_403_FORBIDDEN,
    ErrorCode.NO_BOOKING_URL: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.BAD_BOOKING_URL: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_API_KEY: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.SECRET_NOT_ROTATABLE: status.HTTP_409_CONFLICT,
}


def to_http_error(error: Error) -> Exception:
    """Map a use case error to the exception the app-level handlers render."""
    if is_retryable(error.code):
        return ServerError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    if error.code in CLIENT_ERROR_STATUS:
        return ClientError(error, status_code=CLIENT_ERROR_STATUS[error.code])
    return ServerError(error)
