"""
Booking URL policy applied before a booking link is released to a candidate.
"""

import re
from typing import Optional

from libs.result import Error, Result, Return
from src.domain.errors import ErrorCode

USER_SEGMENT = re.compile(r"/u/\d+/", re.IGNORECASE)
HOST_PATTERN = re.compile(r"https?://([^/]+)", re.IGNORECASE)
CL_CODE_PATTERN = re.compile(r"CL\d+", re.IGNORECASE)

BLOCKED_FRAGMENTS = ("script.google.com", "docs.google.com/forms")


def normalize_booking_url(url: Optional[str]) -> str:
    """Strip the signed-in user segment (/u/0/) so the public booking page opens."""
    value = str(url or "").strip()
    return USER_SEGMENT.sub("/", value)


def check_booking_url(url: Optional[str]) -> Result[str]:
    normalized = normalize_booking_url(url)
    if not normalized:
        return Return.err(
            Error(
                ErrorCode.NO_BOOKING_URL,
                "Booking link not configured. Please contact your recruiter.",
            )
        )

    lowered = normalized.lower()
    if not lowered.startswith(("https://", "http://")) or any(
        fragment in lowered for fragment in BLOCKED_FRAGMENTS
    ):
        return Return.err(
            Error(ErrorCode.BAD_BOOKING_URL, "Booking link misconfigured. Contact support.")
        )
    return Return.ok(normalized)


def mask_url(url: Optional[str]) -> str:
    """Host and last 8 characters only, for logs."""
    if not url:
        return ""
    match = HOST_PATTERN.match(str(url))
    host = match.group(1) if match else ""
    return f"{host}...{str(url)[-8:]}" if host else f"...{str(url)[-8:]}"


def extract_cl_code(text_for_email: Optional[str]) -> Optional[str]:
    match = CL_CODE_PATTERN.search(str(text_for_email or ""))
    return match.group(0).upper() if match else None
