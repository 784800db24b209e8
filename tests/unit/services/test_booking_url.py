from src.app.services.booking_url import (
    check_booking_url,
    extract_cl_code,
    mask_url,
    normalize_booking_url,
)
from src.domain.errors import ErrorCode


def test_normalize_removes_signed_in_user_segment():
    raw = "https://calendar.google.com/calendar/u/0/appointments/schedules/AcZ123"

    assert (
        normalize_booking_url(raw)
        == "https://calendar.google.com/calendar/appointments/schedules/AcZ123"
    )


def test_normalize_leaves_public_url_untouched():
    url = "https://calendar.google.com/calendar/appointments/schedules/AcZ123"

    assert normalize_booking_url(url) == url


def test_check_empty_url():
    result = check_booking_url("  ")

    assert result.error.code == ErrorCode.NO_BOOKING_URL


def test_check_rejects_script_and_forms_hosts():
    for url in (
        "https://script.google.com/macros/s/abc/exec",
        "https://docs.google.com/forms/d/e/abc/viewform",
    ):
        assert check_booking_url(url).error.code == ErrorCode.BAD_BOOKING_URL


def test_check_rejects_non_http_scheme():
    assert check_booking_url("javascript:alert(1)").error.code == ErrorCode.BAD_BOOKING_URL


def test_check_returns_normalized_url():
    result = check_booking_url("https://calendar.google.com/calendar/u/2/appointments/schedules/X")

    assert result.value == "https://calendar.google.com/calendar/appointments/schedules/X"


def test_mask_url_keeps_host_and_tail():
    masked = mask_url("https://calendar.google.com/calendar/appointments/schedules/AcZ12345678")

    assert masked == "calendar.google.com...12345678"


def test_extract_cl_code():
    assert extract_cl_code("Waiter-cl200") == "CL200"
    assert extract_cl_code("Waiter") is None
