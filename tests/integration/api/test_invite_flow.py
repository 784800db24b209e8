import pytest
from httpx import AsyncClient

REDIRECT_URL = "https://calendar.google.com/calendar/appointments/schedules/AcZ200"


def _otp_body(query: dict) -> dict:
    return {
        "brand": query["brand"],
        "email": query["e"],
        "text_for_email": query["t"],
        "ts": int(query["ts"]),
        "sig": query["sig"],
    }


@pytest.mark.asyncio
async def test_full_invite_flow_releases_booking_url_once(client: AsyncClient, notifier, sign_invite):
    """Signed link -> OTP -> access link -> booking URL, then the invite is closed"""
    query = await sign_invite()

    # Landing page only checks brand, signature shape and freshness
    page = await client.get(
        "/invites/link",
        params={"brand": query["brand"], "t": query["t"], "ts": query["ts"], "sig": query["sig"]},
    )
    assert page.status_code == 200
    assert page.json()["brand_name"] == "Royal Caribbean"
    assert page.json()["fully_verified"] is False

    otp_response = await client.post("/invites/otp", json=_otp_body(query))
    assert otp_response.status_code == 200
    identity_ref = otp_response.json()["identity_ref"]
    assert "otp" not in otp_response.json()
    code = notifier.otp_emails[-1]["code"]
    assert len(code) == 6

    verify_response = await client.post(
        "/invites/otp/verify", json={"otp": code, "identity_ref": identity_ref}
    )
    assert verify_response.status_code == 200
    assert verify_response.json()["status"] == "VERIFIED"
    token = notifier.access_emails[-1]["token"]
    assert token not in verify_response.text

    # Opening the link (or a mail scanner pre-fetching it) never reveals the URL
    for _ in range(2):
        opened = await client.get("/access", params={"token": token, "brand": "ROYAL"})
        assert opened.status_code == 200
        assert opened.json()["token_status"] == "CONFIRMED"
        assert "calendar.google.com" not in opened.text

    confirmed = await client.post("/access", data={"token": token, "confirm": "1"})
    assert confirmed.status_code == 200
    assert confirmed.json() == {"redirect_url": REDIRECT_URL}

    again = await client.post("/access", data={"token": token, "confirm": "1"})
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "TOKEN_ALREADY_USED"
    assert "calendar.google.com" not in again.text

    reissue = await client.post("/invites/otp", json=_otp_body(await sign_invite()))
    assert reissue.status_code == 409
    assert reissue.json()["error"]["code"] == "INVITE_BLOCKED"
    assert len(notifier.otp_emails) == 1


@pytest.mark.asyncio
async def test_confirm_requires_explicit_confirmation(client: AsyncClient):
    response = await client.post("/access", data={"token": "anything"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_PARAMS"


@pytest.mark.asyncio
async def test_tampered_link_is_rejected(client: AsyncClient, notifier, sign_invite):
    query = await sign_invite()
    body = _otp_body(query)
    body["text_for_email"] = "Captain-CL999"

    response = await client.post("/invites/otp", json=body)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "SIGNATURE_INVALID"
    assert response.json()["error"]["retryable"] is False
    assert notifier.otp_emails == []


@pytest.mark.asyncio
async def test_expired_link_is_gone(client: AsyncClient, sign_invite):
    import time

    query = await sign_invite(issued_at=int(time.time()) - 8 * 24 * 3600)

    response = await client.post("/invites/otp", json=_otp_body(query))

    assert response.status_code == 410
    assert response.json()["error"]["code"] == "LINK_EXPIRED"


@pytest.mark.asyncio
async def test_new_code_supersedes_previous_one(client: AsyncClient, notifier, sign_invite):
    first = await client.post("/invites/otp", json=_otp_body(await sign_invite()))
    first_code = notifier.otp_emails[-1]["code"]
    second = await client.post("/invites/otp", json=_otp_body(await sign_invite()))
    second_code = notifier.otp_emails[-1]["code"]

    stale = await client.post(
        "/invites/otp/verify",
        json={"otp": first_code, "identity_ref": first.json()["identity_ref"]},
    )
    assert stale.status_code == 409
    assert stale.json()["error"]["code"] == "OTP_SUPERSEDED"

    latest = await client.post(
        "/invites/otp/verify",
        json={"otp": second_code, "identity_ref": second.json()["identity_ref"]},
    )
    assert latest.status_code == 200


@pytest.mark.asyncio
async def test_verify_by_brand_and_email(client: AsyncClient, notifier, sign_invite):
    await client.post("/invites/otp", json=_otp_body(await sign_invite()))
    code = notifier.otp_emails[-1]["code"]

    response = await client.post(
        "/invites/otp/verify",
        json={"otp": code, "brand": "royal", "email": "A@X.com", "text_for_email": "waiter-cl200"},
    )

    assert response.status_code == 200
    assert len(notifier.access_emails) == 1


@pytest.mark.asyncio
async def test_three_wrong_codes_lock_the_otp(client: AsyncClient, notifier, sign_invite):
    created = await client.post("/invites/otp", json=_otp_body(await sign_invite()))
    identity_ref = created.json()["identity_ref"]
    code = notifier.otp_emails[-1]["code"]
    wrong = "999999" if code != "999999" else "000000"

    first = await client.post("/invites/otp/verify", json={"otp": wrong, "identity_ref": identity_ref})
    second = await client.post("/invites/otp/verify", json={"otp": wrong, "identity_ref": identity_ref})
    third = await client.post("/invites/otp/verify", json={"otp": wrong, "identity_ref": identity_ref})
    correct = await client.post("/invites/otp/verify", json={"otp": code, "identity_ref": identity_ref})

    assert first.status_code == 400
    assert first.json()["error"]["details"] == {"remaining_attempts": 2}
    assert second.json()["error"]["details"] == {"remaining_attempts": 1}
    assert third.status_code == 429
    assert correct.status_code == 429
    assert notifier.access_emails == []


@pytest.mark.asyncio
async def test_access_link_unknown_token(client: AsyncClient):
    response = await client.get("/access", params={"token": "does-not-exist"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "TOKEN_NOT_FOUND"


@pytest.mark.asyncio
async def test_trace_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Trace-Id": "tr-health-1"})

    assert response.status_code == 200
    assert response.headers["X-Trace-Id"] == "tr-health-1"
