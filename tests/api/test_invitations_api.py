"""Tests for the invitation endpoints: send, verify, accept."""

import pytest
from httpx import AsyncClient

from app.application.use_cases.credentials.invitations import (
    INVITATION_NOT_EMAILED_MESSAGE,
    INVITATION_SENT_MESSAGE,
)

INVITE = {
    "email": "new.user@example.com",
    "name": "New User",
    "role": "developer",
    "department": "Platform",
    "invitedBy": "ceo@example.com",
}


async def _invite(client: AsyncClient, **overrides) -> dict:
    response = await client.post("/api/v1/invitations", json={**INVITE, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


async def test_send_invitation_emails_signup_link(client: AsyncClient, outbox) -> None:
    body = await _invite(client)
    assert body["success"] is True
    assert body["emailSent"] is True
    assert body["message"] == INVITATION_SENT_MESSAGE
    assert body["invitationId"]

    to, subject, html = outbox.sent[-1]
    assert to == ["new.user@example.com"]
    assert subject == "You're invited to join Activity Tracker"
    assert "/auth?mode=signup&amp;email=new.user%40example.com&amp;token=" in html
    assert "7 days" in html


async def test_invitation_for_existing_account_returns_409(
    client: AsyncClient, alice, outbox
) -> None:
    response = await client.post(
        "/api/v1/invitations", json={**INVITE, "email": "ALICE@example.com"}
    )
    assert response.status_code == 409
    assert response.json()["code"] == "ACCOUNT_ALREADY_EXISTS"
    assert outbox.sent == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"role": "admin"},
        {"email": "not-an-email"},
        {"invitedBy": ""},
        {"department": ""},
    ],
)
async def test_invalid_invitation_body_returns_422(client: AsyncClient, overrides) -> None:
    response = await client.post("/api/v1/invitations", json={**INVITE, **overrides})
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


async def test_email_failure_keeps_invitation(client: AsyncClient, failing_outbox) -> None:
    """emailSent is false but the issued token still verifies."""
    body = await _invite(client)
    assert body["emailSent"] is False
    assert body["message"] == INVITATION_NOT_EMAILED_MESSAGE

    verify = await client.post(
        "/api/v1/invitations/verify",
        json={"token": failing_outbox.last_token(), "email": INVITE["email"]},
    )
    assert verify.status_code == 200
    assert verify.json()["valid"] is True


async def test_reinvite_while_pending_issues_second_token(client: AsyncClient, outbox) -> None:
    first = await _invite(client)
    first_token = outbox.last_token()
    second = await _invite(client)
    assert first["invitationId"] != second["invitationId"]
    assert outbox.last_token() != first_token
    assert first["replacedPending"] is False
    assert second["replacedPending"] is True


async def test_verify_returns_prefill_details(client: AsyncClient, outbox) -> None:
    await _invite(client)
    response = await client.post(
        "/api/v1/invitations/verify",
        json={"token": outbox.last_token(), "email": "New.User@Example.com"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is True
    invitation = data["invitation"]
    assert invitation["email"] == "new.user@example.com"
    assert invitation["name"] == "New User"
    assert invitation["role"] == "developer"
    assert invitation["department"] == "Platform"
    assert invitation["invitedBy"] == "ceo@example.com"
    assert invitation["expiresAt"]
    assert "error" not in data


async def test_verify_failures_share_one_response(client: AsyncClient, outbox) -> None:
    """Wrong email and unknown token cannot be told apart."""
    await _invite(client)
    wrong_email = await client.post(
        "/api/v1/invitations/verify",
        json={"token": outbox.last_token(), "email": "someone.else@example.com"},
    )
    unknown = await client.post(
        "/api/v1/invitations/verify",
        json={"token": "made-up-token", "email": INVITE["email"]},
    )
    assert wrong_email.status_code == unknown.status_code == 400
    assert wrong_email.json() == unknown.json() == {
        "valid": False,
        "error": "Invalid or expired invitation",
    }


async def test_accept_creates_account_once(client: AsyncClient, outbox, memory_backend) -> None:
    await _invite(client)
    token = outbox.last_token()

    response = await client.post(
        "/api/v1/invitations/accept",
        json={"token": token, "email": INVITE["email"], "password": "s3cret-pass"},
    )
    assert response.status_code == 201
    user_id = response.json()["userId"]

    account = await memory_backend.accounts.get_by_id(user_id)
    assert account is not None
    assert account.email == "new.user@example.com"
    assert account.name == "New User"
    assert account.role == "developer"
    assert account.department == "Platform"
    assert await memory_backend.accounts.check_password(INVITE["email"], "s3cret-pass")

    again = await client.post(
        "/api/v1/invitations/accept",
        json={"token": token, "email": INVITE["email"], "password": "s3cret-pass"},
    )
    assert again.status_code == 400
    assert again.json()["code"] == "TOKEN_REDEMPTION_FAILED"

    verify = await client.post(
        "/api/v1/invitations/verify", json={"token": token, "email": INVITE["email"]}
    )
    assert verify.status_code == 400


async def test_accept_with_wrong_email_creates_nothing(
    client: AsyncClient, outbox, memory_backend
) -> None:
    await _invite(client)
    token = outbox.last_token()
    response = await client.post(
        "/api/v1/invitations/accept",
        json={"token": token, "email": "intruder@example.com", "password": "s3cret-pass"},
    )
    assert response.status_code == 400
    assert await memory_backend.accounts.get_by_email("intruder@example.com") is None
    assert await memory_backend.accounts.get_by_email(INVITE["email"]) is None


async def test_accept_short_password_keeps_invitation(client: AsyncClient, outbox) -> None:
    await _invite(client)
    token = outbox.last_token()
    weak = await client.post(
        "/api/v1/invitations/accept",
        json={"token": token, "email": INVITE["email"], "password": "123"},
    )
    assert weak.status_code == 400
    assert weak.json()["code"] == "VALIDATION_ERROR"

    verify = await client.post(
        "/api/v1/invitations/verify", json={"token": token, "email": INVITE["email"]}
    )
    assert verify.json()["valid"] is True


async def test_accept_when_account_appeared_meanwhile(
    client: AsyncClient, outbox, memory_backend
) -> None:
    """Account creation failing rolls the claim back; the token stays unused."""
    await _invite(client)
    token = outbox.last_token()
    await memory_backend.accounts.seed(INVITE["email"], "other-pass", "Racer")

    response = await client.post(
        "/api/v1/invitations/accept",
        json={"token": token, "email": INVITE["email"], "password": "s3cret-pass"},
    )
    assert response.status_code == 400
    record = memory_backend.invitations.records()[0]
    assert record.used_at is None
