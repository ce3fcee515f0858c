"""Domain tests: token entity rules, value objects and exception envelopes."""

from datetime import UTC, datetime, timedelta

import pytest

from app.domain.entities.token import TokenEntity
from app.domain.enums import InvalidReason, TokenPurpose
from app.domain.exceptions import (
    AccountAlreadyExistsException,
    RedemptionConflictException,
    TokenExpiredException,
    TokenInvalidException,
    TokenRedemptionFailedException,
    ValidationException,
    token_exception_for,
)
from app.domain.value_objects.core import EmailAddress, TokenHash

T0 = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


def _reset_token(**overrides) -> TokenEntity:
    fields = {
        "id": "tok1",
        "purpose": TokenPurpose.PASSWORD_RESET,
        "token_hash": TokenHash.of("raw").value,
        "issued_at": T0,
        "expires_at": T0 + timedelta(hours=1),
        "subject_id": "acc1",
    }
    fields.update(overrides)
    return TokenEntity(**fields)


def _invitation(**overrides) -> TokenEntity:
    return _reset_token(
        purpose=TokenPurpose.INVITATION, subject_id=None, email="bob@example.com", **overrides
    )


class TestTokenEntityValidation:
    def test_requires_expiry_after_issue(self) -> None:
        with pytest.raises(ValidationException) as exc_info:
            _reset_token(expires_at=T0)
        assert exc_info.value.details == {"field": "expires_at"}

    def test_reset_token_requires_subject(self) -> None:
        with pytest.raises(ValidationException):
            _reset_token(subject_id=None)

    def test_invitation_requires_email(self) -> None:
        with pytest.raises(ValidationException):
            _reset_token(purpose=TokenPurpose.INVITATION, email=None)

    def test_identity_depends_on_purpose(self) -> None:
        assert _reset_token().identity == "acc1"
        assert _invitation().identity == "bob@example.com"


class TestTokenEntityCheck:
    """check() reports the first failing rule: used, expired, identity."""

    def test_valid(self) -> None:
        assert _reset_token().check(T0) is None

    def test_used_reported_before_expired(self) -> None:
        token = _reset_token(used_at=T0)
        assert token.check(T0 + timedelta(days=1)) == InvalidReason.ALREADY_USED

    def test_expired_at_exact_boundary(self) -> None:
        token = _reset_token()
        assert token.check(T0 + timedelta(hours=1) - timedelta(microseconds=1)) is None
        assert token.check(T0 + timedelta(hours=1)) == InvalidReason.EXPIRED

    def test_expired_reported_before_identity(self) -> None:
        token = _invitation()
        assert token.check(T0 + timedelta(hours=2), "x@example.com") == InvalidReason.EXPIRED

    def test_invitation_email_compared_normalized(self) -> None:
        token = _invitation()
        assert token.check(T0, "  BOB@Example.COM ") is None
        assert token.check(T0, "eve@example.com") == InvalidReason.IDENTITY_MISMATCH
        assert token.check(T0, "not an email") == InvalidReason.IDENTITY_MISMATCH

    def test_reset_subject_compared_exactly(self) -> None:
        assert _reset_token().check(T0, "acc2") == InvalidReason.IDENTITY_MISMATCH
        assert _reset_token().check(T0, None) is None

    def test_mark_used_once(self) -> None:
        used = _reset_token().mark_used(T0)
        assert used.used_at == T0
        with pytest.raises(ValueError):
            used.mark_used(T0)


class TestValueObjects:
    def test_email_normalized(self) -> None:
        assert EmailAddress("  Alice@Example.COM ").value == "alice@example.com"

    @pytest.mark.parametrize("value", ["", "   ", "no-at-sign", "a@b", "a b@c.d"])
    def test_email_rejects_malformed(self, value: str) -> None:
        with pytest.raises(ValueError):
            EmailAddress(value)

    def test_token_hash_is_sha256_hex(self) -> None:
        h = TokenHash.of("hello")
        assert h.value == "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
        assert TokenHash.of("hello") == h
        assert TokenHash.of("hello!") != h

    def test_token_hash_rejects_non_hex(self) -> None:
        with pytest.raises(ValueError):
            TokenHash("z" * 64)
        with pytest.raises(ValueError):
            TokenHash("abc")


class TestExceptions:
    def test_reason_mapping(self) -> None:
        exc = token_exception_for(InvalidReason.EXPIRED)
        assert isinstance(exc, TokenExpiredException)
        assert exc.reason == InvalidReason.EXPIRED
        assert isinstance(token_exception_for(InvalidReason.CONFLICT), RedemptionConflictException)
        generic = token_exception_for(InvalidReason.TIMEOUT)
        assert type(generic) is TokenInvalidException
        assert generic.reason == InvalidReason.TIMEOUT

    def test_public_redemption_error_has_no_reason(self) -> None:
        body = TokenRedemptionFailedException().to_dict()
        assert body == {
            "error": "This link is invalid or has expired. Please try again or request a new one.",
            "code": "TOKEN_REDEMPTION_FAILED",
        }

    def test_to_dict_includes_details(self) -> None:
        body = AccountAlreadyExistsException("bob@example.com").to_dict()
        assert body["code"] == "ACCOUNT_ALREADY_EXISTS"
        assert body["details"] == {"email": "bob@example.com"}
