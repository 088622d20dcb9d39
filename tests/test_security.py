"""
Tests for session token issuing and validation.

These tests verify:
- Issued tokens decode back to the same subject and session id
- Expired tokens raise SessionExpired
- Foreign, malformed or incomplete tokens raise InvalidCredential
- An unset signing key is replaced by a generated one, with a warning
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.core.errors import InvalidCredential, MissingCredential, SessionExpired
from app.core.security import SessionManager, build_session_manager
from app.environments.base import Identity

from tests.conftest import ALICE, TEST_SECRET_KEY


@pytest.fixture
def manager() -> SessionManager:
    return SessionManager(secret_key=TEST_SECRET_KEY, expire_delta=timedelta(days=30))


class TestIssue:
    """Tests for SessionManager.issue."""

    def test_issue_and_decode(self, manager: SessionManager):
        """A freshly issued token decodes to the identity it was issued for."""
        issued = manager.issue(ALICE)
        claims = manager.decode(issued.token)

        assert claims.subject == "google-sub-alice"
        assert claims.email == "alice@example.com"
        assert claims.name == "Alice"
        assert claims.session_id == issued.claims.session_id
        assert claims.expires_at == issued.claims.expires_at

    def test_expiry_uses_configured_lifetime(self, manager: SessionManager):
        now = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        issued = manager.issue(ALICE, now=now)

        assert issued.claims.issued_at == now
        assert issued.claims.expires_at == now + timedelta(days=30)

    def test_each_session_gets_its_own_id(self, manager: SessionManager):
        first = manager.issue(ALICE)
        second = manager.issue(ALICE)

        assert first.claims.session_id != second.claims.session_id
        assert first.token != second.token

    def test_identity_without_email(self, manager: SessionManager):
        issued = manager.issue(Identity(subject="sub-only"))
        claims = manager.decode(issued.token)

        assert claims.subject == "sub-only"
        assert claims.email is None

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            SessionManager(secret_key="")


class TestDecode:
    """Tests for SessionManager.decode failure modes."""

    def test_expired_token(self, manager: SessionManager):
        """Should raise SessionExpired once exp has passed."""
        issued = manager.issue(
            ALICE,
            now=datetime.now(timezone.utc) - timedelta(days=31),
        )

        with pytest.raises(SessionExpired) as exc_info:
            manager.decode(issued.token)

        assert exc_info.value.error == "session_expired"
        assert exc_info.value.status_code == 401

    def test_token_signed_with_other_key(self, manager: SessionManager):
        other = SessionManager(secret_key="some-other-key")
        token = other.issue(ALICE).token

        with pytest.raises(InvalidCredential) as exc_info:
            manager.decode(token)

        assert exc_info.value.error == "invalid_session"

    def test_garbage_token(self, manager: SessionManager):
        with pytest.raises(InvalidCredential):
            manager.decode("not-a-jwt")

    def test_token_without_session_id(self, manager: SessionManager):
        exp = int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())
        token = jwt.encode({"sub": "google-sub-alice", "exp": exp}, TEST_SECRET_KEY, algorithm="HS256")

        with pytest.raises(InvalidCredential):
            manager.decode(token)

    def test_token_without_expiry(self, manager: SessionManager):
        token = jwt.encode({"sub": "google-sub-alice", "jti": "abc"}, TEST_SECRET_KEY, algorithm="HS256")

        with pytest.raises(InvalidCredential):
            manager.decode(token)

    @pytest.mark.parametrize("token", [None, "", "   "])
    def test_missing_token(self, manager: SessionManager, token):
        with pytest.raises(MissingCredential) as exc_info:
            manager.decode(token)

        assert exc_info.value.error == "no_user"


class TestBuildSessionManager:
    """Tests for startup construction of the session manager."""

    def test_configured_key_is_used(self):
        built = build_session_manager(TEST_SECRET_KEY, "HS256", expire_days=7)
        token = built.issue(ALICE).token

        # A manager with the same key accepts the token
        reader = SessionManager(secret_key=TEST_SECRET_KEY)
        assert reader.decode(token).subject == ALICE.subject
        assert built.expire_delta == timedelta(days=7)

    def test_missing_key_generates_one_and_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="companion.security"):
            built = build_session_manager("", "HS256", expire_days=30)

        assert "SESSION_SECRET_KEY is not set" in caplog.text

        # Tokens still round-trip within the same process
        token = built.issue(ALICE).token
        assert built.decode(token).subject == ALICE.subject

    def test_generated_keys_differ_per_build(self):
        first = build_session_manager("", "HS256", expire_days=30)
        second = build_session_manager("", "HS256", expire_days=30)

        with pytest.raises(InvalidCredential):
            second.decode(first.issue(ALICE).token)
