"""
Session service - issues, validates and revokes session credentials.

Two backends, chosen by SESSION_BACKEND:
- stateless: the signed token is the whole session; logout is a no-op on
  the server and the token lives until `exp`.
- database:  every issued token also gets a user_sessions row keyed by its
  jti; validation requires that row to exist and not be revoked.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import SessionBackend
from app.core.errors import AuthError, InvalidCredential
from app.core.security import IssuedSession, SessionManager
from app.environments.base import Identity
from app.models.session import UserSession

logger = logging.getLogger("companion.auth.sessions")


@dataclass(frozen=True)
class SessionUser:
    """The identity subset downstream handlers need."""
    subject: str
    session_id: str
    email: Optional[str] = None
    name: Optional[str] = None


class SessionService:
    """
    Request-scoped facade over SessionManager plus the session table.

    Usage:
        service = SessionService(db, manager, SessionBackend.DATABASE)
        issued = service.start(identity)
        user = service.authenticate(issued.token)
        service.end(issued.token)
    """

    def __init__(self, db: Session, manager: SessionManager, backend: SessionBackend):
        self.db = db
        self.manager = manager
        self.backend = backend

    def start(self, identity: Identity) -> IssuedSession:
        """Issue a session for a verified identity (and record it if stateful)."""
        issued = self.manager.issue(identity)

        if self.backend is SessionBackend.DATABASE:
            record = UserSession(
                id=uuid.UUID(issued.claims.session_id),
                subject=identity.subject,
                email=identity.email,
                display_name=identity.name,
                issued_at=issued.claims.issued_at,
                expires_at=issued.claims.expires_at,
                revoked=False,
            )
            self.db.add(record)
            self.db.commit()

        logger.info(
            f"Issued session {issued.claims.session_id} for sub={identity.subject} "
            f"(expires {issued.claims.expires_at.isoformat()})"
        )
        return issued

    def authenticate(self, token: Optional[str]) -> SessionUser:
        """
        Validate a presented session token.

        Raises:
            MissingCredential / InvalidCredential / SessionExpired (all 401)
        """
        claims = self.manager.decode(token)

        if self.backend is SessionBackend.DATABASE:
            record = self._get_record(claims.session_id)
            if record is None or record.subject != claims.subject:
                raise InvalidCredential()
            if record.revoked:
                raise InvalidCredential("Session has been revoked", error="session_revoked")

        return SessionUser(
            subject=claims.subject,
            session_id=claims.session_id,
            email=claims.email,
            name=claims.name,
        )

    def end(self, token: Optional[str]) -> bool:
        """
        Revoke the session behind `token`.

        Never fails: an absent, invalid or already revoked token is simply
        reported as not revoked.
        """
        try:
            user = self.authenticate(token)
        except AuthError as e:
            logger.info(f"Logout with unusable session ({e.error}); nothing to revoke")
            return False

        if self.backend is not SessionBackend.DATABASE:
            return False

        record = self._get_record(user.session_id)
        record.revoked = True
        record.revoked_at = datetime.now(timezone.utc)
        self.db.commit()

        logger.info(f"Revoked session {user.session_id} for sub={user.subject}")
        return True

    def _get_record(self, session_id: str) -> Optional[UserSession]:
        try:
            key = uuid.UUID(session_id)
        except ValueError:
            return None
        return self.db.get(UserSession, key)
