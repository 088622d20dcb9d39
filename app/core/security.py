"""
Security utilities - session token creation and validation.

Sessions are HS256 JWTs (python-jose). The signing key is handed to
SessionManager by whoever builds it; this module never invents one.

JWT Structure:
    Header:  {"alg": "HS256", "typ": "JWT"}
    Payload: {"sub": "<google sub>", "email": ..., "name": ...,
              "iat": 1700000000, "exp": 1702592000, "jti": "<uuid>"}
    Signature: HMAC-SHA256(header + payload, secret_key)

The payload is NOT encrypted, only signed; never put secrets in it.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from app.core.errors import InvalidCredential, MissingCredential, SessionExpired
from app.environments.base import Identity

logger = logging.getLogger("companion.security")


@dataclass(frozen=True)
class SessionClaims:
    """Decoded, verified contents of a session token."""
    subject: str
    session_id: str
    issued_at: datetime
    expires_at: datetime
    email: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class IssuedSession:
    token: str
    claims: SessionClaims


class SessionManager:
    """
    Issues and decodes signed session tokens.

    Example:
        manager = SessionManager(secret_key="...", expire_delta=timedelta(days=30))
        issued = manager.issue(identity)
        claims = manager.decode(issued.token)
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_delta: timedelta = timedelta(days=30),
    ):
        if not secret_key:
            raise ValueError("SessionManager requires a non-empty secret_key")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expire_delta = expire_delta

    def issue(
        self,
        identity: Identity,
        now: Optional[datetime] = None,
        expires_delta: Optional[timedelta] = None,
    ) -> IssuedSession:
        """
        Mint a session token for a verified identity.

        Args:
            identity: Verified identity from the credential exchanger
            now: Issuance time (defaults to current UTC time)
            expires_delta: Override of the configured lifetime

        Returns:
            IssuedSession with the encoded token and its claims
        """
        issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
        expires_at = issued_at + (expires_delta if expires_delta is not None else self.expire_delta)

        claims = SessionClaims(
            subject=identity.subject,
            session_id=str(uuid.uuid4()),
            issued_at=issued_at,
            expires_at=expires_at,
            email=identity.email,
            name=identity.name,
        )
        to_encode = {
            "sub": claims.subject,
            "jti": claims.session_id,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "email": claims.email,
            "name": claims.name,
        }
        token = jwt.encode(to_encode, self._secret_key, algorithm=self.algorithm)
        return IssuedSession(token=token, claims=claims)

    def decode(self, token: Optional[str]) -> SessionClaims:
        """
        Verify signature and expiry and return the claims.

        Raises:
            MissingCredential: token is empty
            SessionExpired: signature valid but `exp` has passed
            InvalidCredential: anything else (bad signature, malformed, missing claims)
        """
        if not token or not token.strip():
            raise MissingCredential()

        try:
            payload = jwt.decode(token.strip(), self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise SessionExpired()
        except JWTError as e:
            logger.info(f"Rejected session token: {e}")
            raise InvalidCredential()

        subject = payload.get("sub")
        session_id = payload.get("jti")
        if not subject or not session_id or "exp" not in payload:
            raise InvalidCredential()

        return SessionClaims(
            subject=subject,
            session_id=session_id,
            issued_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            email=payload.get("email"),
            name=payload.get("name"),
        )


def build_session_manager(
    secret_key: str,
    algorithm: str,
    expire_days: int,
) -> SessionManager:
    """
    Build the process-wide SessionManager at startup.

    With no configured secret a random one is generated. Every session then
    dies with the process, so this is logged as a warning.
    """
    if not secret_key:
        logger.warning(
            "SESSION_SECRET_KEY is not set; generated an ephemeral signing key. "
            "Sessions will not survive a restart."
        )
        secret_key = secrets.token_urlsafe(64)

    return SessionManager(
        secret_key=secret_key,
        algorithm=algorithm,
        expire_delta=timedelta(days=expire_days),
    )
