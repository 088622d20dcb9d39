"""
Dependencies module - reusable FastAPI dependencies for route handlers.

Settings, the session factory and the process-wide collaborators (session
signer, credential exchanger, generation provider) live on app.state; the
functions below hand them to routes and can be overridden in tests.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.ai.providers.base import AIProvider
from app.core.config import Settings
from app.core.errors import MissingCredential
from app.core.security import SessionManager
from app.db.session import get_db
from app.services.answer_service import AnswerService
from app.services.credential_exchanger import CredentialExchanger
from app.services.notes_service import NotesService
from app.services.session_service import SessionService, SessionUser

# ---------------------------------------------------------------------------
# SECURITY SCHEME
# ---------------------------------------------------------------------------
# auto_error=False: a missing header must become our 401 no_user, not
# FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    """The Settings this application was created with."""
    return request.app.state.settings


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_credential_exchanger(request: Request) -> CredentialExchanger:
    return request.app.state.credential_exchanger


def get_ai_provider(request: Request) -> AIProvider:
    return request.app.state.ai_provider


def get_session_service(
    db: Session = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_settings),
) -> SessionService:
    return SessionService(db, manager, settings.SESSION_BACKEND)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """The raw bearer value, or None when the header is absent or not Bearer."""
    return credentials.credentials if credentials else None


def get_current_user(
    token: Optional[str] = Depends(get_bearer_token),
    sessions: SessionService = Depends(get_session_service),
) -> SessionUser:
    """
    Validate the session token and return the signed-in user.

    Any route that includes `user: SessionUser = Depends(get_current_user)`
    requires a valid session.

    Raises:
        401 no_user: no Authorization header
        401 invalid_session / session_revoked: bad signature, unknown or revoked session
        401 session_expired: token past its expiry
    """
    if not token:
        raise MissingCredential()
    return sessions.authenticate(token)


def get_notes_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> NotesService:
    return NotesService(db, page_size=settings.NOTES_PAGE_SIZE)


def get_answer_service(
    notes: NotesService = Depends(get_notes_service),
    provider: AIProvider = Depends(get_ai_provider),
    settings: Settings = Depends(get_settings),
) -> AnswerService:
    return AnswerService(
        provider=provider,
        notes=notes,
        notes_limit=settings.ASK_NOTES_LIMIT,
        context_char_limit=settings.ASK_CONTEXT_CHAR_LIMIT,
        temperature=settings.ANSWER_TEMPERATURE,
        max_tokens=settings.ANSWER_MAX_TOKENS,
        timeout=settings.AI_REQUEST_TIMEOUT,
    )
