"""
Auth router - session inspection and logout.
Sign-in itself lives in google_auth.py.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from app.deps import get_bearer_token, get_current_user, get_session_service
from app.schemas.auth import MeResponse, UserOut
from app.schemas.common import OkResponse
from app.services.session_service import SessionService, SessionUser

logger = logging.getLogger("companion.routers.auth")

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# GET /auth/me - who am I?
# ---------------------------------------------------------------------------
@router.get("/me", response_model=MeResponse)
def read_current_user(user: SessionUser = Depends(get_current_user)):
    """
    Return the user behind the presented session.

    The app calls this on launch to check that its stored session is still
    valid; 401 means "sign in again".
    """
    return MeResponse(user=UserOut(sub=user.subject, email=user.email, name=user.name))


# ---------------------------------------------------------------------------
# POST /auth/logout - end the session
# ---------------------------------------------------------------------------
@router.post("/logout", response_model=OkResponse)
def logout(
    token: Optional[str] = Depends(get_bearer_token),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Revoke the presented session.

    Always answers {"ok": true}: the client discards its token regardless,
    and a bad token has nothing to revoke.
    """
    sessions.end(token)
    return OkResponse()
