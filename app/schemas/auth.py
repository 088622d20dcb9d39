"""
Auth schemas - Pydantic models for the sign-in and session endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, Field

from app.schemas.common import CamelModel


class GoogleExchangeRequest(CamelModel):
    """
    Schema for POST /auth/google/exchange request body.

    Exactly one of `code` / `idToken` must be non-empty; that rule is
    enforced by the exchanger so the client gets a stable error code
    instead of a generic validation error.

    Example request bodies:
        {"code": "4/0AbUR2VM..."}
        {"idToken": "eyJhbGciOiJSUzI1NiIs..."}
    """
    code: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("code", "authorization_code", "authorizationCode"),
        description="Authorization code from a server-auth-code flow",
    )
    id_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("idToken", "id_token"),
        description="Google ID token",
    )
    redirect_uri: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("redirectUri", "redirect_uri"),
        description="Redirect URI the code was minted with (web_redirect mode only)",
    )


class UserOut(CamelModel):
    """
    Public view of the signed-in user.

    Example:
    {"sub": "1098...", "email": "jan@example.com", "name": "Jan",
     "picture": "https://lh3.googleusercontent.com/a/...", "locale": "pl"}
    """
    sub: str
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
    locale: Optional[str] = None


class GoogleExchangeResponse(CamelModel):
    """
    Schema for a successful exchange.

    The mobile app stores `sessionToken` and sends it as
    `Authorization: Bearer <sessionToken>` on every later request.
    `accessToken` is Google's token (code path only) for the client's own
    Google API calls; the server keeps no copy.
    """
    user: UserOut
    session_token: str
    token_type: str = "bearer"
    expires_at: datetime
    access_token: Optional[str] = None


class MeResponse(CamelModel):
    user: UserOut
