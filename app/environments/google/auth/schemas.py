"""
Google OAuth Schemas - Data structures for Google authentication.

Pydantic models for what Google's token and userinfo endpoints return,
plus the redirect values each RedirectMode sends to the token endpoint.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from app.core.config import RedirectMode


# ---------------------------------------------------------------------------
# REDIRECT CONVENTIONS
# ---------------------------------------------------------------------------
# Codes minted by native server-auth-code flows and by the GIS popup are
# bound to "postmessage"; legacy installed apps used the out-of-band URN.
# WEB_REDIRECT has no fixed value, it uses GOOGLE_REDIRECT_URI.
FIXED_REDIRECT_URIS = {
    RedirectMode.SERVER_AUTH_CODE: "postmessage",
    RedirectMode.INSTALLED_APP: "urn:ietf:wg:oauth:2.0:oob",
}

# Accepted `iss` values for Google ID tokens
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


# ---------------------------------------------------------------------------
# TOKEN RESPONSES
# ---------------------------------------------------------------------------

class GoogleTokenResponse(BaseModel):
    """
    Response from Google's token endpoint.

    Example response from Google:
    {
        "access_token": "ya29.a0AfB_byC...",
        "expires_in": 3599,
        "refresh_token": "1//0eXyz...",
        "scope": "openid email profile",
        "token_type": "Bearer",
        "id_token": "eyJhbGciOiJSUzI1NiIs..."
    }
    """
    access_token: str = Field(..., description="OAuth access token")
    token_type: str = Field(default="Bearer", description="Token type (usually Bearer)")
    expires_in: Optional[int] = Field(None, description="Seconds until expiration")
    refresh_token: Optional[str] = Field(None, description="Refresh token for renewal")
    scope: Optional[str] = Field(None, description="Space-separated scopes granted")
    id_token: Optional[str] = Field(None, description="JWT with user info (OpenID)")

    def get_scopes_list(self) -> List[str]:
        """Convert space-separated scope string to list."""
        if self.scope:
            return self.scope.split()
        return []

    def get_expires_at(self) -> Optional[datetime]:
        """Calculate expiration datetime from expires_in seconds."""
        if self.expires_in:
            return datetime.now(timezone.utc) + timedelta(seconds=self.expires_in)
        return None


class GoogleErrorResponse(BaseModel):
    """
    Error body from Google's token endpoint.

    Example:
    {"error": "invalid_grant", "error_description": "Bad Request"}
    """
    error: str = "unknown_error"
    error_description: Optional[str] = None


# ---------------------------------------------------------------------------
# USER INFO
# ---------------------------------------------------------------------------

class GoogleUserInfo(BaseModel):
    """
    User information from Google's userinfo endpoint or a verified id_token.

    Example:
    {
        "sub": "123456789",
        "email": "user@gmail.com",
        "email_verified": true,
        "name": "Jan Kowalski",
        "picture": "https://lh3.googleusercontent.com/a/...",
        "locale": "pl"
    }
    """
    sub: str = Field(..., description="Unique Google user ID")
    email: Optional[str] = Field(None, description="User's email address")
    email_verified: Optional[bool] = Field(None, description="Is email verified?")
    name: Optional[str] = Field(None, description="User's display name")
    picture: Optional[str] = Field(None, description="Profile picture URL")
    locale: Optional[str] = Field(None, description="User's locale (e.g., 'en')")
