"""
Google Auth Module - sign-in with Google for the mobile client.

Two inputs are supported:
1. Authorization code from a server-auth-code flow → exchanged at the
   token endpoint, then the returned id_token is verified
2. Raw ID token → verified directly against Google's certificates
"""

from app.environments.google.auth.client import GoogleAuthClient
from app.environments.google.auth.schemas import (
    FIXED_REDIRECT_URIS,
    GOOGLE_ISSUERS,
    GoogleErrorResponse,
    GoogleTokenResponse,
    GoogleUserInfo,
)

__all__ = [
    "GoogleAuthClient",
    "GoogleErrorResponse",
    "GoogleTokenResponse",
    "GoogleUserInfo",
    "FIXED_REDIRECT_URIS",
    "GOOGLE_ISSUERS",
]
