"""
Google Environment Module - Google identity integration.

google/
├── __init__.py           # Module exports
└── auth/                 # Sign-in with Google
    ├── __init__.py
    ├── client.py         # Token exchange + ID token verification
    └── schemas.py        # Google response structures
"""

from app.environments.google.auth import GoogleAuthClient, FIXED_REDIRECT_URIS

__all__ = [
    "GoogleAuthClient",
    "FIXED_REDIRECT_URIS",
]
