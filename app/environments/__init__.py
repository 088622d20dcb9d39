"""
Environments Module - External identity-provider integrations.

environments/
├── __init__.py           # Module exports
├── base.py               # Identity types, provider contract, exchange errors
└── google/               # Sign-in with Google
    └── auth/             # Token exchange + ID token verification
"""

from app.environments.base import (
    ExchangeError,
    ExchangeErrorKind,
    Identity,
    IdentityProvider,
    OAuthTokens,
)

__all__ = [
    "ExchangeError",
    "ExchangeErrorKind",
    "Identity",
    "IdentityProvider",
    "OAuthTokens",
]
