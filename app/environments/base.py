"""
Base classes and interfaces for identity-provider integrations.

The rest of the application only sees the types defined here. Provider
modules (currently Google) translate their HTTP/SDK failures into
ExchangeError with an ExchangeErrorKind, so routes never inspect httpx or
google-auth exception shapes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# EXCHANGE ERRORS
# ---------------------------------------------------------------------------


class ExchangeErrorKind(str, Enum):
    """Why a credential exchange failed."""
    MISSING_CREDENTIAL = "missing_code"
    AMBIGUOUS_CREDENTIAL = "ambiguous_credential"
    INVALID_GRANT = "invalid_grant"
    REDIRECT_MISMATCH = "redirect_uri_mismatch"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    INVALID_TOKEN = "invalid_token"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    EXCHANGE_FAILED = "oauth_exchange_failed"

    @property
    def retryable(self) -> bool:
        return self is ExchangeErrorKind.UPSTREAM_UNAVAILABLE


class ExchangeError(Exception):
    """
    Raised by identity providers when a code or token cannot be turned
    into a verified identity.

    Attributes:
        kind: Classified failure
        provider_detail: Provider's short error description, safe to show
        upstream_status: HTTP status returned by the provider, if any
    """

    def __init__(
        self,
        kind: ExchangeErrorKind,
        message: str = "",
        provider_detail: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ):
        super().__init__(message or kind.value)
        self.kind = kind
        self.provider_detail = provider_detail
        self.upstream_status = upstream_status


# ---------------------------------------------------------------------------
# DATA STRUCTURES
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identity:
    """
    Verified user identity from an identity provider.

    `subject` is the provider's stable account id (Google's `sub`); it is
    the owner key for notes and sessions.
    """
    subject: str
    email: Optional[str] = None
    name: Optional[str] = None
    picture_url: Optional[str] = None
    locale: Optional[str] = None


@dataclass
class OAuthTokens:
    """Token endpoint response, provider-agnostic."""
    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    scopes: Optional[List[str]] = None
    extra_data: Optional[Dict[str, Any]] = None


# ---------------------------------------------------------------------------
# ABSTRACT BASE CLASS
# ---------------------------------------------------------------------------


class IdentityProvider(ABC):
    """
    Contract for identity providers used by the credential exchanger.

    Every method raises ExchangeError on failure.
    """

    provider_name: str = ""

    @abstractmethod
    async def exchange_code_for_tokens(self, code: str, redirect_uri: str) -> OAuthTokens:
        """Exchange an authorization code at the provider's token endpoint."""

    @abstractmethod
    async def verify_id_token(self, id_token: str) -> Identity:
        """Verify a signed ID token and return the identity it asserts."""

    @abstractmethod
    async def get_user_info(self, access_token: str) -> Identity:
        """Fetch the identity behind an access token."""
