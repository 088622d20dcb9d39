"""
Google OAuth Client - code exchange and ID token verification.

Key Features:
=============
1. Authorization-code → token exchange at Google's token endpoint
2. ID token verification (signature, issuer, audience, expiry) against
   Google's public certificates via google-auth
3. Userinfo lookup for token responses that carry no id_token
4. Classification of every failure into an ExchangeErrorKind

References:
===========
- OAuth 2.0: https://developers.google.com/identity/protocols/oauth2
- Token endpoint: https://oauth2.googleapis.com/token
- Userinfo: https://www.googleapis.com/oauth2/v3/userinfo
- ID tokens: https://developers.google.com/identity/sign-in/android/backend-auth
"""

import asyncio
import logging
from typing import Optional

import httpx
from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token
from pydantic import ValidationError

from app.environments.base import (
    ExchangeError,
    ExchangeErrorKind,
    Identity,
    IdentityProvider,
    OAuthTokens,
)
from app.environments.google.auth.schemas import (
    GOOGLE_ISSUERS,
    GoogleErrorResponse,
    GoogleTokenResponse,
    GoogleUserInfo,
)


logger = logging.getLogger("companion.environments.google.auth")


class CertificateRequest(google_requests.Request):
    """google-auth transport that fetches signing certificates with our timeout."""

    def __init__(self, timeout: float):
        super().__init__()
        self.timeout = timeout

    def __call__(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):
        return super().__call__(
            url,
            method=method,
            body=body,
            headers=headers,
            timeout=timeout if timeout is not None else self.timeout,
            **kwargs,
        )


class GoogleAuthClient(IdentityProvider):
    """
    Google OAuth 2.0 client for the mobile sign-in flow.

    Example Usage:
        client = GoogleAuthClient(client_id="...", client_secret="...")

        # Code path
        tokens = await client.exchange_code_for_tokens("4/0Ab...", "postmessage")
        identity = await client.verify_id_token(tokens.id_token)

        # Token path
        identity = await client.verify_id_token("eyJhbGciOiJSUzI1NiIs...")
    """

    provider_name = "google"

    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"

    # Tolerated clock drift when checking iat/exp of ID tokens
    CLOCK_SKEW_SECONDS = 10

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Google OAuth client.

        Args:
            client_id: Google OAuth Client ID (also the expected ID token audience)
            client_secret: Google OAuth Client Secret
            timeout: Seconds before a call to Google is abandoned
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self._transport = transport
        self._cert_request = CertificateRequest(timeout)

        if not self.client_id or not self.client_secret:
            logger.warning(
                "Google OAuth not configured. Set GOOGLE_CLIENT_ID and "
                "GOOGLE_CLIENT_SECRET in environment variables."
            )

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    # -------------------------------------------------------------------------
    # TOKEN EXCHANGE
    # -------------------------------------------------------------------------

    async def exchange_code_for_tokens(self, code: str, redirect_uri: str) -> OAuthTokens:
        """
        Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the mobile client
            redirect_uri: Must match the value the code was minted with

        Returns:
            OAuthTokens (id_token included when the openid scope was granted)

        Raises:
            ExchangeError: classified failure
        """
        if not self.client_id or not self.client_secret:
            raise ExchangeError(
                ExchangeErrorKind.UNAUTHORIZED_CLIENT,
                "Google OAuth client is not configured",
            )

        token_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
        }

        logger.info(f"Exchanging authorization code (redirect_uri={redirect_uri!r})")

        async with self._http() as client:
            try:
                response = await client.post(self.TOKEN_URL, data=token_data)
            except httpx.TimeoutException as e:
                logger.error(f"Timeout during token exchange: {e}")
                raise ExchangeError(ExchangeErrorKind.UPSTREAM_UNAVAILABLE, "Google token endpoint timed out")
            except httpx.RequestError as e:
                logger.error(f"Network error during token exchange: {e}")
                raise ExchangeError(ExchangeErrorKind.UPSTREAM_UNAVAILABLE, f"Network error: {e}")

        if response.status_code != 200:
            raise self._classify_token_error(response)

        try:
            token_response = GoogleTokenResponse(**response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unexpected token endpoint payload: {response.text}")
            raise ExchangeError(
                ExchangeErrorKind.EXCHANGE_FAILED,
                f"Malformed token response: {e}",
                upstream_status=response.status_code,
            )

        logger.info(
            "Successfully obtained Google tokens",
            extra={
                "has_id_token": token_response.id_token is not None,
                "expires_in": token_response.expires_in,
                "scopes": token_response.get_scopes_list(),
            },
        )

        return OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token,
            id_token=token_response.id_token,
            expires_at=token_response.get_expires_at(),
            scopes=token_response.get_scopes_list(),
        )

    @staticmethod
    def _classify_token_error(response: httpx.Response) -> ExchangeError:
        """Map a non-200 token endpoint response onto an ExchangeError."""
        # Full body stays in our logs; only the short description reaches clients
        logger.error(
            f"Token exchange failed: status={response.status_code} body={response.text}"
        )

        try:
            body = GoogleErrorResponse(**response.json())
        except (ValueError, ValidationError, TypeError):
            body = GoogleErrorResponse()

        status_code = response.status_code
        detail = body.error_description or body.error

        if status_code >= 500:
            kind = ExchangeErrorKind.UPSTREAM_UNAVAILABLE
        elif body.error == "redirect_uri_mismatch":
            kind = ExchangeErrorKind.REDIRECT_MISMATCH
        elif body.error == "invalid_grant":
            kind = ExchangeErrorKind.INVALID_GRANT
        elif status_code == 401 or body.error in ("invalid_client", "unauthorized_client"):
            kind = ExchangeErrorKind.UNAUTHORIZED_CLIENT
        else:
            kind = ExchangeErrorKind.EXCHANGE_FAILED

        return ExchangeError(
            kind,
            f"Token exchange failed: {body.error}",
            provider_detail=detail,
            upstream_status=status_code,
        )

    # -------------------------------------------------------------------------
    # ID TOKEN VERIFICATION
    # -------------------------------------------------------------------------

    async def verify_id_token(self, id_token: str) -> Identity:
        """
        Verify a Google ID token.

        Checks the RS256 signature against Google's certificates, the issuer,
        that the audience equals our client id, and expiry. google-auth is
        synchronous (it may fetch certificates), so it runs in a worker thread.

        Raises:
            ExchangeError(INVALID_TOKEN): verification failed
            ExchangeError(UPSTREAM_UNAVAILABLE): certificates could not be fetched
        """
        if not self.client_id:
            raise ExchangeError(
                ExchangeErrorKind.UNAUTHORIZED_CLIENT,
                "Google OAuth client is not configured",
            )

        try:
            claims = await asyncio.to_thread(
                google_id_token.verify_oauth2_token,
                id_token,
                self._cert_request,
                self.client_id,
                clock_skew_in_seconds=self.CLOCK_SKEW_SECONDS,
            )
        except google_auth_exceptions.TransportError as e:
            logger.error(f"Could not fetch Google certificates: {e}")
            raise ExchangeError(ExchangeErrorKind.UPSTREAM_UNAVAILABLE, "Google certificates unavailable")
        except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
            logger.info(f"ID token rejected: {e}")
            raise ExchangeError(
                ExchangeErrorKind.INVALID_TOKEN,
                "ID token verification failed",
                provider_detail=str(e),
            )

        # verify_oauth2_token already checks the issuer; kept explicit so a
        # library default change cannot widen what we accept
        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise ExchangeError(ExchangeErrorKind.INVALID_TOKEN, "Wrong token issuer")

        try:
            return self._identity_from_claims(claims)
        except ValidationError:
            raise ExchangeError(ExchangeErrorKind.INVALID_TOKEN, "ID token has no subject")

    # -------------------------------------------------------------------------
    # USER INFO
    # -------------------------------------------------------------------------

    async def get_user_info(self, access_token: str) -> Identity:
        """
        Get user identity from Google's userinfo endpoint.

        Used when a token response carries no id_token (openid scope absent).
        """
        logger.info("Fetching user info from Google")

        async with self._http() as client:
            try:
                response = await client.get(
                    self.USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
            except httpx.RequestError as e:
                logger.error(f"Network error fetching user info: {e}")
                raise ExchangeError(ExchangeErrorKind.UPSTREAM_UNAVAILABLE, f"Network error: {e}")

        if response.status_code != 200:
            logger.error(f"Failed to fetch user info: status={response.status_code} body={response.text}")
            if response.status_code >= 500:
                kind = ExchangeErrorKind.UPSTREAM_UNAVAILABLE
            elif response.status_code == 401:
                kind = ExchangeErrorKind.INVALID_TOKEN
            else:
                kind = ExchangeErrorKind.EXCHANGE_FAILED
            raise ExchangeError(kind, "Failed to fetch user info", upstream_status=response.status_code)

        try:
            return self._identity_from_claims(response.json())
        except (ValueError, ValidationError):
            raise ExchangeError(ExchangeErrorKind.EXCHANGE_FAILED, "Malformed userinfo response")

    @staticmethod
    def _identity_from_claims(claims: dict) -> Identity:
        google_user = GoogleUserInfo(**claims)
        return Identity(
            subject=google_user.sub,
            email=google_user.email,
            name=google_user.name,
            picture_url=google_user.picture,
            locale=google_user.locale,
        )
