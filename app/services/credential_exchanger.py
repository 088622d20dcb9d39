"""
Credential Exchanger - turns a mobile client's Google credential into a
verified Identity.

Inputs (exactly one):
- code:     authorization code from a server-auth-code flow
- id_token: raw Google ID token

The redirect value sent with a code is chosen by the deployment's
RedirectMode, never guessed per request.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.core.config import RedirectMode
from app.environments.base import (
    ExchangeError,
    ExchangeErrorKind,
    Identity,
    IdentityProvider,
)
from app.environments.google.auth.schemas import FIXED_REDIRECT_URIS

logger = logging.getLogger("companion.auth.exchanger")


@dataclass(frozen=True)
class ExchangeResult:
    """
    Outcome of a successful exchange.

    access_token is only set on the code path; it is handed back to the
    client for its own provider calls and never stored.
    """
    identity: Identity
    access_token: Optional[str] = None


class CredentialExchanger:
    """Front door of the sign-in flow."""

    def __init__(
        self,
        provider: IdentityProvider,
        redirect_mode: RedirectMode = RedirectMode.SERVER_AUTH_CODE,
        redirect_uri: str = "",
    ):
        if redirect_mode is RedirectMode.WEB_REDIRECT and not redirect_uri:
            raise ValueError("GOOGLE_REDIRECT_URI is required in web_redirect mode")
        self.provider = provider
        self.redirect_mode = redirect_mode
        self._configured_redirect_uri = redirect_uri

    def resolve_redirect_uri(self, requested: Optional[str] = None) -> str:
        """
        Pick the redirect value for the token endpoint.

        In web_redirect mode a client-supplied value must equal the configured
        one; a mismatch would only be rejected by Google after a round trip.
        """
        if self.redirect_mode is RedirectMode.WEB_REDIRECT:
            if requested and requested != self._configured_redirect_uri:
                raise ExchangeError(
                    ExchangeErrorKind.REDIRECT_MISMATCH,
                    "Presented redirect URI does not match the registered one",
                    provider_detail="redirect_uri does not match the registered value",
                )
            return self._configured_redirect_uri

        if requested:
            logger.info(
                f"Ignoring client redirectUri in {self.redirect_mode.value} mode"
            )
        return FIXED_REDIRECT_URIS[self.redirect_mode]

    async def exchange(
        self,
        code: Optional[str] = None,
        id_token: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ) -> ExchangeResult:
        """
        Verify one credential and return the identity behind it.

        Raises:
            ExchangeError: MISSING_CREDENTIAL / AMBIGUOUS_CREDENTIAL for bad
                input, otherwise whatever the provider classified
        """
        code = (code or "").strip()
        id_token = (id_token or "").strip()

        if code and id_token:
            raise ExchangeError(
                ExchangeErrorKind.AMBIGUOUS_CREDENTIAL,
                "Send either code or idToken, not both",
            )
        if not code and not id_token:
            raise ExchangeError(
                ExchangeErrorKind.MISSING_CREDENTIAL,
                "An authorization code or ID token is required",
            )

        if id_token:
            identity = await self.provider.verify_id_token(id_token)
            logger.info(f"Verified ID token for sub={identity.subject}")
            return ExchangeResult(identity=identity)

        tokens = await self.provider.exchange_code_for_tokens(
            code, self.resolve_redirect_uri(redirect_uri)
        )

        if tokens.id_token:
            identity = await self.provider.verify_id_token(tokens.id_token)
        else:
            # No openid scope granted, fall back to userinfo
            identity = await self.provider.get_user_info(tokens.access_token)

        logger.info(f"Exchanged authorization code for sub={identity.subject}")
        return ExchangeResult(identity=identity, access_token=tokens.access_token)
