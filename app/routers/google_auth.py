"""
Google Auth Router - sign in with Google.

Endpoints:
==========
- POST /auth/google/exchange → code or ID token in, session token out

Flow:
=====
1. The mobile app signs the user in with Google and receives either a
   server auth code or an ID token
2. It POSTs that value here
3. The backend verifies it with Google (CredentialExchanger)
4. A session token is issued and returned with the user's profile
5. The app sends `Authorization: Bearer <sessionToken>` from then on
"""

import asyncio
import logging

from fastapi import APIRouter, Depends

from app.core.errors import AppError, AuthError, ClientError, UpstreamError
from app.deps import get_credential_exchanger, get_session_service
from app.environments.base import ExchangeError, ExchangeErrorKind
from app.schemas.auth import GoogleExchangeRequest, GoogleExchangeResponse, UserOut
from app.services.credential_exchanger import CredentialExchanger
from app.services.session_service import SessionService


logger = logging.getLogger("companion.routers.google_auth")

router = APIRouter(prefix="/auth/google", tags=["google-auth"])


# ---------------------------------------------------------------------------
# ERROR MAPPING
# ---------------------------------------------------------------------------
# One HTTP status + code per failure kind. 502 is the only retryable one.
EXCHANGE_ERRORS = {
    ExchangeErrorKind.MISSING_CREDENTIAL: ClientError,
    ExchangeErrorKind.AMBIGUOUS_CREDENTIAL: ClientError,
    ExchangeErrorKind.INVALID_GRANT: ClientError,
    ExchangeErrorKind.REDIRECT_MISMATCH: ClientError,
    ExchangeErrorKind.UNAUTHORIZED_CLIENT: AuthError,
    ExchangeErrorKind.INVALID_TOKEN: AuthError,
    ExchangeErrorKind.UPSTREAM_UNAVAILABLE: UpstreamError,
    ExchangeErrorKind.EXCHANGE_FAILED: UpstreamError,
}


def exchange_error_to_app_error(exc: ExchangeError) -> AppError:
    """Translate an exchanger failure into the HTTP error taxonomy."""
    error_class = EXCHANGE_ERRORS[exc.kind]
    return error_class(
        message=str(exc),
        error=exc.kind.value,
        detail=exc.provider_detail or str(exc),
    )


# ---------------------------------------------------------------------------
# POST /auth/google/exchange
# ---------------------------------------------------------------------------

@router.post("/exchange", response_model=GoogleExchangeResponse)
async def exchange(
    payload: GoogleExchangeRequest,
    exchanger: CredentialExchanger = Depends(get_credential_exchanger),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Exchange a Google authorization code or ID token for a session.

    Returns:
        user, sessionToken, expiresAt and (code path only) Google's accessToken

    Raises:
        400 missing_code / ambiguous_credential / invalid_grant / redirect_uri_mismatch
        401 unauthorized_client / invalid_token
        502 upstream_unavailable / oauth_exchange_failed
    """
    logger.info(
        "POST /auth/google/exchange "
        f"(code={'yes' if payload.code else 'no'}, id_token={'yes' if payload.id_token else 'no'})"
    )

    try:
        result = await exchanger.exchange(
            code=payload.code,
            id_token=payload.id_token,
            redirect_uri=payload.redirect_uri,
        )
    except ExchangeError as e:
        logger.warning(f"Exchange failed: kind={e.kind.value} upstream_status={e.upstream_status}")
        raise exchange_error_to_app_error(e)

    issued = await asyncio.to_thread(sessions.start, result.identity)
    identity = result.identity

    return GoogleExchangeResponse(
        user=UserOut(
            sub=identity.subject,
            email=identity.email,
            name=identity.name,
            picture=identity.picture_url,
            locale=identity.locale,
        ),
        session_token=issued.token,
        expires_at=issued.claims.expires_at,
        access_token=result.access_token,
    )
