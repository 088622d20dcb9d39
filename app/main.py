"""
Main application entry point - FastAPI app instance and configuration.
This is where the ASGI application is created and configured.
Run with: uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.ai.providers.gemini import GeminiProvider
from app.core.config import Settings, settings as default_settings
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.core.security import build_session_manager
from app.db.base import Base
from app.db.session import build_engine, build_session_factory
from app.environments.google import GoogleAuthClient
from app.routers import ask, auth, google_auth, notes
from app.schemas.common import OkResponse
from app.services.credential_exchanger import CredentialExchanger

from app import models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger("companion.main")


def build_state(app: FastAPI, settings: Settings) -> None:
    """
    Build the process-wide collaborators once and park them on app.state.

    All of them are read-only after this point; requests only read them.
    """
    app.state.session_manager = build_session_manager(
        secret_key=settings.SESSION_SECRET_KEY,
        algorithm=settings.SESSION_ALGORITHM,
        expire_days=settings.SESSION_EXPIRE_DAYS,
    )

    app.state.credential_exchanger = CredentialExchanger(
        provider=GoogleAuthClient(
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            timeout=settings.GOOGLE_HTTP_TIMEOUT,
        ),
        redirect_mode=settings.GOOGLE_REDIRECT_MODE,
        redirect_uri=settings.GOOGLE_REDIRECT_URI,
    )

    app.state.ai_provider = GeminiProvider(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    Every request dependency reads the settings, engine and session factory
    of the app it is served by, so two apps built from different Settings
    never share state.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)
    engine = build_engine(settings.DATABASE_URL, settings.DB_STATEMENT_TIMEOUT_MS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        build_state(app, settings)

        if settings.DB_CREATE_TABLES:
            logger.warning("DB_CREATE_TABLES is on; creating missing tables (development only)")
            Base.metadata.create_all(bind=engine)

        logger.info(
            f"{settings.APP_NAME} started "
            f"(redirect_mode={settings.GOOGLE_REDIRECT_MODE.value}, "
            f"session_backend={settings.SESSION_BACKEND.value}, model={settings.GEMINI_MODEL})"
        )
        yield
        logger.info(f"{settings.APP_NAME} shutting down")
        engine.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # -----------------------------------------------------------------------
    # CORS MIDDLEWARE
    # -----------------------------------------------------------------------
    # Mobile clients don't need CORS; the open default serves browser tools.
    # Credentials travel in the Authorization header, never in cookies.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # -----------------------------------------------------------------------
    # REGISTER ROUTERS
    # -----------------------------------------------------------------------
    # google_auth.router: /auth/google/exchange
    # auth.router:        /auth/me, /auth/logout
    # notes.router:       /api/notes CRUD
    # ask.router:         /api/ask
    app.include_router(google_auth.router)
    app.include_router(auth.router)
    app.include_router(notes.router)
    app.include_router(ask.router)

    # -----------------------------------------------------------------------
    # HEALTH CHECK ENDPOINT
    # -----------------------------------------------------------------------
    @app.get("/health", tags=["health"], response_model=OkResponse)
    @app.get("/healthz", tags=["health"], response_model=OkResponse, include_in_schema=False)
    def health_check():
        """
        Liveness check. Does NOT check database connectivity.

        Returns:
            {"ok": true}
        """
        return OkResponse()

    return app


app = create_app()
