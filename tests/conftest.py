"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test database (SQLite in-memory for speed)
- Fake Google identity provider and fake generation provider
- Test client (FastAPI TestClient) with dependencies overridden
- Session/authentication helpers
"""

import asyncio
from datetime import timedelta
from typing import Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.ai.providers.base import AIProvider, AIResponse, ProviderType
from app.core.config import RedirectMode, SessionBackend, Settings
from app.core.security import SessionManager
from app.db.base import Base
from app.db.session import get_db
from app.deps import (
    get_ai_provider,
    get_credential_exchanger,
    get_session_manager,
    get_settings,
)
from app.environments.base import (
    ExchangeError,
    ExchangeErrorKind,
    Identity,
    IdentityProvider,
    OAuthTokens,
)
from app.main import app
from app.services.credential_exchanger import CredentialExchanger
from app.services.session_service import SessionService


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# StaticPool keeps the same in-memory connection across all operations

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_SECRET_KEY = "test-secret-key-not-for-production"

ALICE = Identity(
    subject="google-sub-alice",
    email="alice@example.com",
    name="Alice",
    picture_url="https://example.com/alice.png",
    locale="en",
)
BOB = Identity(subject="google-sub-bob", email="bob@example.com", name="Bob")


# ---------------------------------------------------------------------------
# FAKE COLLABORATORS
# ---------------------------------------------------------------------------

class FakeGoogleProvider(IdentityProvider):
    """
    Stands in for GoogleAuthClient.

    Codes:
        "alice-code"     → tokens whose id_token belongs to Alice
        "userinfo-code"  → tokens without id_token (userinfo fallback)
        "expired123"     → invalid_grant
        "bad-client"     → unauthorized_client
        "outage"         → upstream unavailable
    ID tokens:
        "alice-id-token", "bob-id-token" → valid; anything else → invalid_token
    """

    provider_name = "fake-google"

    def __init__(self):
        self.exchanged: List[tuple] = []

    async def exchange_code_for_tokens(self, code: str, redirect_uri: str) -> OAuthTokens:
        self.exchanged.append((code, redirect_uri))
        if code == "alice-code":
            return OAuthTokens(access_token="ya29.alice", id_token="alice-id-token")
        if code == "userinfo-code":
            return OAuthTokens(access_token="ya29.bob")
        if code == "expired123":
            raise ExchangeError(ExchangeErrorKind.INVALID_GRANT, provider_detail="Bad Request")
        if code == "bad-client":
            raise ExchangeError(ExchangeErrorKind.UNAUTHORIZED_CLIENT, provider_detail="Unauthorized")
        if code == "outage":
            raise ExchangeError(ExchangeErrorKind.UPSTREAM_UNAVAILABLE, "Google token endpoint timed out")
        raise ExchangeError(ExchangeErrorKind.INVALID_GRANT, provider_detail="Malformed auth code.")

    async def verify_id_token(self, id_token: str) -> Identity:
        if id_token == "alice-id-token":
            return ALICE
        if id_token == "bob-id-token":
            return BOB
        raise ExchangeError(ExchangeErrorKind.INVALID_TOKEN, provider_detail="Token used too late")

    async def get_user_info(self, access_token: str) -> Identity:
        if access_token == "ya29.bob":
            return BOB
        raise ExchangeError(ExchangeErrorKind.INVALID_TOKEN)


class FakeAIProvider(AIProvider):
    """Records prompts and returns a canned answer, optionally after a delay."""

    provider_type = ProviderType.GEMINI

    def __init__(self, content: str = "Answer from notes.", delay: float = 0.0, fail: Optional[str] = None):
        self.model = "fake-model"
        self.content = content
        self.delay = delay
        self.fail = fail
        self.prompts: List[str] = []
        self.calls: List[dict] = []

    async def generate(self, prompt, system_prompt=None, temperature=0.7, max_tokens=1024, **kwargs):
        self.prompts.append(prompt)
        self.calls.append(
            {"system_prompt": system_prompt, "temperature": temperature, "max_tokens": max_tokens}
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            return self._create_error_response(self.fail, self.model)
        return AIResponse(content=self.content, provider=self.provider_type, model=self.model)


# ---------------------------------------------------------------------------
# DATABASE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Create a fresh database for each test function.

    - Creates all tables
    - Yields a session for the test
    - Drops all tables after test (clean slate)
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# ---------------------------------------------------------------------------
# COLLABORATOR FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        SESSION_SECRET_KEY=TEST_SECRET_KEY,
        SESSION_BACKEND=SessionBackend.DATABASE,
        GOOGLE_CLIENT_ID="test-client-id.apps.googleusercontent.com",
        GOOGLE_CLIENT_SECRET="test-client-secret",
        GOOGLE_REDIRECT_MODE=RedirectMode.SERVER_AUTH_CODE,
        AI_REQUEST_TIMEOUT=2.0,
        NOTES_PAGE_SIZE=50,
        ASK_NOTES_LIMIT=50,
        ASK_CONTEXT_CHAR_LIMIT=12000,
    )


@pytest.fixture
def session_manager() -> SessionManager:
    return SessionManager(secret_key=TEST_SECRET_KEY, expire_delta=timedelta(days=30))


@pytest.fixture
def google_provider() -> FakeGoogleProvider:
    return FakeGoogleProvider()


@pytest.fixture
def exchanger(google_provider: FakeGoogleProvider) -> CredentialExchanger:
    return CredentialExchanger(provider=google_provider, redirect_mode=RedirectMode.SERVER_AUTH_CODE)


@pytest.fixture
def ai_provider() -> FakeAIProvider:
    return FakeAIProvider()


@pytest.fixture(scope="function")
def client(
    db: Session,
    test_settings: Settings,
    session_manager: SessionManager,
    exchanger: CredentialExchanger,
    ai_provider: FakeAIProvider,
) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database and fake providers.

    Overrides dependencies so no request ever leaves the process.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_session_manager] = lambda: session_manager
    app.dependency_overrides[get_credential_exchanger] = lambda: exchanger
    app.dependency_overrides[get_ai_provider] = lambda: ai_provider

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# SESSION FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def alice_token(db: Session, session_manager: SessionManager) -> str:
    """A recorded, valid session token for Alice."""
    return SessionService(db, session_manager, SessionBackend.DATABASE).start(ALICE).token


@pytest.fixture
def bob_token(db: Session, session_manager: SessionManager) -> str:
    return SessionService(db, session_manager, SessionBackend.DATABASE).start(BOB).token


@pytest.fixture
def auth_headers(alice_token: str) -> dict:
    return {"Authorization": f"Bearer {alice_token}"}


@pytest.fixture
def bob_headers(bob_token: str) -> dict:
    return {"Authorization": f"Bearer {bob_token}"}
