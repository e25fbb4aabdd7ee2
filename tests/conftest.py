"""Pytest fixtures: fake identity session, in-memory backend and a wired storefront."""
import asyncio
import time

import httpx
import jwt
import pytest
import pytest_asyncio

from storefront.errors import TokenRefreshError
from storefront.main import build_storefront
from storefront.settings import Settings

from .backend import ALGORITHM, SECRET_KEY, BackendState, create_backend


class FakeSession:
    """Stands in for the identity provider; issues tokens the fake backend accepts."""

    def __init__(self, username='alice', roles=('USER',), ttl=300, secret=SECRET_KEY):
        self.username = username
        self.roles = list(roles)
        self.secret = secret
        self.refresh_ok = True
        self.refresh_calls: list[int] = []
        self.logged_out = False
        self.logout_error: Exception | None = None
        self.token = None
        self.token_parsed = None
        self.issue(ttl)

    @classmethod
    def anonymous(cls):
        session = cls()
        session.token = None
        session.token_parsed = None
        return session

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    def issue(self, ttl: int) -> None:
        self.token_parsed = {
            'exp': int(time.time()) + ttl,
            'preferred_username': self.username,
            'realm_access': {'roles': self.roles},
        }
        self.token = jwt.encode(self.token_parsed, self.secret, algorithm=ALGORITHM)

    def is_token_expired(self, min_validity: int = 0) -> bool:
        if not self.token_parsed:
            return True
        return self.token_parsed['exp'] - time.time() - min_validity < 0

    async def update_token(self, min_validity: int = 5) -> bool:
        self.refresh_calls.append(min_validity)
        await asyncio.sleep(0)
        if not self.refresh_ok:
            raise TokenRefreshError('refresh rejected')
        self.issue(300)
        return True

    async def logout(self) -> None:
        self.logged_out = True
        self.token = None
        self.token_parsed = None
        if self.logout_error:
            raise self.logout_error


class RecordingNotifier:
    def __init__(self, answer: bool = True):
        self.answer = answer
        self.confirms: list[str] = []
        self.alerts: list[str] = []

    def confirm(self, message: str) -> bool:
        self.confirms.append(message)
        return self.answer

    def alert(self, message: str) -> None:
        self.alerts.append(message)


@pytest.fixture
def settings() -> Settings:
    return Settings(API_BASE_URL='http://shop.test', _env_file=None)


@pytest.fixture
def backend_state() -> BackendState:
    state = BackendState()
    state.seed_product(1, 'Keyboard', 49.5, 10, 'Mechanical')
    state.seed_product(3, 'Mouse', 19.5, 25, 'Wireless')
    state.seed_product(5, 'Monitor', 199.0, 4, '27 inch')
    state.seed_product(7, 'Cable', 5.0, 100)
    return state


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def admin_session() -> FakeSession:
    return FakeSession(username='admin', roles=('USER', 'ADMIN'))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture
async def make_store(settings, backend_state, notifier):
    stores = []

    def factory(session, transport=None):
        transport = transport or httpx.ASGITransport(app=create_backend(backend_state))
        store = build_storefront(settings, session, notifier, transport=transport)
        stores.append(store)
        return store

    yield factory

    for store in stores:
        await store.aclose()


@pytest_asyncio.fixture
async def store(make_store, session):
    return make_store(session)


@pytest_asyncio.fixture
async def admin_store(make_store, admin_session):
    return make_store(admin_session)
