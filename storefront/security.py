# storefront/security.py
import asyncio
import logging
import time
from http import HTTPStatus
from typing import Protocol

import httpx
from jwt import DecodeError, decode

from .errors import AuthenticationError, TokenRefreshError
from .schemas import Token

logger = logging.getLogger(__name__)


class IdentitySession(Protocol):
    """What the client reads from the identity provider."""

    authenticated: bool
    token: str | None
    token_parsed: dict | None

    def is_token_expired(self, min_validity: int = 0) -> bool: ...

    async def update_token(self, min_validity: int = 5) -> bool: ...

    async def logout(self) -> None: ...


def has_role(token_parsed: dict | None, role: str) -> bool:
    realm_access = (token_parsed or {}).get('realm_access') or {}
    return role in (realm_access.get('roles') or [])


def is_admin(session: IdentitySession, admin_role: str = 'ADMIN') -> bool:
    """
    Whether admin affordances are shown.

    Only a UI gate: the backend enforces roles on every privileged endpoint,
    so this never replaces a server call.
    """
    if not session.authenticated:
        return False
    return has_role(session.token_parsed, admin_role)


# --------------------------------------------------------------------------
# KEYCLOAK (OPENID CONNECT) SESSION
# --------------------------------------------------------------------------

class KeycloakSession:
    """Session against a Keycloak realm using the password and refresh grants."""

    def __init__(
            self,
            server_url: str,
            realm: str,
            client_id: str,
            http: httpx.AsyncClient | None = None,
    ):
        self.server_url = server_url.rstrip('/')
        self.realm = realm
        self.client_id = client_id
        self.token: str | None = None
        self.refresh_token: str | None = None
        self.token_parsed: dict | None = None
        self._http = http or httpx.AsyncClient(timeout=10)

    @property
    def openid_url(self) -> str:
        return f'{self.server_url}/realms/{self.realm}/protocol/openid-connect'

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    def is_token_expired(self, min_validity: int = 0) -> bool:
        if not self.token_parsed or 'exp' not in self.token_parsed:
            return True
        expires_in = self.token_parsed['exp'] - time.time() - min_validity
        return expires_in < 0

    async def login(self, username: str, password: str) -> None:
        token = await self._request_token({
            'grant_type': 'password',
            'client_id': self.client_id,
            'username': username,
            'password': password,
        }, AuthenticationError)
        self._store(token)
        logger.info('Logged in as %s', self.token_parsed.get('preferred_username'))

    async def update_token(self, min_validity: int = 5) -> bool:
        """Refreshes the access token if it expires within `min_validity` seconds."""
        if self.token_parsed and not self.is_token_expired(min_validity):
            return False
        if not self.refresh_token:
            raise TokenRefreshError('Not authenticated')

        try:
            token = await self._request_token({
                'grant_type': 'refresh_token',
                'client_id': self.client_id,
                'refresh_token': self.refresh_token,
            }, TokenRefreshError)
            self._store(token)
        except TokenRefreshError:
            self._clear()
            raise
        except AuthenticationError as exc:
            # 200 with an access token we cannot decode
            self._clear()
            raise TokenRefreshError('Identity provider returned an unusable token') from exc

        logger.info('Access token refreshed')
        return True

    async def logout(self) -> None:
        """Ends the realm session. Local tokens are dropped even if the call fails."""
        refresh_token = self.refresh_token
        self._clear()
        if not refresh_token:
            return
        response = await self._http.post(
            f'{self.openid_url}/logout',
            data={'client_id': self.client_id, 'refresh_token': refresh_token},
        )
        if response.status_code not in (HTTPStatus.OK, HTTPStatus.NO_CONTENT):
            logger.warning('Logout returned %s', response.status_code)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request_token(self, data: dict, error: type[AuthenticationError]) -> Token:
        # Connection failures surface as httpx.RequestError
        response = await self._http.post(f'{self.openid_url}/token', data=data)

        if response.status_code != HTTPStatus.OK:
            detail = 'Identity provider rejected the request'
            try:
                detail = response.json().get('error_description', detail)
            except ValueError:
                pass
            raise error(f'{detail} ({response.status_code})')

        try:
            return Token.model_validate(response.json())
        except ValueError as exc:
            raise error('Malformed token response') from exc

    def _store(self, token: Token) -> None:
        try:
            claims = decode(token.access_token, options={'verify_signature': False})
        except DecodeError as exc:
            raise AuthenticationError('Malformed access token') from exc
        self.token = token.access_token
        self.refresh_token = token.refresh_token or self.refresh_token
        self.token_parsed = claims

    def _clear(self) -> None:
        self.token = None
        self.refresh_token = None
        self.token_parsed = None


# --------------------------------------------------------------------------
# AUTH GATE (REQUEST MIDDLEWARE)
# --------------------------------------------------------------------------

class AuthGate(httpx.Auth):
    """
    Attaches a fresh bearer token to every outgoing request.

    If the token expires within `leeway` seconds the request is held while the
    session refreshes for at least `min_validity` seconds. A failed refresh
    propagates and the request is never sent. Concurrent refreshes share one
    lock, so only the first caller hits the identity provider.
    """

    def __init__(self, session: IdentitySession, leeway: int = 5, min_validity: int = 30):
        self.session = session
        self.leeway = leeway
        self.min_validity = min_validity
        self._refresh_lock = asyncio.Lock()

    async def ensure_fresh(self) -> None:
        if not self.session.is_token_expired(self.leeway):
            return
        async with self._refresh_lock:
            if self.session.is_token_expired(self.leeway):
                logger.debug('Token expires within %ss, refreshing', self.leeway)
                await self.session.update_token(self.min_validity)

    async def async_auth_flow(self, request: httpx.Request):
        await self.ensure_fresh()
        request.headers['Authorization'] = f'Bearer {self.session.token}'
        yield request

    def sync_auth_flow(self, request: httpx.Request):
        raise RuntimeError('AuthGate requires httpx.AsyncClient')
