# storefront/errors.py
from http import HTTPStatus


class AuthenticationError(Exception):
    """The identity provider rejected a login or token request."""


class TokenRefreshError(AuthenticationError):
    """The identity provider refused to refresh the session."""


class ApiError(Exception):
    message = 'Error'

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message or self.message)


class Unauthorized(ApiError):
    message = 'Unauthorized (401)'

    def __init__(self):
        super().__init__(status_code=HTTPStatus.UNAUTHORIZED)


class Forbidden(ApiError):
    message = 'Access Denied (403)'

    def __init__(self):
        super().__init__(status_code=HTTPStatus.FORBIDDEN)


class ServerError(ApiError):
    def __init__(self, status_code: int):
        super().__init__(f'Error: {status_code}', status_code=status_code)


class NetworkError(ApiError):
    message = 'Network Error'

    def __init__(self):
        super().__init__()


def classify_status(status_code: int) -> ApiError:
    """Maps a failed response status onto the client's error taxonomy."""
    if status_code == HTTPStatus.UNAUTHORIZED:
        return Unauthorized()
    if status_code == HTTPStatus.FORBIDDEN:
        return Forbidden()
    return ServerError(status_code)
