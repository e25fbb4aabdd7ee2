# storefront/notify.py
from typing import Protocol

from .errors import ApiError


class Notifier(Protocol):
    def confirm(self, message: str) -> bool: ...

    def alert(self, message: str) -> None: ...


class ConsoleNotifier:
    """Blocking confirm/alert dialogs on the terminal."""

    def confirm(self, message: str) -> bool:
        answer = input(f'{message} [y/N] ')
        return answer.strip().lower() in ('y', 'yes')

    def alert(self, message: str) -> None:
        print(f'>> {message}')


class ErrorBanner:
    """Most recent failure, shown above the active tab."""

    def __init__(self) -> None:
        self.error: ApiError | None = None

    def show(self, error: ApiError) -> None:
        self.error = error

    def clear(self) -> None:
        self.error = None

    @property
    def message(self) -> str | None:
        return str(self.error) if self.error else None
