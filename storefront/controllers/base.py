# storefront/controllers/base.py
from enum import Enum

from ..client import ApiClient
from ..errors import ApiError
from ..notify import ErrorBanner, Notifier


class LoadState(str, Enum):
    IDLE = 'idle'
    LOADING = 'loading'
    LOADED = 'loaded'
    ERROR = 'error'


class Controller:
    def __init__(self, api: ApiClient, notifier: Notifier, banner: ErrorBanner | None = None):
        self.api = api
        self.notifier = notifier
        self.banner = banner or ErrorBanner()
        self.state = LoadState.IDLE
        self.error: ApiError | None = None

    def _loaded(self) -> None:
        self.state = LoadState.LOADED
        self.error = None
        self.banner.clear()

    def _failed(self, error: ApiError, *, loading: bool = False) -> None:
        if loading:
            self.state = LoadState.ERROR
        self.error = error
        self.banner.show(error)
