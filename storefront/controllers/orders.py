# storefront/controllers/orders.py
import logging
from typing import Callable

from ..cart import CartStore
from ..client import ApiClient
from ..errors import ApiError
from ..notify import ErrorBanner, Notifier
from ..schemas import Order
from .base import Controller, LoadState

logger = logging.getLogger(__name__)


class OrderController(Controller):
    def __init__(
            self,
            api: ApiClient,
            cart: CartStore,
            notifier: Notifier,
            banner: ErrorBanner | None = None,
    ):
        super().__init__(api, notifier, banner)
        self.cart = cart
        self.orders: list[Order] = []
        self.selected: Order | None = None
        # Set by ViewState; decides whether a placed order re-fetches the list
        self.is_visible: Callable[[], bool] = lambda: False

    async def refresh(self) -> bool:
        self.state = LoadState.LOADING
        try:
            orders = await self.api.list_orders()
        except ApiError as error:
            self._failed(error, loading=True)
            return False
        self.orders = orders
        self._loaded()
        return True

    async def open(self, order_id: int) -> Order | None:
        try:
            self.selected = await self.api.get_order(order_id)
        except ApiError as error:
            self._failed(error)
            return None
        return self.selected

    async def place_order(self) -> bool:
        """
        Submits the cart as one order.

        An empty cart sends nothing. On failure the cart is left as it was
        so the user can try again.
        """
        lines = self.cart.lines()
        if not lines:
            return False

        try:
            await self.api.create_order(lines)
        except ApiError as error:
            logger.info('Order with %d line(s) failed: %s', len(lines), error)
            self._failed(error)
            self.notifier.alert('Failed to place order')
            return False

        logger.info('Order with %d line(s) placed', len(lines))
        self.notifier.alert('Order placed successfully!')
        self.cart.clear()
        if self.is_visible():
            await self.refresh()
        return True
