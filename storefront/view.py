# storefront/view.py
from enum import Enum

from .controllers.catalog import CatalogController
from .controllers.orders import OrderController
from .notify import ErrorBanner
from .security import IdentitySession, is_admin


class Tab(str, Enum):
    PRODUCTS = 'products'
    ORDERS = 'orders'


class ViewState:
    """Active tab and the role-derived affordances of the current session."""

    def __init__(
            self,
            session: IdentitySession,
            catalog: CatalogController,
            orders: OrderController,
            admin_role: str = 'ADMIN',
            banner: ErrorBanner | None = None,
    ):
        self.session = session
        self.catalog = catalog
        self.orders = orders
        self.admin_role = admin_role
        self.banner = banner or catalog.banner
        self.active_tab = Tab.PRODUCTS
        orders.is_visible = lambda: self.active_tab is Tab.ORDERS

    @property
    def is_admin(self) -> bool:
        return is_admin(self.session, self.admin_role)

    @property
    def username(self) -> str | None:
        return (self.session.token_parsed or {}).get('preferred_username')

    async def start(self) -> None:
        if self.session.authenticated:
            await self.catalog.refresh()

    async def select(self, tab: Tab | str) -> None:
        self.active_tab = Tab(tab)
        if self.active_tab is Tab.ORDERS:
            await self.orders.refresh()

    async def logout(self) -> None:
        await self.session.logout()
