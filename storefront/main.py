# storefront/main.py
import argparse
import asyncio
import getpass
import logging
import shlex
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

import httpx

from .cart import CartStore
from .client import ApiClient
from .controllers.catalog import CatalogController
from .controllers.orders import OrderController
from .errors import AuthenticationError
from .notify import ConsoleNotifier, ErrorBanner, Notifier
from .schemas import ProductDraft
from .security import AuthGate, IdentitySession, KeycloakSession
from .settings import Settings
from .view import Tab, ViewState

logger = logging.getLogger(__name__)


@dataclass
class Storefront:
    session: IdentitySession
    http: httpx.AsyncClient
    api: ApiClient
    cart: CartStore
    catalog: CatalogController
    orders: OrderController
    view: ViewState

    async def aclose(self) -> None:
        await self.http.aclose()


def build_storefront(
        settings: Settings,
        session: IdentitySession,
        notifier: Notifier,
        transport: httpx.AsyncBaseTransport | None = None,
) -> Storefront:
    """Wires the client together around one identity session."""
    gate = AuthGate(
        session,
        leeway=settings.TOKEN_LEEWAY_SECONDS,
        min_validity=settings.TOKEN_MIN_VALIDITY_SECONDS,
    )
    # No timeout: a hung request leaves its operation in 'loading'
    http = httpx.AsyncClient(base_url=settings.API_BASE_URL, timeout=None, transport=transport)
    api = ApiClient(http, gate)
    cart = CartStore()
    banner = ErrorBanner()
    catalog = CatalogController(api, cart, notifier, banner)
    orders = OrderController(api, cart, notifier, banner)
    view = ViewState(session, catalog, orders, admin_role=settings.ADMIN_ROLE, banner=banner)
    return Storefront(session, http, api, cart, catalog, orders, view)


# --------------------------------------------------------------------------
# CONSOLE RENDERING
# --------------------------------------------------------------------------

def render(store: Storefront) -> None:
    view = store.view
    badge = ' [ADMIN MODE]' if view.is_admin else ''
    print(f'\n=== Microservices Shop === {view.username or ""}{badge}')
    if view.banner.message:
        print(f'!! {view.banner.message}')

    if view.active_tab is Tab.PRODUCTS:
        render_products(store)
    else:
        render_orders(store)


def render_products(store: Storefront) -> None:
    print('--- Catalog ---')
    for p in store.catalog.products:
        print(f'#{p.id:<4} {p.name:<24} ${p.price:<10} stock={p.quantity:<5} {p.description or ""}')
    if not store.catalog.products:
        print('(empty)')

    if len(store.cart):
        print('--- Cart ---')
        for product_id, quantity in store.cart:
            print(f'Product ID {product_id}: {quantity}')


def render_orders(store: Storefront) -> None:
    print('--- Orders ---')
    print(f'{"ID":<6}{"Date":<14}{"Status":<12}Total')
    for o in store.orders.orders:
        print(f'{o.id:<6}{o.date or "":<14}{o.status or "":<12}${o.total_amount}')


# --------------------------------------------------------------------------
# CONSOLE COMMANDS
# --------------------------------------------------------------------------

HELP = (
    'products | orders | add <id> | cart | checkout | order <id> | logout | quit\n'
    'admin: new | edit <id> | delete <id>'
)


def _ask_draft(notifier: Notifier, current: ProductDraft) -> ProductDraft | None:
    def ask(label, default):
        value = input(f'{label} [{default}]: ').strip()
        return value or default

    try:
        return ProductDraft(
            name=ask('Name', current.name),
            price=Decimal(str(ask('Price', current.price))),
            quantity=int(ask('Quantity', current.quantity)),
            description=ask('Description', current.description),
        )
    except (InvalidOperation, ValueError):
        notifier.alert('Price and quantity must be numbers')
        return None


async def handle(store: Storefront, notifier: Notifier, line: str) -> bool:
    """Runs one console command. Returns False when the user quits."""
    try:
        args = shlex.split(line)
    except ValueError:
        print(HELP)
        return True
    if not args:
        return True
    command, rest = args[0].lower(), args[1:]
    view = store.view

    if command in ('quit', 'exit'):
        return False
    if command == 'logout':
        try:
            await view.logout()
        except httpx.RequestError as exc:
            logger.warning('Logout request failed: %s', exc)
        return False

    admin_only = command in ('new', 'edit', 'delete')
    if admin_only and not view.is_admin:
        notifier.alert('Unknown command')
        return True

    try:
        if command == 'products':
            await view.select(Tab.PRODUCTS)
            await store.catalog.refresh()
        elif command == 'orders':
            await view.select(Tab.ORDERS)
        elif command == 'add':
            store.catalog.add_to_cart(int(rest[0]))
        elif command == 'cart':
            pass
        elif command == 'checkout':
            await store.orders.place_order()
        elif command == 'order':
            order = await store.orders.open(int(rest[0]))
            if order:
                print(f'Order #{order.id}: {order.date} {order.status} ${order.total_amount}')
        elif command == 'new':
            draft = _ask_draft(notifier, store.catalog.draft)
            if draft:
                await store.catalog.add_product(draft)
        elif command == 'edit':
            product_id = int(rest[0])
            product = await store.catalog.fetch(product_id)
            if product is None:
                render(store)
                return True
            current = ProductDraft(
                name=product.name, price=product.price,
                quantity=product.quantity, description=product.description or '',
            )
            draft = _ask_draft(notifier, current)
            if draft:
                await store.catalog.update_product(product_id, draft)
        elif command == 'delete':
            await store.catalog.delete_product(int(rest[0]))
        else:
            print(HELP)
            return True
    except (IndexError, ValueError):
        print(HELP)
        return True

    render(store)
    return True


async def run_console(store: Storefront, notifier: Notifier) -> None:
    await store.view.start()
    render(store)
    print(HELP)
    while True:
        try:
            line = await asyncio.to_thread(input, 'shop> ')
        except EOFError:
            break
        if not await handle(store, notifier, line):
            break


async def run(settings: Settings, username: str, password: str) -> int:
    session = KeycloakSession(
        settings.KEYCLOAK_URL, settings.KEYCLOAK_REALM, settings.KEYCLOAK_CLIENT_ID
    )
    notifier = ConsoleNotifier()
    try:
        await session.login(username, password)
    except (AuthenticationError, httpx.RequestError) as exc:
        logger.error('Login failed: %s', exc)
        await session.aclose()
        return 1

    store = build_storefront(settings, session, notifier)
    try:
        await run_console(store, notifier)
    finally:
        await store.aclose()
        await session.aclose()
    return 0


def main() -> int:
    settings = Settings()

    parser = argparse.ArgumentParser(description='Console storefront for the shop services.')
    parser.add_argument('--username', '-u', required=True)
    parser.add_argument('--password', '-p', default=None, help='Prompted when omitted')
    parser.add_argument('--log-level', default=settings.LOG_LEVEL)
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
    )

    password = args.password or getpass.getpass('Password: ')
    return asyncio.run(run(settings, args.username, password))


if __name__ == '__main__':
    raise SystemExit(main())
