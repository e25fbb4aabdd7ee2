# storefront/controllers/catalog.py
import logging

from ..cart import CartStore
from ..client import ApiClient
from ..errors import ApiError
from ..notify import ErrorBanner, Notifier
from ..schemas import Product, ProductDraft
from .base import Controller, LoadState

logger = logging.getLogger(__name__)


class CatalogController(Controller):
    """Products tab: listing, add-to-cart and the admin mutations."""

    def __init__(
            self,
            api: ApiClient,
            cart: CartStore,
            notifier: Notifier,
            banner: ErrorBanner | None = None,
    ):
        super().__init__(api, notifier, banner)
        self.cart = cart
        self.products: list[Product] = []
        self.draft = ProductDraft()

    async def refresh(self) -> bool:
        self.state = LoadState.LOADING
        try:
            products = await self.api.list_products()
        except ApiError as error:
            self._failed(error, loading=True)
            return False
        # Whole snapshot, never a partial merge
        self.products = products
        self._loaded()
        return True

    def add_to_cart(self, product: Product | int) -> int:
        product_id = product.id if isinstance(product, Product) else product
        return self.cart.add(product_id)

    # --- ADMIN ---

    async def fetch(self, product_id: int) -> Product | None:
        """Current backend copy of one product, used to prefill the edit form."""
        try:
            return await self.api.get_product(product_id)
        except ApiError as error:
            self._failed(error)
            return None

    async def add_product(self, draft: ProductDraft | None = None) -> bool:
        draft = draft or self.draft
        try:
            await self.api.create_product(draft)
        except ApiError as error:
            logger.info('Create product %r failed: %s', draft.name, error)
            self._failed(error)
            self.draft = draft
            self.notifier.alert('Failed to add product')
            return False

        logger.info('Product %r created', draft.name)
        self.notifier.alert('Product added!')
        self.draft = ProductDraft()
        await self.refresh()
        return True

    async def update_product(self, product_id: int, draft: ProductDraft) -> bool:
        try:
            await self.api.update_product(product_id, draft)
        except ApiError as error:
            logger.info('Update product %s failed: %s', product_id, error)
            self._failed(error)
            self.notifier.alert('Failed to update product')
            return False

        logger.info('Product %s updated', product_id)
        self.notifier.alert('Product updated!')
        await self.refresh()
        return True

    async def delete_product(self, product_id: int) -> bool:
        if not self.notifier.confirm('Are you sure?'):
            return False
        try:
            await self.api.delete_product(product_id)
        except ApiError as error:
            logger.info('Delete product %s failed: %s', product_id, error)
            self._failed(error)
            self.notifier.alert('Failed to delete product')
            return False

        logger.info('Product %s deleted', product_id)
        self.notifier.alert('Product deleted!')
        await self.refresh()
        return True
