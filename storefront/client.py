# storefront/client.py
import logging
from typing import Iterable

import httpx

from .errors import NetworkError, ServerError, TokenRefreshError, classify_status
from .schemas import Order, OrderLine, OrderLines, Product, ProductDraft
from .security import AuthGate

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Typed access to the product and order services.

    Every call goes through the `AuthGate`, is sent exactly once and raises
    an `ApiError` subclass on failure. Nothing is cached.
    """

    def __init__(self, http: httpx.AsyncClient, gate: AuthGate):
        self.http = http
        self.gate = gate

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self.http.request(method, path, auth=self.gate, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            error = classify_status(exc.response.status_code)
            logger.warning('%s %s failed: %s', method, path, error)
            raise error from exc
        except (httpx.RequestError, TokenRefreshError) as exc:
            # Nothing came back from the backend
            logger.warning('%s %s got no response: %r', method, path, exc)
            raise NetworkError() from exc
        return response

    def _parse(self, response: httpx.Response, model, many: bool = False):
        """Validates a 2xx body; a body that breaks the contract counts as a server error."""
        try:
            data = response.json()
            if many:
                return [model.model_validate(item) for item in data]
            return model.model_validate(data)
        except (ValueError, TypeError) as exc:
            logger.warning('%s %s returned an unexpected body: %s',
                           response.request.method, response.request.url.path, exc)
            raise ServerError(response.status_code) from exc

    # --- PRODUCTS ---

    async def list_products(self) -> list[Product]:
        response = await self._request('GET', '/products')
        return self._parse(response, Product, many=True)

    async def get_product(self, product_id: int) -> Product:
        response = await self._request('GET', f'/products/{product_id}')
        return self._parse(response, Product)

    async def create_product(self, draft: ProductDraft) -> None:
        await self._request('POST', '/products', json=draft.model_dump(mode='json'))

    async def update_product(self, product_id: int, draft: ProductDraft) -> None:
        await self._request(
            'PUT', f'/products/{product_id}', json=draft.model_dump(mode='json')
        )

    async def delete_product(self, product_id: int) -> None:
        await self._request('DELETE', f'/products/{product_id}')

    # --- ORDERS ---

    async def list_orders(self) -> list[Order]:
        response = await self._request('GET', '/orders')
        return self._parse(response, Order, many=True)

    async def get_order(self, order_id: int) -> Order:
        response = await self._request('GET', f'/orders/{order_id}')
        return self._parse(response, Order)

    async def create_order(self, lines: Iterable[OrderLine]) -> None:
        payload = OrderLines(order_lines=list(lines))
        await self._request('POST', '/orders', json=payload.model_dump(by_alias=True))
