# storefront/cart.py
from typing import Iterator

from .schemas import OrderLine


class CartStore:
    """
    Quantities requested per product, kept only on the client.

    Add-only: there is no decrement or removal, and stock is not checked here
    (the order service rejects what it cannot fulfil).
    """

    def __init__(self) -> None:
        self._quantities: dict[int, int] = {}

    def add(self, product_id: int | str) -> int:
        key = int(product_id)
        self._quantities[key] = self._quantities.get(key, 0) + 1
        return self._quantities[key]

    def quantity(self, product_id: int | str) -> int:
        return self._quantities.get(int(product_id), 0)

    def lines(self) -> list[OrderLine]:
        return [
            OrderLine(product_id=product_id, quantity=quantity)
            for product_id, quantity in self._quantities.items()
        ]

    def clear(self) -> None:
        self._quantities.clear()

    def __len__(self) -> int:
        return len(self._quantities)

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(list(self._quantities.items()))
