# storefront/schemas.py
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class Product(BaseModel):
    id: int
    name: str
    price: Decimal
    quantity: int
    description: str | None = None


class ProductDraft(BaseModel):
    """New-product form state (admin). Empty by default."""
    name: str = ''
    price: Decimal = Decimal('0')
    quantity: int = 0
    description: str = ''

    @field_serializer('price')
    def serialize_price(self, price: Decimal) -> float:
        return float(price)


class Order(BaseModel):
    id: int
    date: str | None = None
    status: str | None = None
    total_amount: Decimal = Field(alias='totalAmount')
    model_config = ConfigDict(populate_by_name=True)


class OrderLine(BaseModel):
    product_id: int = Field(alias='productId')
    quantity: int = Field(ge=1)
    model_config = ConfigDict(populate_by_name=True)


class OrderLines(BaseModel):
    order_lines: list[OrderLine] = Field(alias='orderLines')
    model_config = ConfigDict(populate_by_name=True)


class Token(BaseModel):
    access_token: str
    refresh_token: str | None = None
    token_type: str = 'Bearer'
    expires_in: int | None = None
