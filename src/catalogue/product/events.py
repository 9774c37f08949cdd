"""Domain events for the Product aggregate."""

from datetime import datetime

from shared.domain import DomainEvent


class ProductListed(DomainEvent):
    """A producer put a new product up for sale."""

    product_id: str
    producer_id: str
    name: str
    category: str
    price_amount: float
    price_unit: str
    available_quantity: int
    listed_at: datetime


class ProductDetailsUpdated(DomainEvent):
    product_id: str
    changed_fields: tuple[str, ...]
    updated_at: datetime


class ProductPriceChanged(DomainEvent):
    product_id: str
    previous_price: float
    new_price: float
    currency: str


class ProductRemoved(DomainEvent):
    """The owner withdrew the product; it stays referenced by past orders."""

    product_id: str
    producer_id: str
    removed_at: datetime
