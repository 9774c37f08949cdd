"""Domain events for the Order aggregate."""

from datetime import datetime

from shared.domain import DomainEvent


class OrderPlaced(DomainEvent):
    """A buyer's checkout produced this order for one seller."""

    order_id: str
    order_number: str
    placement_id: str
    buyer_id: str
    seller_id: str
    item_count: int
    subtotal: float
    total: float
    currency: str
    placed_at: datetime


class OrderStatusChanged(DomainEvent):
    order_id: str
    previous_status: str
    new_status: str
    note: str | None
    changed_at: datetime


class OrderCancelled(DomainEvent):
    """Stock for every line was handed back in the same transaction."""

    order_id: str
    previous_status: str
    cancelled_by: str
    reason: str | None
    restored_items: tuple[tuple[str, int], ...]
    cancelled_at: datetime


class OrderRated(DomainEvent):
    order_id: str
    buyer_id: str
    rating: int
    has_review: bool
    rated_at: datetime
