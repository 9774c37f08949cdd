"""Order aggregate root with its line items and status timeline.

State Machine:
    PENDING → CONFIRMED → PREPARING → SHIPPED → DELIVERED
    Any non-terminal state → CANCELLED

Each order belongs to exactly one seller. Line items snapshot the product
name, unit and unit price at the moment the order was placed, so later
catalogue edits never change what the buyer owes.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import JSON, CheckConstraint, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ordering.order.events import OrderCancelled, OrderPlaced, OrderRated, OrderStatusChanged
from ordering.order.pricing import compute_totals, line_total
from shared.database import Base
from shared.domain import AggregateRoot
from shared.errors import (
    AlreadyRated,
    AlreadyTerminal,
    InvalidTransition,
    NotDelivered,
    ValidationFailed,
)

MAX_REVIEW_LENGTH = 500


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class CancelledBy(Enum):
    BUYER = "buyer"
    SELLER = "seller"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

TERMINAL_STATES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationFailed({"status": [f"Status must be one of {allowed}"]}) from None


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id"), index=True)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"), index=True)
    product_name: Mapped[str] = mapped_column(String(255))
    quantity: Mapped[int] = mapped_column(Integer)
    unit: Mapped[str] = mapped_column(String(10))
    unit_price: Mapped[float] = mapped_column(Float)
    line_total: Mapped[float] = mapped_column(Float)

    @classmethod
    def for_product(cls, product, quantity: int) -> "OrderItem":
        """Snapshot ``product`` as it is stored right now."""
        return cls(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit=product.price_unit,
            unit_price=product.price_amount,
            line_total=line_total(product.price_amount, quantity),
        )


class TimelineEntry(Base):
    __tablename__ = "order_timeline"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id"), index=True)
    status: Mapped[str] = mapped_column(String(20))
    note: Mapped[str | None] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(DateTime)


class Order(AggregateRoot, Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_orders_rating_range"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    order_number: Mapped[str] = mapped_column(String(40), unique=True, index=True)
    placement_id: Mapped[str] = mapped_column(String(36), index=True)
    buyer_id: Mapped[str] = mapped_column(ForeignKey("accounts.id"), index=True)
    seller_id: Mapped[str] = mapped_column(ForeignKey("accounts.id"), index=True)
    subtotal: Mapped[float] = mapped_column(Float)
    delivery_fee: Mapped[float] = mapped_column(Float)
    tax: Mapped[float] = mapped_column(Float)
    total: Mapped[float] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(3), default="INR")
    shipping_address: Mapped[dict] = mapped_column(JSON)
    payment_method: Mapped[str] = mapped_column(String(20), default="cod")
    notes: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), index=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text)
    cancelled_by: Mapped[str | None] = mapped_column(String(10))
    rating: Mapped[int | None] = mapped_column(Integer)
    review: Mapped[str | None] = mapped_column(Text)
    rated_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    items: Mapped[list[OrderItem]] = relationship(
        cascade="all, delete-orphan", lazy="selectin", order_by=OrderItem.id
    )
    timeline: Mapped[list[TimelineEntry]] = relationship(
        cascade="all, delete-orphan", lazy="selectin", order_by=TimelineEntry.id
    )

    __mapper_args__ = {"version_id_col": version}

    @classmethod
    def place(
        cls,
        placement_id,
        buyer_id,
        seller_id,
        items,
        shipping_address,
        order_number,
        delivery_fee,
        tax_rate,
        currency="INR",
        payment_method="cod",
        notes=None,
    ):
        """Create a pending order for one seller from already-priced items."""
        if not items:
            raise ValidationFailed({"items": ["Order must contain at least one item"]})

        totals = compute_totals((item.line_total for item in items), delivery_fee, tax_rate)
        now = datetime.now(UTC)
        order = cls(
            id=str(uuid4()),
            order_number=order_number,
            placement_id=str(placement_id),
            buyer_id=str(buyer_id),
            seller_id=str(seller_id),
            subtotal=totals.subtotal,
            delivery_fee=totals.delivery_fee,
            tax=totals.tax,
            total=totals.total,
            currency=currency,
            shipping_address=dict(shipping_address),
            payment_method=payment_method or "cod",
            notes=notes,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
            items=list(items),
            timeline=[TimelineEntry(status=OrderStatus.PENDING.value, note=None, timestamp=now)],
        )
        order.raise_(
            OrderPlaced(
                order_id=order.id,
                order_number=order.order_number,
                placement_id=order.placement_id,
                buyer_id=order.buyer_id,
                seller_id=order.seller_id,
                item_count=len(order.items),
                subtotal=order.subtotal,
                total=order.total,
                currency=order.currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATES

    def is_party(self, account_id: str) -> bool:
        return account_id in (self.buyer_id, self.seller_id)

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition(current.value, target_status.value)

    def _record(self, status, note, now):
        self.timeline.append(TimelineEntry(status=status.value, note=note, timestamp=now))

    def advance_to(self, target_status, note=None):
        """Move one step forward along the fulfilment path."""
        if target_status is OrderStatus.CANCELLED:
            raise InvalidTransition(self.status, target_status.value)
        self._assert_can_transition(target_status)

        previous = self.status
        now = datetime.now(UTC)
        self.status = target_status.value
        self.updated_at = now
        self._record(target_status, note, now)
        self.raise_(
            OrderStatusChanged(
                order_id=self.id,
                previous_status=previous,
                new_status=target_status.value,
                note=note,
                changed_at=now,
            )
        )

    def cancel(self, cancelled_by, reason=None):
        """Cancel the order and return the ``(product_id, quantity)`` pairs to restock."""
        if self.is_terminal:
            raise AlreadyTerminal(self.status)
        self._assert_can_transition(OrderStatus.CANCELLED)

        previous = self.status
        now = datetime.now(UTC)
        note = reason or f"Order cancelled by {cancelled_by.value}"
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_by = cancelled_by.value
        self.updated_at = now
        self._record(OrderStatus.CANCELLED, note, now)

        restocks = tuple((item.product_id, item.quantity) for item in self.items)
        self.raise_(
            OrderCancelled(
                order_id=self.id,
                previous_status=previous,
                cancelled_by=cancelled_by.value,
                reason=reason,
                restored_items=restocks,
                cancelled_at=now,
            )
        )
        return restocks

    def rate(self, rating, review=None):
        if self.status != OrderStatus.DELIVERED.value:
            raise NotDelivered(self.status)
        if self.rating is not None:
            raise AlreadyRated()

        errors: dict[str, list[str]] = {}
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            errors["rating"] = ["Rating must be an integer between 1 and 5"]
        if review is not None and len(review) > MAX_REVIEW_LENGTH:
            errors["review"] = [f"Review cannot exceed {MAX_REVIEW_LENGTH} characters"]
        if errors:
            raise ValidationFailed(errors)

        now = datetime.now(UTC)
        self.rating = rating
        self.review = review
        self.rated_at = now
        self.updated_at = now
        self.raise_(
            OrderRated(
                order_id=self.id,
                buyer_id=self.buyer_id,
                rating=rating,
                has_review=bool(review),
                rated_at=now,
            )
        )
