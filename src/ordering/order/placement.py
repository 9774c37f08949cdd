"""Order placement — command, result and the workflow engine handler.

A checkout may contain produce from several farmers. Lines are grouped by
owning producer (first-seen order preserved) and each group becomes its own
order, placed in its own transaction:

    1. re-read every product of the group inside the transaction
    2. reserve each line with one conditional ``UPDATE``
    3. price the lines from the stored prices just read
    4. persist the pending order with its first timeline entry

A failure anywhere in a group rolls back that group only. Groups that
succeeded stay placed and the failures are reported alongside them. When
every group fails, the first group's error is raised unchanged.
"""

from dataclasses import dataclass, field
from functools import partial
from uuid import uuid4

import structlog
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from catalogue.product.repository import ProductRepository
from identity.account.repository import AccountRepository
from identity.auth.tokens import Principal
from ordering.order.address import ShippingAddress
from ordering.order.order import Order, OrderItem
from ordering.order.pricing import generate_order_number
from ordering.order.repository import OrderRepository
from shared.config import Settings
from shared.database import Database
from shared.errors import Forbidden, MarketplaceError, NotFound, Unauthenticated, ValidationFailed

logger = structlog.get_logger(__name__)


class OrderLine(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)


class PlaceOrder(BaseModel):
    """Client-supplied prices or totals are never part of this command."""

    buyer_id: str
    items: list[OrderLine] = Field(..., min_length=1)
    shipping_address: ShippingAddress
    payment_method: str = Field("cod", max_length=20)
    notes: str | None = Field(None, max_length=500)


@dataclass(frozen=True)
class PlacementFailure:
    seller_id: str
    product_ids: tuple[str, ...]
    error: MarketplaceError


@dataclass
class PlacementResult:
    placement_id: str
    orders: list[Order] = field(default_factory=list)
    failures: list[PlacementFailure] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.orders) and bool(self.failures)


class OrderPlacementHandler:
    def __init__(self, database: Database, settings: Settings):
        self._database = database
        self._settings = settings

    def place_order(self, principal: Principal, command: PlaceOrder) -> PlacementResult:
        if principal.account_id != command.buyer_id:
            raise Forbidden("Orders can only be placed for yourself")
        if not principal.is_consumer:
            raise Forbidden("Only consumers can place orders")

        groups = self._group_by_seller(command)
        result = PlacementResult(placement_id=str(uuid4()))

        for seller_id, lines in groups.items():
            work = partial(
                self._place_group,
                command=command,
                seller_id=seller_id,
                lines=lines,
                placement_id=result.placement_id,
            )
            try:
                order = self._database.run_in_transaction(
                    work,
                    retries=self._settings.reservation_retries,
                    backoff=self._settings.retry_backoff_seconds,
                    retry_on_integrity_error=True,
                )
            except MarketplaceError as exc:
                logger.warning(
                    "order_group_failed",
                    placement_id=result.placement_id,
                    seller_id=seller_id,
                    error=exc.code,
                )
                result.failures.append(
                    PlacementFailure(
                        seller_id=seller_id,
                        product_ids=tuple(line.product_id for line in lines),
                        error=exc,
                    )
                )
                continue

            logger.info(
                "order_placed",
                order_id=order.id,
                order_number=order.order_number,
                placement_id=result.placement_id,
                seller_id=seller_id,
                total=order.total,
            )
            result.orders.append(order)

        if not result.orders:
            raise result.failures[0].error
        return result

    def _group_by_seller(self, command: PlaceOrder) -> dict[str, list[OrderLine]]:
        """Validate buyer and products, then bucket lines per producer.

        Lines naming the same product are merged into one, so each product is
        reserved once for the whole requested quantity.
        """
        merged: dict[str, OrderLine] = {}
        for line in command.items:
            previous = merged.get(line.product_id)
            quantity = line.quantity + (previous.quantity if previous else 0)
            merged[line.product_id] = OrderLine(product_id=line.product_id, quantity=quantity)

        groups: dict[str, list[OrderLine]] = {}
        with self._database.unit_of_work() as session:
            try:
                buyer = AccountRepository(session).get(command.buyer_id)
            except NotFound:
                raise Unauthenticated("Token is not valid") from None
            if buyer.role != "consumer":
                raise Forbidden("Only consumers can place orders")

            products = ProductRepository(session)
            for line in merged.values():
                product = products.get(line.product_id)
                if not product.is_available:
                    raise ValidationFailed({"items": [f"Product {product.name} is not available"]})
                groups.setdefault(product.producer_id, []).append(line)
        return groups

    def _place_group(self, session: Session, command: PlaceOrder, seller_id: str, lines, placement_id: str) -> Order:
        products = ProductRepository(session)
        orders = OrderRepository(session)

        items = []
        for line in lines:
            product = products.get(line.product_id)
            if not product.is_available:
                raise ValidationFailed({"items": [f"Product {product.name} is not available"]})
            products.reserve_stock(product, line.quantity)
            logger.debug("stock_reserved", product_id=product.id, quantity=line.quantity)
            items.append(OrderItem.for_product(product, line.quantity))

        order_number = generate_order_number()
        while orders.order_number_taken(order_number):
            order_number = generate_order_number()

        order = Order.place(
            placement_id=placement_id,
            buyer_id=command.buyer_id,
            seller_id=seller_id,
            items=items,
            shipping_address=command.shipping_address.model_dump(),
            order_number=order_number,
            delivery_fee=self._settings.delivery_fee,
            tax_rate=self._settings.tax_rate,
            currency=self._settings.currency,
            payment_method=command.payment_method,
            notes=command.notes,
        )
        return orders.add(order)
