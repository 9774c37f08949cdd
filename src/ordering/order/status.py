"""Seller-driven status changes along the fulfilment path."""

import structlog
from pydantic import BaseModel, Field

from identity.auth.tokens import Principal
from ordering.order.cancellation import CancelOrder, CancelOrderHandler
from ordering.order.order import Order, OrderStatus, parse_status
from ordering.order.repository import OrderRepository
from shared.config import Settings
from shared.database import Database
from shared.errors import Forbidden

logger = structlog.get_logger(__name__)


class UpdateOrderStatus(BaseModel):
    order_id: str
    status: str
    note: str | None = Field(None, max_length=500)


class OrderStatusHandler:
    def __init__(self, database: Database, settings: Settings, cancellations: CancelOrderHandler):
        self._database = database
        self._settings = settings
        self._cancellations = cancellations

    def update_status(self, principal: Principal, command: UpdateOrderStatus) -> Order:
        target = parse_status(command.status)
        if target is OrderStatus.CANCELLED:
            return self._cancellations.cancel_order(
                principal, CancelOrder(order_id=command.order_id, reason=command.note)
            )

        def work(session):
            orders = OrderRepository(session)
            order = orders.get(command.order_id)
            if order.seller_id != principal.account_id:
                raise Forbidden("Only the seller can update order status")
            order.advance_to(target, note=command.note)
            return orders.add(order)

        order = self._database.run_in_transaction(
            work,
            retries=self._settings.reservation_retries,
            backoff=self._settings.retry_backoff_seconds,
        )
        logger.info("order_status_updated", order_id=order.id, status=order.status)
        return order
