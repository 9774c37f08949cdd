"""Order cancellation — command and handler.

Cancelling hands every line's quantity back to the catalogue in the same
transaction as the status change. The order row is version checked, so two
racing cancellations cannot both restore stock: the loser re-reads the order,
finds it cancelled and fails with ``AlreadyTerminal``.
"""

import structlog
from pydantic import BaseModel, Field

from catalogue.product.repository import ProductRepository
from identity.auth.tokens import Principal
from ordering.order.order import CancelledBy, Order
from ordering.order.repository import OrderRepository
from shared.config import Settings
from shared.database import Database
from shared.errors import Forbidden

logger = structlog.get_logger(__name__)


class CancelOrder(BaseModel):
    order_id: str
    reason: str | None = Field(None, max_length=500)


class CancelOrderHandler:
    def __init__(self, database: Database, settings: Settings):
        self._database = database
        self._settings = settings

    def cancel_order(self, principal: Principal, command: CancelOrder) -> Order:
        def work(session):
            orders = OrderRepository(session)
            order = orders.get(command.order_id)
            if principal.account_id == order.buyer_id:
                actor = CancelledBy.BUYER
            elif principal.account_id == order.seller_id:
                actor = CancelledBy.SELLER
            else:
                raise Forbidden("Not authorized to cancel this order")

            restocks = order.cancel(actor, reason=command.reason)
            orders.add(order)
            # Flush first so a stale order version aborts before stock moves
            session.flush()

            products = ProductRepository(session)
            for product_id, quantity in restocks:
                products.restore_stock(product_id, quantity)
            return order

        order = self._database.run_in_transaction(
            work,
            retries=self._settings.reservation_retries,
            backoff=self._settings.retry_backoff_seconds,
        )
        logger.info("order_cancelled", order_id=order.id, cancelled_by=order.cancelled_by)
        return order
