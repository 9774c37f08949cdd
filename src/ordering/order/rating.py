"""Buyer rating of a delivered order."""

import structlog
from pydantic import BaseModel

from identity.auth.tokens import Principal
from ordering.order.order import Order
from ordering.order.repository import OrderRepository
from shared.config import Settings
from shared.database import Database
from shared.errors import Forbidden

logger = structlog.get_logger(__name__)


class RateOrder(BaseModel):
    order_id: str
    rating: int
    review: str | None = None


class RateOrderHandler:
    def __init__(self, database: Database, settings: Settings):
        self._database = database
        self._settings = settings

    def rate_order(self, principal: Principal, command: RateOrder) -> Order:
        def work(session):
            orders = OrderRepository(session)
            order = orders.get(command.order_id)
            if order.buyer_id != principal.account_id:
                raise Forbidden("Not authorized to rate this order")
            order.rate(command.rating, review=command.review)
            return orders.add(order)

        order = self._database.run_in_transaction(
            work,
            retries=self._settings.reservation_retries,
            backoff=self._settings.retry_backoff_seconds,
        )
        logger.info("order_rated", order_id=order.id, rating=order.rating)
        return order
