"""Order Ledger — persistence access for orders."""

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ordering.order.order import Order
from shared.errors import NotFound


@dataclass(frozen=True)
class OrderPage:
    orders: list[Order]
    page: int
    page_size: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return (self.total_count + self.page_size - 1) // self.page_size

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


class OrderRepository:
    def __init__(self, session: Session):
        self._session = session

    def add(self, order: Order) -> Order:
        self._session.add(order)
        return order

    def get(self, order_id: str) -> Order:
        order = self._session.get(Order, str(order_id))
        if order is None:
            raise NotFound("Order", order_id)
        return order

    def order_number_taken(self, order_number: str) -> bool:
        stmt = select(func.count()).select_from(Order).where(Order.order_number == order_number)
        return bool(self._session.scalar(stmt))

    def page_for(self, account_id: str, side: str, status: str | None, page: int, page_size: int) -> OrderPage:
        """Orders where ``account_id`` is the buyer or the seller, newest first."""
        column = Order.buyer_id if side == "buyer" else Order.seller_id
        criteria = [column == str(account_id)]
        if status:
            criteria.append(Order.status == status)

        total = self._session.scalar(select(func.count()).select_from(Order).where(*criteria)) or 0
        stmt = (
            select(Order)
            .where(*criteria)
            .order_by(Order.created_at.desc(), Order.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return OrderPage(orders=list(self._session.scalars(stmt)), page=page, page_size=page_size, total_count=total)
