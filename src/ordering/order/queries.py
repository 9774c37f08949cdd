"""Order reads: paginated history and single-order lookup."""

from catalogue.product.repository import ProductRepository
from identity.account.repository import AccountRepository
from identity.auth.tokens import Principal
from ordering.order.order import Order, parse_status
from ordering.order.repository import OrderPage, OrderRepository
from shared.database import Database
from shared.errors import Forbidden, ValidationFailed

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


class OrderQueries:
    def __init__(self, database: Database):
        self._database = database

    def list_orders(
        self,
        principal: Principal,
        role: str | None = None,
        status: str | None = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> OrderPage:
        errors: dict[str, list[str]] = {}
        if page < 1:
            errors["page"] = ["Page must be at least 1"]
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            errors["page_size"] = [f"Page size must be between 1 and {MAX_PAGE_SIZE}"]
        if role is not None and role not in ("buyer", "seller"):
            errors["role"] = ["Role must be buyer or seller"]
        if errors:
            raise ValidationFailed(errors)
        if status:
            status = parse_status(status).value

        side = role or ("seller" if principal.is_producer else "buyer")
        with self._database.unit_of_work() as session:
            return OrderRepository(session).page_for(principal.account_id, side, status, page, page_size)

    def get_order(self, principal: Principal, order_id: str) -> Order:
        with self._database.unit_of_work() as session:
            order = OrderRepository(session).get(order_id)
        if not order.is_party(principal.account_id):
            raise Forbidden("Not authorized to view this order")
        return order

    def references_for(self, orders: list[Order]) -> tuple[dict, dict]:
        """Account and product summaries referenced by ``orders``, keyed by id."""
        account_ids = {o.buyer_id for o in orders} | {o.seller_id for o in orders}
        product_ids = {item.product_id for o in orders for item in o.items}
        with self._database.unit_of_work() as session:
            accounts = AccountRepository(session).summaries(account_ids)
            products = ProductRepository(session).summaries(product_ids)
        return accounts, products
