"""Owner-only product changes: detail updates and removal."""

from datetime import date

import structlog
from pydantic import BaseModel

from catalogue.product.product import Product
from catalogue.product.repository import ProductRepository
from identity.auth.tokens import Principal
from shared.database import Database
from shared.errors import Forbidden

logger = structlog.get_logger(__name__)


class UpdateProduct(BaseModel):
    product_id: str
    name: str | None = None
    description: str | None = None
    category: str | None = None
    price: float | None = None
    unit: str | None = None
    available_quantity: int | None = None
    images: list[str] | None = None
    tags: list[str] | None = None
    location: str | None = None
    is_organic: bool | None = None
    is_available: bool | None = None
    harvest_date: date | None = None
    expiry_date: date | None = None


class RemoveProduct(BaseModel):
    product_id: str


def _assert_owner(product: Product, principal: Principal, action: str) -> None:
    if product.producer_id != principal.account_id:
        raise Forbidden(f"Not authorized to {action} this product")


class ProductManagementHandler:
    def __init__(self, database: Database, retries: int = 5, backoff: float = 0.02):
        self._database = database
        self._retries = retries
        self._backoff = backoff

    def update_product(self, principal: Principal, command: UpdateProduct) -> Product:
        changes = command.model_dump(exclude={"product_id"}, exclude_none=True)
        if "price" in changes:
            changes["price_amount"] = changes.pop("price")
        if "unit" in changes:
            changes["price_unit"] = changes.pop("unit")

        def work(session):
            products = ProductRepository(session)
            product = products.get(command.product_id)
            _assert_owner(product, principal, "update")
            product.update_details(**changes)
            return products.add(product)

        product = self._database.run_in_transaction(work, retries=self._retries, backoff=self._backoff)
        logger.info("product_updated", product_id=product.id, fields=sorted(changes))
        return product

    def remove_product(self, principal: Principal, command: RemoveProduct) -> None:
        def work(session):
            products = ProductRepository(session)
            product = products.get(command.product_id)
            _assert_owner(product, principal, "delete")
            product.remove()
            products.add(product)

        self._database.run_in_transaction(work, retries=self._retries, backoff=self._backoff)
        logger.info("product_removed", product_id=command.product_id)
