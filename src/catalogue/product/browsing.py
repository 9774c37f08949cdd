"""Read side of the catalogue: product listings and detail lookups."""

from catalogue.product.product import Product
from catalogue.product.repository import ProductFilter, ProductRepository
from identity.account.repository import AccountRepository
from shared.database import Database


class ProductQueries:
    def __init__(self, database: Database, list_limit: int = 50):
        self._database = database
        self._list_limit = list_limit

    def list_products(
        self,
        category: str | None = None,
        location: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        producer_id: str | None = None,
        search: str | None = None,
    ) -> list[Product]:
        criteria = ProductFilter(
            category=category,
            location=location,
            min_price=min_price,
            max_price=max_price,
            producer_id=producer_id,
            search=search,
            limit=self._list_limit,
        )
        with self._database.unit_of_work() as session:
            return ProductRepository(session).search(criteria)

    def get_product(self, product_id: str) -> Product:
        with self._database.unit_of_work() as session:
            return ProductRepository(session).get(product_id)

    def list_by_producer(self, producer_id: str) -> list[Product]:
        with self._database.unit_of_work() as session:
            AccountRepository(session).get_producer(producer_id)
            return ProductRepository(session).list_by_producer(producer_id)

    def producers_of(self, products: list[Product]) -> dict:
        """Producer summaries keyed by account id, for rendering listings."""
        with self._database.unit_of_work() as session:
            return AccountRepository(session).summaries(p.producer_id for p in products)
