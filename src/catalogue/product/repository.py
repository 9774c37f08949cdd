"""Catalog Store — persistence access for products, including stock movements.

Stock is never adjusted by read-modify-write on a loaded ``Product``. Both
``reserve_stock`` and ``restore_stock`` issue one conditional ``UPDATE`` inside
the caller's transaction, so concurrent reservations for the same product
serialize in the database and the quantity can never go negative.
"""

from dataclasses import dataclass

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from catalogue.product.product import Product
from shared.errors import InsufficientInventory, NotFound


@dataclass(frozen=True)
class ProductFilter:
    category: str | None = None
    location: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    producer_id: str | None = None
    search: str | None = None
    limit: int = 50


class ProductRepository:
    def __init__(self, session: Session):
        self._session = session

    def add(self, product: Product) -> Product:
        self._session.add(product)
        return product

    def get(self, product_id: str, include_deleted: bool = False) -> Product:
        product = self._session.get(Product, str(product_id))
        if product is None or (product.is_deleted and not include_deleted):
            raise NotFound("Product", product_id)
        return product

    def search(self, criteria: ProductFilter) -> list[Product]:
        stmt = select(Product).where(Product.is_deleted.is_(False), Product.is_available.is_(True))
        if criteria.category:
            stmt = stmt.where(Product.category == criteria.category)
        if criteria.location:
            stmt = stmt.where(func.lower(Product.location).contains(criteria.location.lower()))
        if criteria.min_price is not None:
            stmt = stmt.where(Product.price_amount >= criteria.min_price)
        if criteria.max_price is not None:
            stmt = stmt.where(Product.price_amount <= criteria.max_price)
        if criteria.producer_id:
            stmt = stmt.where(Product.producer_id == criteria.producer_id)
        if criteria.search:
            term = criteria.search.lower()
            stmt = stmt.where(
                or_(
                    func.lower(Product.name).contains(term),
                    func.lower(Product.description).contains(term),
                )
            )
        stmt = stmt.order_by(Product.created_at.desc()).limit(criteria.limit)
        return list(self._session.scalars(stmt))

    def list_by_producer(self, producer_id: str) -> list[Product]:
        stmt = (
            select(Product)
            .where(Product.producer_id == str(producer_id), Product.is_deleted.is_(False))
            .order_by(Product.created_at.desc())
        )
        return list(self._session.scalars(stmt))

    def reserve_stock(self, product: Product, quantity: int) -> None:
        """Decrement available stock by ``quantity`` or raise ``InsufficientInventory``.

        The decrement only applies while enough stock remains; a zero row count
        means another buyer got there first (or there never was enough).
        """
        result = self._session.execute(
            update(Product)
            .where(
                Product.id == product.id,
                Product.is_deleted.is_(False),
                Product.available_quantity >= quantity,
            )
            .values(
                available_quantity=Product.available_quantity - quantity,
                version=Product.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            available = self._session.scalar(select(Product.available_quantity).where(Product.id == product.id))
            raise InsufficientInventory(
                product_id=product.id,
                product_name=product.name,
                available=available or 0,
                requested=quantity,
            )
        self._session.refresh(product, ["available_quantity", "version"])

    def restore_stock(self, product_id: str, quantity: int) -> None:
        """Give ``quantity`` back to the product, deleted or not."""
        self._session.execute(
            update(Product)
            .where(Product.id == str(product_id))
            .values(
                available_quantity=Product.available_quantity + quantity,
                version=Product.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        product = self._session.get(Product, str(product_id))
        if product is not None:
            self._session.refresh(product, ["available_quantity", "version"])

    def summaries(self, product_ids) -> dict[str, Product]:
        """Products keyed by id, soft-deleted ones included."""
        ids = {str(i) for i in product_ids}
        if not ids:
            return {}
        return {p.id: p for p in self._session.scalars(select(Product).where(Product.id.in_(ids)))}
