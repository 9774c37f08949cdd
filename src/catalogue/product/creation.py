"""Product creation — command and handler."""

from datetime import date

import structlog
from pydantic import BaseModel, Field

from catalogue.product.product import Price, Product
from catalogue.product.repository import ProductRepository
from identity.account.repository import AccountRepository
from identity.auth.tokens import Principal
from shared.database import Database
from shared.errors import Forbidden

logger = structlog.get_logger(__name__)


class CreateProduct(BaseModel):
    name: str
    description: str
    category: str
    price: float
    unit: str
    available_quantity: int = Field(..., ge=0)
    location: str | None = None
    images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    is_organic: bool = False
    harvest_date: date | None = None
    expiry_date: date | None = None


class CreateProductHandler:
    def __init__(self, database: Database, currency: str = "INR"):
        self._database = database
        self._currency = currency

    def create_product(self, principal: Principal, command: CreateProduct) -> Product:
        if not principal.is_producer:
            raise Forbidden("Only farmers can create products")

        with self._database.unit_of_work() as session:
            producer = AccountRepository(session).get_producer(principal.account_id)
            product = Product.list_for_sale(
                producer_id=producer.id,
                name=command.name,
                description=command.description,
                category=command.category,
                price=Price(amount=command.price, unit=command.unit, currency=self._currency),
                available_quantity=command.available_quantity,
                location=command.location or f"{producer.city}, {producer.state}",
                images=command.images,
                tags=command.tags,
                is_organic=command.is_organic,
                harvest_date=command.harvest_date,
                expiry_date=command.expiry_date,
            )
            ProductRepository(session).add(product)

        logger.info("product_created", product_id=product.id, producer_id=product.producer_id)
        return product
