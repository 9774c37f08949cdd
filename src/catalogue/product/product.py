"""Product aggregate root and the Price value object."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import JSON, Boolean, CheckConstraint, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalogue.product.events import (
    ProductDetailsUpdated,
    ProductListed,
    ProductPriceChanged,
    ProductRemoved,
)
from shared.database import Base
from shared.domain import AggregateRoot
from shared.errors import ValidationFailed


class ProductCategory(Enum):
    VEGETABLES = "Vegetables"
    FRUITS = "Fruits"
    GRAINS = "Grains"
    DAIRY = "Dairy"
    POULTRY = "Poultry"
    OTHER = "Other"


class PriceUnit(Enum):
    KG = "kg"
    G = "g"
    PIECE = "piece"
    DOZEN = "dozen"
    BUNDLE = "bundle"


@dataclass(frozen=True)
class Price:
    """Amount per unit in a currency. Immutable; replaced wholesale on change."""

    amount: float
    unit: str
    currency: str = "INR"

    def __post_init__(self):
        errors: dict[str, list[str]] = {}
        if self.amount is None or self.amount < 0:
            errors["price"] = ["Price must be a non-negative number"]
        if self.unit not in {u.value for u in PriceUnit}:
            errors["unit"] = [f"Unit must be one of {', '.join(u.value for u in PriceUnit)}"]
        if not self.currency or len(self.currency) != 3:
            errors["currency"] = ["Currency must be a 3-letter code"]
        if errors:
            raise ValidationFailed(errors)


def _check_category(errors, category):
    if category not in {c.value for c in ProductCategory}:
        errors.setdefault("category", []).append(
            f"Category must be one of {', '.join(c.value for c in ProductCategory)}"
        )


def _check_quantity(errors, quantity):
    if quantity is None or isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        errors.setdefault("available_quantity", []).append("Available quantity must be a non-negative integer")


def _check_dates(errors, harvest_date, expiry_date):
    if harvest_date and expiry_date and expiry_date < harvest_date:
        errors.setdefault("expiry_date", []).append("Expiry date cannot be before harvest date")


class Product(AggregateRoot, Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("available_quantity >= 0", name="ck_products_available_non_negative"),
        CheckConstraint("price_amount >= 0", name="ck_products_price_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    producer_id: Mapped[str] = mapped_column(ForeignKey("accounts.id"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(20), index=True)
    price_amount: Mapped[float] = mapped_column(Float)
    price_unit: Mapped[str] = mapped_column(String(10))
    currency: Mapped[str] = mapped_column(String(3), default="INR")
    location: Mapped[str] = mapped_column(String(255), default="")
    images: Mapped[list[str]] = mapped_column(JSON, default=list)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    rating: Mapped[float] = mapped_column(Float, default=0.0)
    total_ratings: Mapped[int] = mapped_column(Integer, default=0)
    available_quantity: Mapped[int] = mapped_column(Integer, default=0)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True)
    is_organic: Mapped[bool] = mapped_column(Boolean, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    harvest_date: Mapped[date | None] = mapped_column(Date)
    expiry_date: Mapped[date | None] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime)
    updated_at: Mapped[datetime] = mapped_column(DateTime)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Fields an owner may change through update_details
    EDITABLE_FIELDS = (
        "name",
        "description",
        "category",
        "price_amount",
        "price_unit",
        "available_quantity",
        "images",
        "tags",
        "location",
        "is_available",
        "is_organic",
        "harvest_date",
        "expiry_date",
    )

    @property
    def price(self) -> Price:
        return Price(amount=self.price_amount, unit=self.price_unit, currency=self.currency)

    @property
    def average_rating(self) -> float:
        return round(self.rating / self.total_ratings, 1) if self.total_ratings else 0.0

    @classmethod
    def list_for_sale(
        cls,
        producer_id,
        name,
        description,
        category,
        price,
        available_quantity,
        location="",
        images=None,
        tags=None,
        is_organic=False,
        harvest_date=None,
        expiry_date=None,
    ):
        """Create a product offered by ``producer_id``."""
        errors: dict[str, list[str]] = {}
        if not name or not name.strip():
            errors["name"] = ["Product name is required"]
        if not description or not description.strip():
            errors["description"] = ["Product description is required"]
        _check_category(errors, category)
        _check_quantity(errors, available_quantity)
        _check_dates(errors, harvest_date, expiry_date)
        if errors:
            raise ValidationFailed(errors)

        now = datetime.now(UTC)
        product = cls(
            id=str(uuid4()),
            producer_id=str(producer_id),
            name=name.strip(),
            description=description.strip(),
            category=category,
            price_amount=price.amount,
            price_unit=price.unit,
            currency=price.currency,
            location=location or "",
            images=list(images or []),
            tags=sorted(set(tags or [])),
            rating=0.0,
            total_ratings=0,
            available_quantity=available_quantity,
            is_available=True,
            is_organic=bool(is_organic),
            is_deleted=False,
            harvest_date=harvest_date,
            expiry_date=expiry_date,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductListed(
                product_id=product.id,
                producer_id=product.producer_id,
                name=product.name,
                category=product.category,
                price_amount=product.price_amount,
                price_unit=product.price_unit,
                available_quantity=product.available_quantity,
                listed_at=now,
            )
        )
        return product

    def update_details(self, **changes):
        changes = {k: v for k, v in changes.items() if k in self.EDITABLE_FIELDS and v is not None}
        if not changes:
            return

        errors: dict[str, list[str]] = {}
        for text_field in ("name", "description"):
            if text_field in changes and not str(changes[text_field]).strip():
                errors[text_field] = [f"Product {text_field} cannot be empty"]
        if "category" in changes:
            _check_category(errors, changes["category"])
        if "available_quantity" in changes:
            _check_quantity(errors, changes["available_quantity"])
        _check_dates(
            errors,
            changes.get("harvest_date", self.harvest_date),
            changes.get("expiry_date", self.expiry_date),
        )
        if errors:
            raise ValidationFailed(errors)

        # Validates amount/unit together
        new_price = Price(
            amount=changes.get("price_amount", self.price_amount),
            unit=changes.get("price_unit", self.price_unit),
            currency=self.currency,
        )
        if new_price.amount != self.price_amount:
            self.raise_(
                ProductPriceChanged(
                    product_id=self.id,
                    previous_price=self.price_amount,
                    new_price=new_price.amount,
                    currency=self.currency,
                )
            )
        if "tags" in changes:
            changes["tags"] = sorted(set(changes["tags"]))

        for key, value in changes.items():
            setattr(self, key, value.strip() if isinstance(value, str) else value)

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            ProductDetailsUpdated(product_id=self.id, changed_fields=tuple(sorted(changes)), updated_at=now)
        )

    def remove(self):
        """Soft delete: hide from the catalogue, keep the row for past orders."""
        if self.is_deleted:
            return
        now = datetime.now(UTC)
        self.is_deleted = True
        self.is_available = False
        self.updated_at = now
        self.raise_(ProductRemoved(product_id=self.id, producer_id=self.producer_id, removed_at=now))
