"""Pydantic request/response schemas for the Catalogue API."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

# --- Product Request Schemas ---


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Tomatoes",
                    "description": "Vine-ripened, picked this morning.",
                    "category": "Vegetables",
                    "price": 40,
                    "unit": "kg",
                    "available_quantity": 10,
                    "is_organic": True,
                    "tags": ["fresh", "local"],
                    "harvest_date": "2026-10-18",
                }
            ]
        }
    }

    name: str = Field(..., max_length=255)
    description: str
    category: str
    price: float = Field(..., ge=0)
    unit: str
    available_quantity: int = Field(..., ge=0)
    location: str | None = Field(None, max_length=255)
    images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    is_organic: bool = False
    harvest_date: date | None = None
    expiry_date: date | None = None


class UpdateProductRequest(BaseModel):
    name: str | None = Field(None, max_length=255)
    description: str | None = None
    category: str | None = None
    price: float | None = Field(None, ge=0)
    unit: str | None = None
    available_quantity: int | None = Field(None, ge=0)
    location: str | None = Field(None, max_length=255)
    images: list[str] | None = None
    tags: list[str] | None = None
    is_organic: bool | None = None
    is_available: bool | None = None
    harvest_date: date | None = None
    expiry_date: date | None = None


# --- Response Schemas ---


class PriceResponse(BaseModel):
    amount: float
    unit: str
    currency: str


class FarmerSummary(BaseModel):
    id: str
    first_name: str
    last_name: str
    farm_name: str | None = None
    phone: str | None = None


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str
    category: str
    price: PriceResponse
    farmer: FarmerSummary | str
    location: str
    images: list[str]
    tags: list[str]
    rating: float
    total_ratings: int
    available_quantity: int
    is_available: bool
    is_organic: bool
    harvest_date: date | None
    expiry_date: date | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_product(cls, product, producer=None) -> ProductResponse:
        farmer = product.producer_id
        if producer is not None:
            farmer = FarmerSummary(
                id=producer.id,
                first_name=producer.first_name,
                last_name=producer.last_name,
                farm_name=getattr(producer, "farm_name", None),
                phone=producer.phone,
            )
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            category=product.category,
            price=PriceResponse(amount=product.price_amount, unit=product.price_unit, currency=product.currency),
            farmer=farmer,
            location=product.location,
            images=list(product.images or []),
            tags=list(product.tags or []),
            rating=product.average_rating,
            total_ratings=product.total_ratings,
            available_quantity=product.available_quantity,
            is_available=product.is_available,
            is_organic=product.is_organic,
            harvest_date=product.harvest_date,
            expiry_date=product.expiry_date,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    count: int


class StatusResponse(BaseModel):
    status: str = "ok"
    message: str | None = None
