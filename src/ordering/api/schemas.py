"""Pydantic request/response schemas for the Ordering API.

Request bodies accept the storefront's camelCase keys as aliases. Anything
the client sends about prices or totals is ignored; only product ids and
quantities are read.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ordering.order.address import ShippingAddress

# --- Request Schemas ---


class OrderLineRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., min_length=1, alias="productId")
    quantity: int = Field(..., ge=1)


class PlaceOrderRequest(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "items": [{"productId": "b6f7c3de-1c1e-4c55-9d5b-3f1e2a9c0d11", "quantity": 3}],
                    "shippingAddress": {
                        "firstName": "Asha",
                        "lastName": "Patel",
                        "address": "12 MG Road",
                        "city": "Pune",
                        "state": "Maharashtra",
                        "pincode": "411001",
                        "phone": "9123456780",
                    },
                    "paymentMethod": "cod",
                    "notes": "Leave at the gate",
                }
            ]
        },
    )

    items: list[OrderLineRequest] = Field(..., min_length=1)
    shipping_address: ShippingAddress = Field(..., alias="shippingAddress")
    payment_method: str = Field("cod", max_length=20, alias="paymentMethod")
    notes: str | None = Field(None, max_length=500)


class UpdateStatusRequest(BaseModel):
    status: str
    note: str | None = Field(None, max_length=500)


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class RateOrderRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    review: str | None = Field(None, max_length=500)


# --- Response Schemas ---


class PartySummary(BaseModel):
    id: str
    first_name: str | None = None
    last_name: str | None = None
    farm_name: str | None = None
    phone: str | None = None


class ProductSummary(BaseModel):
    id: str
    name: str
    images: list[str] = Field(default_factory=list)
    category: str | None = None


class OrderItemResponse(BaseModel):
    product: ProductSummary
    quantity: int
    unit: str
    price: float
    total: float


class TimelineEntryResponse(BaseModel):
    status: str
    timestamp: datetime
    note: str | None = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    placement_id: str
    customer: PartySummary
    farmer: PartySummary
    items: list[OrderItemResponse]
    subtotal: float
    delivery_charge: float
    tax: float
    total: float
    currency: str
    shipping_address: dict
    payment_method: str
    notes: str | None
    status: str
    timeline: list[TimelineEntryResponse]
    cancellation_reason: str | None = None
    cancelled_by: str | None = None
    rating: int | None = None
    review: str | None = None
    rated_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_order(cls, order, accounts: dict, products: dict) -> OrderResponse:
        return cls(
            id=order.id,
            order_number=order.order_number,
            placement_id=order.placement_id,
            customer=_party(order.buyer_id, accounts),
            farmer=_party(order.seller_id, accounts),
            items=[
                OrderItemResponse(
                    product=_product(item, products),
                    quantity=item.quantity,
                    unit=item.unit,
                    price=item.unit_price,
                    total=item.line_total,
                )
                for item in order.items
            ],
            subtotal=order.subtotal,
            delivery_charge=order.delivery_fee,
            tax=order.tax,
            total=order.total,
            currency=order.currency,
            shipping_address=order.shipping_address,
            payment_method=order.payment_method,
            notes=order.notes,
            status=order.status,
            timeline=[
                TimelineEntryResponse(status=entry.status, timestamp=entry.timestamp, note=entry.note)
                for entry in order.timeline
            ],
            cancellation_reason=order.cancellation_reason,
            cancelled_by=order.cancelled_by,
            rating=order.rating,
            review=order.review,
            rated_at=order.rated_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


def _party(account_id, accounts) -> PartySummary:
    account = accounts.get(account_id)
    if account is None:
        return PartySummary(id=account_id)
    return PartySummary(
        id=account.id,
        first_name=account.first_name,
        last_name=account.last_name,
        farm_name=getattr(account, "farm_name", None),
        phone=account.phone,
    )


def _product(item, products) -> ProductSummary:
    product = products.get(item.product_id)
    if product is None:
        return ProductSummary(id=item.product_id, name=item.product_name)
    return ProductSummary(
        id=product.id,
        name=item.product_name,
        images=list(product.images or []),
        category=product.category,
    )


class PlacementFailureResponse(BaseModel):
    farmer: str
    products: list[str]
    error: dict


class PlacementResponse(BaseModel):
    message: str
    placement_id: str
    orders: list[OrderResponse]
    failures: list[PlacementFailureResponse] = Field(default_factory=list)


class PaginationResponse(BaseModel):
    current: int
    pages: int
    total: int
    has_next: bool
    has_prev: bool


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    pagination: PaginationResponse


class OrderEnvelope(BaseModel):
    message: str
    order: OrderResponse
