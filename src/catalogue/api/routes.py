"""FastAPI endpoints for the Catalogue domain."""

from fastapi import APIRouter, Depends, Query, Request

from catalogue.api.schemas import (
    CreateProductRequest,
    ProductListResponse,
    ProductResponse,
    StatusResponse,
    UpdateProductRequest,
)
from catalogue.product.creation import CreateProduct
from catalogue.product.management import RemoveProduct, UpdateProduct
from identity.api.dependencies import current_principal
from identity.auth.tokens import Principal

product_router = APIRouter(prefix="/products", tags=["products"])


def _render(request: Request, products) -> list[ProductResponse]:
    producers = request.app.state.services.product_queries.producers_of(products)
    return [ProductResponse.from_product(p, producers.get(p.producer_id)) for p in products]


# --- Reads ---


@product_router.get("", response_model=ProductListResponse)
def list_products(
    request: Request,
    category: str | None = None,
    location: str | None = None,
    min_price: float | None = Query(None, alias="minPrice", ge=0),
    max_price: float | None = Query(None, alias="maxPrice", ge=0),
    farmer: str | None = None,
    search: str | None = None,
) -> ProductListResponse:
    products = request.app.state.services.product_queries.list_products(
        category=category,
        location=location,
        min_price=min_price,
        max_price=max_price,
        producer_id=farmer,
        search=search,
    )
    return ProductListResponse(products=_render(request, products), count=len(products))


@product_router.get("/farmer/{producer_id}", response_model=ProductListResponse)
def list_producer_products(producer_id: str, request: Request) -> ProductListResponse:
    products = request.app.state.services.product_queries.list_by_producer(producer_id)
    return ProductListResponse(products=_render(request, products), count=len(products))


@product_router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, request: Request) -> ProductResponse:
    product = request.app.state.services.product_queries.get_product(product_id)
    return _render(request, [product])[0]


# --- Writes ---


@product_router.post("", status_code=201, response_model=ProductResponse)
def create_product(
    body: CreateProductRequest,
    request: Request,
    principal: Principal = Depends(current_principal),
) -> ProductResponse:
    command = CreateProduct(
        name=body.name,
        description=body.description,
        category=body.category,
        price=body.price,
        unit=body.unit,
        available_quantity=body.available_quantity,
        location=body.location,
        images=body.images,
        tags=body.tags,
        is_organic=body.is_organic,
        harvest_date=body.harvest_date,
        expiry_date=body.expiry_date,
    )
    product = request.app.state.services.product_creation.create_product(principal, command)
    return _render(request, [product])[0]


@product_router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    body: UpdateProductRequest,
    request: Request,
    principal: Principal = Depends(current_principal),
) -> ProductResponse:
    command = UpdateProduct(
        product_id=product_id,
        name=body.name,
        description=body.description,
        category=body.category,
        price=body.price,
        unit=body.unit,
        available_quantity=body.available_quantity,
        location=body.location,
        images=body.images,
        tags=body.tags,
        is_organic=body.is_organic,
        is_available=body.is_available,
        harvest_date=body.harvest_date,
        expiry_date=body.expiry_date,
    )
    product = request.app.state.services.product_management.update_product(principal, command)
    return _render(request, [product])[0]


@product_router.delete("/{product_id}", response_model=StatusResponse)
def remove_product(
    product_id: str,
    request: Request,
    principal: Principal = Depends(current_principal),
) -> StatusResponse:
    request.app.state.services.product_management.remove_product(principal, RemoveProduct(product_id=product_id))
    return StatusResponse(message="Product deleted successfully")
