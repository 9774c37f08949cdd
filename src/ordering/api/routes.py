"""FastAPI endpoints for the Ordering domain."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from identity.api.dependencies import current_principal
from identity.auth.tokens import Principal
from ordering.api.schemas import (
    CancelOrderRequest,
    OrderEnvelope,
    OrderListResponse,
    OrderResponse,
    PaginationResponse,
    PlaceOrderRequest,
    PlacementFailureResponse,
    PlacementResponse,
    RateOrderRequest,
    UpdateStatusRequest,
)
from ordering.order.cancellation import CancelOrder
from ordering.order.placement import OrderLine, PlaceOrder
from ordering.order.queries import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ordering.order.rating import RateOrder
from ordering.order.status import UpdateOrderStatus

router = APIRouter(prefix="/orders", tags=["orders"])


def _render(request: Request, orders) -> list[OrderResponse]:
    accounts, products = request.app.state.services.order_queries.references_for(orders)
    return [OrderResponse.from_order(order, accounts, products) for order in orders]


@router.post("", status_code=201, response_model=PlacementResponse)
def place_order(
    body: PlaceOrderRequest,
    request: Request,
    principal: Principal = Depends(current_principal),
):
    command = PlaceOrder(
        buyer_id=principal.account_id,
        items=[OrderLine(product_id=line.product_id, quantity=line.quantity) for line in body.items],
        shipping_address=body.shipping_address,
        payment_method=body.payment_method.lower(),
        notes=body.notes,
    )
    result = request.app.state.services.order_placement.place_order(principal, command)

    response = PlacementResponse(
        message="Order created successfully" if not result.failures else "Some orders could not be placed",
        placement_id=result.placement_id,
        orders=_render(request, result.orders),
        failures=[
            PlacementFailureResponse(farmer=f.seller_id, products=list(f.product_ids), error=f.error.to_dict())
            for f in result.failures
        ],
    )
    if result.is_partial:
        return JSONResponse(status_code=207, content=response.model_dump(mode="json"))
    return response


@router.get("", response_model=OrderListResponse)
def list_orders(
    request: Request,
    role: str | None = None,
    status: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    principal: Principal = Depends(current_principal),
) -> OrderListResponse:
    result = request.app.state.services.order_queries.list_orders(
        principal, role=role, status=status, page=page, page_size=page_size
    )
    return OrderListResponse(
        orders=_render(request, result.orders),
        pagination=PaginationResponse(
            current=result.page,
            pages=result.total_pages,
            total=result.total_count,
            has_next=result.has_next,
            has_prev=result.has_prev,
        ),
    )


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, request: Request, principal: Principal = Depends(current_principal)) -> OrderResponse:
    order = request.app.state.services.order_queries.get_order(principal, order_id)
    return _render(request, [order])[0]


@router.put("/{order_id}/status", response_model=OrderEnvelope)
def update_status(
    order_id: str,
    body: UpdateStatusRequest,
    request: Request,
    principal: Principal = Depends(current_principal),
) -> OrderEnvelope:
    command = UpdateOrderStatus(order_id=order_id, status=body.status, note=body.note)
    order = request.app.state.services.order_status.update_status(principal, command)
    return OrderEnvelope(message="Order status updated successfully", order=_render(request, [order])[0])


@router.post("/{order_id}/cancel", response_model=OrderEnvelope)
def cancel_order(
    order_id: str,
    request: Request,
    body: CancelOrderRequest | None = None,
    principal: Principal = Depends(current_principal),
) -> OrderEnvelope:
    command = CancelOrder(order_id=order_id, reason=body.reason if body else None)
    order = request.app.state.services.order_cancellation.cancel_order(principal, command)
    return OrderEnvelope(message="Order cancelled successfully", order=_render(request, [order])[0])


@router.post("/{order_id}/rate", response_model=OrderEnvelope)
def rate_order(
    order_id: str,
    body: RateOrderRequest,
    request: Request,
    principal: Principal = Depends(current_principal),
) -> OrderEnvelope:
    command = RateOrder(order_id=order_id, rating=body.rating, review=body.review)
    order = request.app.state.services.order_rating.rate_order(principal, command)
    return OrderEnvelope(message="Order rated successfully", order=_render(request, [order])[0])
