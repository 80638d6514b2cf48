"""Order endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.security import SessionContext, get_session_context, require_customer, require_staff
from app.db.session import get_db
from app.models.order import Order, Receipt
from app.schemas.order import (
    OrderAdvance,
    OrderCard,
    OrderCreate,
    OrderRead,
    PaymentLinkRequest,
    PaymentLinkResponse,
    ReceiptRead,
)
from app.services.errors import (
    AllocationError,
    CanteenError,
    InvalidTransitionError,
    MenuItemNotFoundError,
    OrderBusyError,
    OrderNotFoundError,
    PersistenceError,
    ValidationError,
)
from app.services.menu_service import build_cart
from app.services.order_queries import list_active_orders, list_user_orders
from app.services.order_service import checkout, get_order_for
from app.services.order_status import advance, next_status, status_badge
from app.services.payment import build_upi_link
from app.services.receipt_service import get_receipt_for
from app.services.token_allocator import TokenAllocator, get_token_allocator
from app.services.wait_time_estimator import WaitTimeEstimator, get_wait_time_estimator

router: APIRouter = APIRouter()


def _to_http(exc: CanteenError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"code": exc.code, "message": str(exc)})
    if isinstance(exc, OrderNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    if isinstance(exc, (InvalidTransitionError, OrderBusyError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, MenuItemNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (AllocationError, PersistenceError)):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def serialize_order_card(order: Order) -> OrderCard:
    label, color = status_badge(order.status)
    return OrderCard(
        **OrderRead.model_validate(order).model_dump(),
        status_label=label,
        status_color=color,
        next_action=next_status(order.status),
    )


@router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def place_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_customer),
    allocator: TokenAllocator = Depends(get_token_allocator),
    estimator: WaitTimeEstimator = Depends(get_wait_time_estimator),
) -> Order:
    """Place an instant or scheduled order from the submitted cart."""
    try:
        return checkout(
            db,
            ctx,
            [(item.menu_item_id, item.quantity) for item in payload.items],
            payload.order_type,
            payload.pickup_time,
            payload.payment_choice,
            allocator=allocator,
            estimator=estimator,
        )
    except CanteenError as exc:
        raise _to_http(exc) from exc


@router.post("/payment-link", response_model=PaymentLinkResponse)
def payment_link(
    payload: PaymentLinkRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_customer),
) -> PaymentLinkResponse:
    """Price the cart and return the UPI link rendered as a QR code at checkout."""
    try:
        cart = build_cart(db, [(item.menu_item_id, item.quantity) for item in payload.items])
    except CanteenError as exc:
        raise _to_http(exc) from exc
    if cart.is_empty():
        raise _to_http(ValidationError("EmptyCart", "Your cart is empty"))
    return PaymentLinkResponse(amount=cart.total_price, upi_link=build_upi_link(cart.total_price))


@router.get("/me", response_model=list[OrderRead])
def get_my_orders(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> list[Order]:
    """Return the caller's orders, most recent first."""
    return list_user_orders(db, ctx.user_id)


@router.get("/active", response_model=list[OrderCard])
def get_active_orders(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
) -> list[OrderCard]:
    """Return the staff queue, oldest first."""
    return [serialize_order_card(order) for order in list_active_orders(db)]


@router.get("/{order_id}", response_model=OrderRead)
def get_order_detail(
    order_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> Order:
    try:
        return get_order_for(db, ctx, order_id)
    except CanteenError as exc:
        raise _to_http(exc) from exc


@router.post("/{order_id}/advance", response_model=OrderCard)
def advance_order(
    order_id: str,
    payload: OrderAdvance,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
) -> OrderCard:
    """Move an order to its next status."""
    try:
        order = advance(db, ctx, order_id, payload.status)
    except CanteenError as exc:
        raise _to_http(exc) from exc
    return serialize_order_card(order)


@router.get("/{order_id}/receipt", response_model=ReceiptRead)
def get_order_receipt(
    order_id: str,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> Receipt:
    try:
        return get_receipt_for(db, ctx, order_id)
    except CanteenError as exc:
        raise _to_http(exc) from exc
