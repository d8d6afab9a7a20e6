"""FastAPI routes for the Ordering domain: cart, checkout, and orders."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddToCartRequest,
    ApplyReferralRequest,
    CancelOrderRequest,
    CartResponse,
    CartTotalResponse,
    CheckoutRequest,
    OrderPageResponse,
    OrderResponse,
    UpdateCartLineRequest,
    UpdateOrderStatusRequest,
    VerifyPaymentRequest,
)
from ordering.cart.cart import ShoppingCart
from ordering.cart.items import AddToCart, RemoveFromCart, UpdateCartLine
from ordering.cart.pricing import ComputeCartTotal
from ordering.cart.referral import ApplyReferralCode
from ordering.order import queries
from ordering.order.cancellation import CancelOrder
from ordering.order.checkout import PlaceOrder
from ordering.order.fulfillment import UpdateOrderStatus
from ordering.order.payment import verify_payment
from shared.identity import Requester, get_requester


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _cart_response(cart: ShoppingCart) -> CartResponse:
    return CartResponse(
        customer_id=cart.id,
        lines=[line.to_dict() for line in cart.lines],
        referral_code=cart.referral_code,
    )


def _order_response(order) -> OrderResponse:
    return OrderResponse.model_validate(order.to_dict())


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(requester: Requester = Depends(get_requester)) -> CartResponse:
    cart = current_domain.repository_for(ShoppingCart).get_or_none(requester.customer_id)
    if cart is None:
        return CartResponse(customer_id=requester.customer_id)
    return _cart_response(cart)


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, requester: Requester = Depends(get_requester)) -> CartResponse:
    command = AddToCart(
        customer_id=requester.customer_id,
        item_ref=body.item_ref,
        quantity=body.quantity,
        size=body.size,
    )
    return _cart_response(_process(command))


@cart_router.put("/items/{item_ref}", response_model=CartResponse)
async def update_cart_line(
    item_ref: str, body: UpdateCartLineRequest, requester: Requester = Depends(get_requester)
) -> CartResponse:
    command = UpdateCartLine(
        customer_id=requester.customer_id,
        item_ref=item_ref,
        quantity=body.quantity,
        size=body.size,
        current_size=body.current_size,
    )
    return _cart_response(_process(command))


@cart_router.delete("/items/{item_ref}", response_model=CartResponse)
async def remove_cart_item(
    item_ref: str, size: str | None = None, requester: Requester = Depends(get_requester)
) -> CartResponse:
    command = RemoveFromCart(customer_id=requester.customer_id, item_ref=item_ref, size=size)
    return _cart_response(_process(command))


@cart_router.post("/referral", response_model=CartResponse)
async def apply_referral(body: ApplyReferralRequest, requester: Requester = Depends(get_requester)) -> CartResponse:
    command = ApplyReferralCode(customer_id=requester.customer_id, referral_code=body.referral_code)
    return _cart_response(_process(command))


@cart_router.get("/total", response_model=CartTotalResponse)
async def compute_cart_total(
    referral_code: str | None = None, requester: Requester = Depends(get_requester)
) -> CartTotalResponse:
    quote = _process(ComputeCartTotal(customer_id=requester.customer_id, referral_code=referral_code))
    return CartTotalResponse(
        total_amount=quote.total_amount,
        referral_discount=quote.referral_discount,
        wallet_redemption=quote.wallet_redemption,
        discount=quote.discount,
        payable_amount=quote.payable_amount,
        items=[item.to_dict() for item in quote.items],
    )


@cart_router.post("/checkout", status_code=201, response_model=OrderResponse)
async def checkout(body: CheckoutRequest, requester: Requester = Depends(get_requester)) -> OrderResponse:
    command = PlaceOrder(
        customer_id=requester.customer_id,
        address_id=body.address_id,
        payment_method=body.payment_method,
    )
    return _order_response(_process(command))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderPageResponse)
async def list_orders(
    status: str | None = None,
    payment_method: str | None = None,
    customer_id: str | None = None,
    page: int = 1,
    page_size: int = 10,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    requester: Requester = Depends(get_requester),
) -> OrderPageResponse:
    result = queries.list_orders(
        requester_id=requester.customer_id,
        is_admin=requester.is_admin,
        customer_id=customer_id,
        status=status,
        payment_method=payment_method,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return OrderPageResponse(
        orders=[_order_response(order) for order in result.orders],
        page=result.page,
        page_size=result.page_size,
        total=result.total,
        total_pages=result.total_pages,
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, requester: Requester = Depends(get_requester)) -> OrderResponse:
    order = queries.get_order(order_id, requester_id=requester.customer_id, is_admin=requester.is_admin)
    return _order_response(order)


@order_router.post("/{order_id}/payment", response_model=OrderResponse)
async def verify_order_payment(order_id: str, body: VerifyPaymentRequest) -> OrderResponse:
    """Gateway payment callback. The signature authenticates the caller."""
    order = verify_payment(order_id, gateway_payment_id=body.gateway_payment_id, signature=body.signature)
    return _order_response(order)


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str, body: CancelOrderRequest | None = None, requester: Requester = Depends(get_requester)
) -> OrderResponse:
    command = CancelOrder(
        order_id=order_id,
        requester_id=requester.customer_id,
        is_admin=requester.is_admin,
        reason=body.reason if body else None,
    )
    return _order_response(_process(command))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, requester: Requester = Depends(get_requester)
) -> OrderResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        new_status=body.status,
        requester_id=requester.customer_id,
        is_admin=requester.is_admin,
    )
    return _order_response(_process(command))
