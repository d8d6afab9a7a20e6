"""Checkout: converts the customer's cart into an order.

Steps, in order:
    1. Validate the shipping address belongs to the customer.
    2. Price the cart (out-of-stock lines dropped, referral and wallet discounts).
    3. Register a payment intent with the gateway for the payable amount.
    4. Debit the wallet redemption.
    5. Save the order (payment Pending, fulfillment Pending) and empty the cart.

Steps 4 and 5 share one unit of work, and a gateway failure aborts before
anything is written. Two checkouts racing on the same cart conflict on the
cart's version; the retried one finds the cart empty.
"""

from uuid import uuid4

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.cart.pricing import price_cart, spendable_balance_of
from ordering.collaborators import get_address_book
from ordering.order import ledger
from ordering.order.order import Order, PaymentMethod
from payments.gateway import get_gateway
from shared.config import get_settings
from shared.domain import storefront
from shared.exceptions import GatewayError

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    address_id = Identifier(required=True)
    payment_method = String(required=True, max_length=30, choices=PaymentMethod)


def _validate_address(address_id, customer_id):
    address = get_address_book().get_address(address_id)
    if address is None:
        raise ObjectNotFoundError({"address_id": [f"Address {address_id} does not exist"]})
    if address.owner_id != customer_id:
        raise ValidationError({"address_id": ["Address does not belong to the customer"]})


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        _validate_address(command.address_id, command.customer_id)
        settings = get_settings()

        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.get_or_none(command.customer_id)
        if cart is None or cart.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})

        quote = price_cart(cart.lines, cart.referrer_id, spendable_balance_of(command.customer_id))
        order_id = str(uuid4())

        intent = get_gateway().create_intent(
            amount=quote.payable_amount,
            currency=settings.currency,
            idempotency_key=order_id,
            metadata={"order_id": order_id, "customer_id": command.customer_id},
        )
        if not intent.success:
            logger.warning(
                "Payment intent failed",
                customer_id=command.customer_id,
                order_id=order_id,
                reason=intent.failure_reason,
            )
            raise GatewayError({"gateway": [intent.failure_reason or "Payment intent could not be created"]})

        ledger.redeem_wallet(command.customer_id, order_id, quote.wallet_redemption)

        order = Order.place(
            order_id=order_id,
            customer_id=command.customer_id,
            items=quote.items,
            address_id=command.address_id,
            quote=quote,
            payment_method=command.payment_method,
            gateway_order_id=intent.gateway_order_id,
            currency=settings.currency,
            referred_by=quote.referrer_id,
        )
        current_domain.repository_for(Order).add(order)

        cart.check_out(order_id)
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=order_id,
            customer_id=command.customer_id,
            payable_amount=order.payable_amount,
            gateway_order_id=order.gateway_order_id,
        )
        return order
