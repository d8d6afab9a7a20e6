"""Order payment verification.

The gateway's callback carries ``gateway_payment_id`` and an HMAC signature.
The first verification resolves the payment for good; any later call returns
the stored outcome without touching the ledgers again.

A signature mismatch is committed (payment Failed, redemption returned)
before ``verify_payment`` reports it to the caller.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.order import ledger
from ordering.order.order import Order
from payments.gateway import get_gateway
from shared.domain import storefront
from shared.exceptions import PaymentVerificationError

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class VerifyPayment:
    order_id = Identifier(required=True)
    gateway_payment_id = String(required=True, max_length=120)
    signature = String(required=True, max_length=255)


@storefront.command_handler(part_of=Order)
class VerifyPaymentHandler:
    @handle(VerifyPayment)
    def verify_payment(self, command):
        """Returns ``(order, verified)``; ``verified`` is None when the payment was already resolved."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if order.is_payment_resolved:
            logger.info("Payment already resolved", order_id=order.id, payment_status=order.payment_status)
            return order, None

        verified = get_gateway().verify_payment_signature(
            order.gateway_order_id,
            command.gateway_payment_id,
            command.signature,
        )
        if verified:
            order.confirm_payment(command.gateway_payment_id, command.signature)
            repo.add(order)
            ledger.open_commission(order)
            logger.info("Payment verified", order_id=order.id, gateway_payment_id=command.gateway_payment_id)
            return order, True

        released = order.fail_payment(
            reason="Signature mismatch",
            gateway_payment_id=command.gateway_payment_id,
            signature=command.signature,
        )
        repo.add(order)
        ledger.restore_redemption(order, released)
        logger.warning("Payment signature mismatch", order_id=order.id)
        return order, False


def verify_payment(order_id, gateway_payment_id, signature):
    """Verify a payment callback and return the order.

    Raises PaymentVerificationError after the failed payment is recorded.
    """
    order, verified = current_domain.process(
        VerifyPayment(order_id=order_id, gateway_payment_id=gateway_payment_id, signature=signature),
        asynchronous=False,
    )
    if verified is False:
        raise PaymentVerificationError({"signature": ["Payment signature verification failed"]})
    return order
