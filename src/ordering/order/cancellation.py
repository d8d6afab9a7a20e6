"""Order cancellation: command and handler."""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from ordering.order import ledger
from ordering.order.order import CancellationActor, Order
from shared.domain import storefront
from shared.exceptions import AuthError

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    is_admin = Boolean(default=False)
    reason = String(max_length=255)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if not command.is_admin and order.customer_id != command.requester_id:
            raise AuthError({"requester": ["You can only cancel your own orders"]})

        released = order.cancel(
            cancelled_by=CancellationActor.ADMIN if command.is_admin else CancellationActor.CUSTOMER,
            reason=command.reason,
        )
        repo.add(order)
        ledger.settle_cancellation(order, released)

        logger.info("Order cancelled", order_id=order.id, requester_id=command.requester_id)
        return order
