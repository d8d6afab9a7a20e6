"""Order fulfillment: administrator status updates."""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from ordering.order import ledger
from ordering.order.order import CancellationActor, FulfillmentStatus, Order
from shared.domain import storefront
from shared.exceptions import AuthError

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    new_status = String(required=True, max_length=20, choices=FulfillmentStatus)
    requester_id = Identifier(required=True)
    is_admin = Boolean(default=False)


@storefront.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        if not command.is_admin:
            raise AuthError({"requester": ["Only administrators can update order status"]})

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous_status = order.fulfillment_status

        if FulfillmentStatus(command.new_status) == FulfillmentStatus.CANCELLED:
            released = order.cancel(CancellationActor.ADMIN, reason="Cancelled by administrator")
            repo.add(order)
            ledger.settle_cancellation(order, released)
        else:
            order.advance_to(command.new_status)
            repo.add(order)
            if FulfillmentStatus(order.fulfillment_status) == FulfillmentStatus.DELIVERED:
                ledger.settle_delivery(order)

        logger.info(
            "Order status updated",
            order_id=order.id,
            previous_status=previous_status,
            new_status=order.fulfillment_status,
            requester_id=command.requester_id,
        )
        return order
