"""Payment expiry reconciliation.

Orders whose payment is still Pending after the configured window are
cancelled by the system: the payment becomes Failed, any wallet redemption
is returned and a pending commission is declined. An order that was already
cancelled only has its payment failed. Runs periodically from the scheduler.

Each order is expired by its own ``ExpirePayment`` command, so one failure
does not hold back the rest of the sweep.
"""

from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain

from ordering.order import ledger
from ordering.order.order import Order
from shared.config import get_settings
from shared.domain import storefront

logger = structlog.get_logger(__name__)

EXPIRY_REASON = "Payment window expired"


@storefront.command(part_of="Order")
class ExpirePayment:
    order_id = Identifier(required=True)
    cutoff = DateTime(required=True)


def _is_stale(order, cutoff):
    return not order.is_payment_resolved and order.created_at is not None and order.created_at <= cutoff


@storefront.command_handler(part_of=Order)
class PaymentExpiryHandler:
    @handle(ExpirePayment)
    def expire_payment(self, command):
        """Returns True when the order was expired by this command."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if not _is_stale(order, command.cutoff):
            return False

        if order.is_terminal:
            released = order.fail_payment(EXPIRY_REASON)
            repo.add(order)
            ledger.restore_redemption(order, released)
        else:
            released = order.expire_payment(EXPIRY_REASON)
            repo.add(order)
            ledger.settle_cancellation(order, released)
        return True


def expire_stale_payments(as_of=None, older_than_minutes=None):
    """Expire every payment still Pending ``older_than_minutes`` before ``as_of``.

    Returns the ids of the orders expired by this run.
    """
    minutes = older_than_minutes or get_settings().pending_payment_expiry_minutes
    cutoff = (as_of or datetime.now(UTC)) - timedelta(minutes=minutes)

    expired = []
    for candidate in current_domain.repository_for(Order).pending_payments():
        if not _is_stale(candidate, cutoff):
            continue
        try:
            if current_domain.process(ExpirePayment(order_id=candidate.id, cutoff=cutoff), asynchronous=False):
                expired.append(candidate.id)
        except Exception:
            logger.exception("Failed to expire payment", order_id=candidate.id)

    if expired:
        logger.info("Expired stale payments", count=len(expired), cutoff=cutoff.isoformat())
    return expired
