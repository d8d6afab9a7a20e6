"""Ledger effects of order transitions.

Every helper processes a wallet or affiliates command in the caller's unit of
work. If any of them raises, the order transition that caused it is rolled
back together with whatever ledger writes already ran.
"""

from protean.utils.globals import current_domain

from affiliates.commission.settlement import CreditCommission, DeclineCommission, OpenCommission
from ordering.order.order import FulfillmentStatus
from wallet.account.rewards import CreditPurchaseReward, RedeemWallet, RestoreRedemption


def _process(command):
    return current_domain.process(command, asynchronous=False)


def redeem_wallet(customer_id, order_id, amount):
    if amount > 0:
        _process(RedeemWallet(customer_id=customer_id, order_id=order_id, amount=amount))


def restore_redemption(order, amount):
    """Give ``amount`` back to the order's customer. Zero is a no-op."""
    if amount > 0:
        _process(RestoreRedemption(customer_id=order.customer_id, order_id=order.id, amount=amount))


def open_commission(order):
    if not order.referred_by:
        return
    _process(
        OpenCommission(
            order_id=order.id,
            referrer_id=order.referred_by,
            referred_customer_id=order.customer_id,
            payable_amount=order.payable_amount,
            order_cancelled=FulfillmentStatus(order.fulfillment_status) == FulfillmentStatus.CANCELLED,
        )
    )


def settle_delivery(order):
    """Lock the purchase reward and credit the referrer's commission."""
    _process(
        CreditPurchaseReward(
            customer_id=order.customer_id,
            order_id=order.id,
            payable_amount=order.payable_amount,
            delivered_at=order.delivered_at,
        )
    )
    if order.referred_by:
        _process(CreditCommission(order_id=order.id, credited_at=order.delivered_at))


def settle_cancellation(order, released):
    restore_redemption(order, released)
    if order.referred_by:
        _process(DeclineCommission(order_id=order.id, reason=order.cancellation_reason or "Order cancelled"))
