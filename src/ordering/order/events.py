"""Domain events for the Order aggregate.

Events are immutable facts recorded in the event store when the order that
raised them is committed. The ledger effects they describe (rewards,
commissions, redemption refunds) are applied by the order's command handlers
in the same unit of work, so an event never outlives a rolled-back ledger
write.
"""

from protean.fields import DateTime, Identifier, Integer, String

from shared.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """Checkout created an order with a registered gateway payment intent."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    total_amount = Integer(required=True)
    referral_discount = Integer(required=True)
    wallet_redemption = Integer(required=True)
    payable_amount = Integer(required=True)
    currency = String(max_length=3, default="INR")
    payment_method = String(required=True, max_length=30)
    gateway_order_id = String(required=True, max_length=120)
    referred_by = Identifier()
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentConfirmed:
    """The gateway signature matched; the payment is captured."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    payable_amount = Integer(required=True)
    gateway_payment_id = String(required=True, max_length=120)
    referred_by = Identifier()
    confirmed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentFailed:
    """Verification failed or the payment expired; the order will never be paid."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(required=True, max_length=255)
    failed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusAdvanced:
    """The order moved one step forward in fulfillment."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    advanced_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    """The order reached Delivered. Raised exactly once per order."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    payable_amount = Integer(required=True)
    referred_by = Identifier()
    delivered_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled before delivery."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    cancelled_by = String(required=True, max_length=10)
    reason = String(max_length=255)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class WalletRedemptionReleased:
    """A redeemed wallet amount is no longer owed to the order and goes back to the customer."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    amount = Integer(required=True)
    released_at = DateTime(required=True)
