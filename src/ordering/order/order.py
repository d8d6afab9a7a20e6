"""Order aggregate: the core of the ordering domain.

An order is created by checkout with its prices, discounts, and payable
amount fixed, and afterwards changes only through the transitions below.
Concurrent writers are resolved on the order's version: the second commit
is retried against the fresh state and re-checks the transition.

Payment (exactly once):
    Pending → Success | Failed

Fulfillment (forward, one step at a time):
    Pending → Ordered → Shipped → OutForDelivery → Delivered
    any non-terminal state → Cancelled

Delivered and Cancelled are terminal.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import InvalidStateError, ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, List, Status, String, ValueObject

from ordering.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderStatusAdvanced,
    PaymentConfirmed,
    PaymentFailed,
    WalletRedemptionReleased,
)
from shared.domain import storefront


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentStatus(Enum):
    PENDING = "Pending"
    SUCCESS = "Success"
    FAILED = "Failed"


class FulfillmentStatus(Enum):
    PENDING = "Pending"
    ORDERED = "Ordered"
    SHIPPED = "Shipped"
    OUT_FOR_DELIVERY = "OutForDelivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "Cash on delivery"
    CARD = "Credit/Debit card"
    NET_BANKING = "Net banking"
    UPI = "UPI"
    WALLET = "Wallet"


class CancellationActor(Enum):
    CUSTOMER = "Customer"
    ADMIN = "Admin"
    SYSTEM = "System"


# Forward fulfillment path; each state may only move to the next one
_FULFILLMENT_PATH = [
    FulfillmentStatus.PENDING,
    FulfillmentStatus.ORDERED,
    FulfillmentStatus.SHIPPED,
    FulfillmentStatus.OUT_FOR_DELIVERY,
    FulfillmentStatus.DELIVERED,
]

_TERMINAL_STATES = {FulfillmentStatus.DELIVERED, FulfillmentStatus.CANCELLED}

_FULFILLMENT_TRANSITIONS = {
    current: [_FULFILLMENT_PATH[index + 1], FulfillmentStatus.CANCELLED]
    for index, current in enumerate(_FULFILLMENT_PATH[:-1])
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class OrderItem:
    """A line captured at checkout. Later catalogue changes never alter it."""

    item_ref = String(required=True, max_length=120)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=20, default="")
    unit_price = Integer(required=True, min_value=0)

    @property
    def line_total(self) -> int:
        return self.quantity * self.unit_price


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    items = List(content_type=ValueObject(OrderItem))
    address_id = Identifier(required=True)
    total_amount = Integer(required=True, min_value=1)
    referral_discount = Integer(default=0, min_value=0)
    wallet_redemption = Integer(default=0, min_value=0)
    payable_amount = Integer(required=True, min_value=0)
    currency = String(max_length=3, default="INR")
    payment_method = String(required=True, max_length=30, choices=PaymentMethod)
    payment_status = Status(
        PaymentStatus,
        default=PaymentStatus.PENDING,
        transitions={PaymentStatus.PENDING: [PaymentStatus.SUCCESS, PaymentStatus.FAILED]},
    )
    fulfillment_status = Status(
        FulfillmentStatus,
        default=FulfillmentStatus.PENDING,
        transitions=_FULFILLMENT_TRANSITIONS,
    )
    gateway_order_id = String(required=True, max_length=120)
    gateway_payment_id = String(max_length=120)
    gateway_signature = String(max_length=255)
    payment_failure_reason = String(max_length=255)
    referred_by = Identifier()
    redemption_released = Boolean(default=False)
    cancelled_by = String(max_length=10, choices=CancellationActor)
    cancellation_reason = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()
    paid_at = DateTime()
    delivered_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order needs at least one item"]})

    @invariant.post
    def payable_amount_must_match_discounts(self):
        if self.payable_amount != self.total_amount - self.referral_discount - self.wallet_redemption:
            raise ValidationError({"payable_amount": ["Payable amount does not match total and discounts"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_id,
        customer_id,
        items,
        address_id,
        quote,
        payment_method,
        gateway_order_id,
        currency="INR",
        referred_by=None,
    ):
        """Create a new order from a priced cart.

        Args:
            order_id: Identity generated before the gateway intent was created.
            items: List of OrderItem snapshots (in-stock lines only).
            quote: The PriceQuote computed for the cart.
            gateway_order_id: Correlation id returned by the gateway intent.
        """
        if quote.total_amount != sum(item.line_total for item in items):
            raise ValidationError({"total_amount": ["Order total does not match its lines"]})
        if quote.discount > quote.total_amount:
            raise ValidationError({"discount": ["Discount cannot exceed the order total"]})

        now = datetime.now(UTC)
        order = cls(
            id=order_id,
            customer_id=customer_id,
            items=items,
            address_id=address_id,
            total_amount=quote.total_amount,
            referral_discount=quote.referral_discount,
            wallet_redemption=quote.wallet_redemption,
            payable_amount=quote.payable_amount,
            currency=currency,
            payment_method=payment_method,
            gateway_order_id=gateway_order_id,
            referred_by=referred_by,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=order.id,
                customer_id=customer_id,
                total_amount=order.total_amount,
                referral_discount=order.referral_discount,
                wallet_redemption=order.wallet_redemption,
                payable_amount=order.payable_amount,
                currency=currency,
                payment_method=order.payment_method,
                gateway_order_id=gateway_order_id,
                referred_by=referred_by,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State helpers
    # -------------------------------------------------------------------
    @property
    def is_payment_resolved(self) -> bool:
        return PaymentStatus(self.payment_status) != PaymentStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return FulfillmentStatus(self.fulfillment_status) in _TERMINAL_STATES

    def _assert_payment_pending(self):
        if self.is_payment_resolved:
            raise InvalidStateError({"payment_status": [f"Payment is already {self.payment_status}"]})

    def _release_redemption(self, now):
        """Mark the redeemed wallet amount as owed back, at most once per order.

        Returns the amount the wallet must restore (0 when nothing is owed).
        """
        if self.wallet_redemption <= 0 or self.redemption_released:
            return 0

        self.redemption_released = True
        self.raise_(
            WalletRedemptionReleased(
                order_id=self.id,
                customer_id=self.customer_id,
                amount=self.wallet_redemption,
                released_at=now,
            )
        )
        return self.wallet_redemption

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def confirm_payment(self, gateway_payment_id, signature):
        """Record a verified gateway payment."""
        self._assert_payment_pending()

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.SUCCESS.value
        self.gateway_payment_id = gateway_payment_id
        self.gateway_signature = signature
        self.paid_at = now
        self.updated_at = now

        self.raise_(
            PaymentConfirmed(
                order_id=self.id,
                customer_id=self.customer_id,
                payable_amount=self.payable_amount,
                gateway_payment_id=gateway_payment_id,
                referred_by=self.referred_by,
                confirmed_at=now,
            )
        )

    def fail_payment(self, reason, gateway_payment_id=None, signature=None):
        """Record that the payment will never succeed.

        Returns the redeemed amount to restore to the customer's wallet.
        """
        self._assert_payment_pending()

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.FAILED.value
        self.payment_failure_reason = reason
        if gateway_payment_id:
            self.gateway_payment_id = gateway_payment_id
        if signature:
            self.gateway_signature = signature
        self.updated_at = now

        self.raise_(
            PaymentFailed(
                order_id=self.id,
                customer_id=self.customer_id,
                reason=reason,
                failed_at=now,
            )
        )
        return self._release_redemption(now)

    # -------------------------------------------------------------------
    # Fulfillment
    # -------------------------------------------------------------------
    def advance_to(self, new_status):
        """Move fulfillment exactly one step forward."""
        current = FulfillmentStatus(self.fulfillment_status)
        target = FulfillmentStatus(new_status)

        if target == FulfillmentStatus.CANCELLED:
            raise ValidationError({"status": ["Use cancel() to cancel an order"]})
        if current in _TERMINAL_STATES:
            raise InvalidStateError({"fulfillment_status": [f"Order is already {current.value}"]})

        expected = _FULFILLMENT_PATH[_FULFILLMENT_PATH.index(current) + 1]
        if target != expected:
            raise InvalidStateError(
                {"fulfillment_status": [f"Cannot transition from {current.value} to {target.value}"]}
            )
        if PaymentStatus(self.payment_status) != PaymentStatus.SUCCESS:
            raise InvalidStateError(
                {"payment_status": [f"Order cannot be fulfilled while payment is {self.payment_status}"]}
            )

        now = datetime.now(UTC)
        self.fulfillment_status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusAdvanced(
                order_id=self.id,
                previous_status=current.value,
                new_status=target.value,
                advanced_at=now,
            )
        )

        if target == FulfillmentStatus.DELIVERED:
            self.delivered_at = now
            self.raise_(
                OrderDelivered(
                    order_id=self.id,
                    customer_id=self.customer_id,
                    payable_amount=self.payable_amount,
                    referred_by=self.referred_by,
                    delivered_at=now,
                )
            )

    def cancel(self, cancelled_by, reason=None):
        """Cancel a non-terminal order.

        Returns the redeemed amount to restore to the customer's wallet.
        """
        current = FulfillmentStatus(self.fulfillment_status)
        if current in _TERMINAL_STATES:
            raise InvalidStateError({"fulfillment_status": [f"Order is already {current.value}"]})

        now = datetime.now(UTC)
        self.fulfillment_status = FulfillmentStatus.CANCELLED.value
        self.cancelled_by = CancellationActor(cancelled_by).value
        self.cancellation_reason = reason
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=self.id,
                customer_id=self.customer_id,
                previous_status=current.value,
                cancelled_by=CancellationActor(cancelled_by).value,
                reason=reason,
                cancelled_at=now,
            )
        )
        return self._release_redemption(now)

    def expire_payment(self, reason="Payment window expired"):
        """Give up on a payment that never resolved: fail it and cancel the order."""
        released = self.fail_payment(reason)
        return released + self.cancel(CancellationActor.SYSTEM, reason=reason)
