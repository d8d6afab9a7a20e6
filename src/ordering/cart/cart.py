"""Shopping Cart aggregate: one cart per customer, converted to an Order at checkout.

The cart's identity is the customer id. It holds the lines a customer has
selected and, optionally, the referrer resolved from a referral code. Prices
are never stored on the cart; they are looked up when the cart is priced.

A line is identified by its item and size together, so the same item may sit
in the cart once per size.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, List, String, ValueObject

from ordering.cart.events import (
    CartCheckedOut,
    CartItemAdded,
    CartItemRemoved,
    CartLineUpdated,
    ReferralApplied,
)
from shared.domain import storefront


@storefront.value_object(part_of="ShoppingCart")
class CartLine:
    item_ref = String(required=True, max_length=120)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=20, default="")


@storefront.aggregate
class ShoppingCart:
    lines = List(content_type=ValueObject(CartLine))
    referrer_id = Identifier()
    referral_code = String(max_length=120)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(id=customer_id, created_at=now, updated_at=now)

    @property
    def customer_id(self) -> str:
        return self.id

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def _find_line(self, item_ref, size):
        return next((line for line in self.lines if line.item_ref == item_ref and (line.size or "") == size), None)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, item_ref, quantity=1, size=""):
        """Add an item to the cart (or increase quantity if already present)."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self._find_line(item_ref, size)
        if existing:
            merged = CartLine(item_ref=item_ref, quantity=existing.quantity + quantity, size=size)
            self.lines = [merged if line == existing else line for line in self.lines]
        else:
            self.lines = [*self.lines, CartLine(item_ref=item_ref, quantity=quantity, size=size)]

        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemAdded(
                cart_id=self.id,
                item_ref=item_ref,
                size=size,
                quantity=quantity,
            )
        )

    def update_line(self, item_ref, quantity, size="", current_size=None):
        """Set the quantity and size of one cart line.

        The line is the one holding ``item_ref`` in ``current_size``. When
        ``current_size`` is omitted the item must sit in the cart in a single
        size. Moving a line onto a size the cart already holds merges the two.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        if current_size is None:
            candidates = [line for line in self.lines if line.item_ref == item_ref]
            if len(candidates) > 1:
                raise ValidationError({"size": [f"Item {item_ref} is in the cart in several sizes"]})
            line = candidates[0] if candidates else None
        else:
            line = self._find_line(item_ref, current_size)
        if line is None:
            raise ValidationError({"item_ref": ["Item not found in cart"]})

        previous_quantity = line.quantity
        target = self._find_line(item_ref, size)
        if target is not None and target != line:
            merged = CartLine(item_ref=item_ref, quantity=target.quantity + quantity, size=size)
            self.lines = [merged if each == target else each for each in self.lines if each != line]
        else:
            updated = CartLine(item_ref=item_ref, quantity=quantity, size=size)
            self.lines = [updated if each == line else each for each in self.lines]
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLineUpdated(
                cart_id=self.id,
                item_ref=item_ref,
                previous_quantity=previous_quantity,
                new_quantity=quantity,
                previous_size=line.size or "",
                size=size,
            )
        )

    def remove_item(self, item_ref, size=None):
        """Remove the line holding ``item_ref`` in ``size``, or every size when omitted."""
        def matches(line):
            return line.item_ref == item_ref and (size is None or (line.size or "") == size)

        remaining = [line for line in self.lines if not matches(line)]
        if len(remaining) == len(self.lines):
            raise ValidationError({"item_ref": ["Item not found in cart"]})

        self.lines = remaining
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=self.id, item_ref=item_ref))

    # -------------------------------------------------------------------
    # Referral
    # -------------------------------------------------------------------
    def apply_referral(self, referral_code, referrer_id):
        """Attach a resolved referrer. A later code replaces an earlier one."""
        if referrer_id == self.id:
            raise ValidationError({"referral_code": ["You cannot use your own referral code"]})

        self.referral_code = referral_code
        self.referrer_id = referrer_id
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ReferralApplied(
                cart_id=self.id,
                referral_code=referral_code,
                referrer_id=referrer_id,
            )
        )

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def check_out(self, order_id):
        """Empty the cart after it was converted into ``order_id``."""
        if self.is_empty:
            raise ValidationError({"cart": ["Cannot check out an empty cart"]})

        self.lines = []
        self.referral_code = None
        self.referrer_id = None
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCheckedOut(cart_id=self.id, order_id=order_id))
