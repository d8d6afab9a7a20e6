"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer, String

from shared.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """An item was added to the shopping cart (or its quantity increased)."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_ref = String(required=True, max_length=120)
    size = String(max_length=20, default="")
    quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartLineUpdated:
    """The quantity or size of a cart line was changed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_ref = String(required=True, max_length=120)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    previous_size = String(max_length=20, default="")
    size = String(max_length=20, default="")


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    """An item was removed from the shopping cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_ref = String(required=True, max_length=120)


@storefront.event(part_of="ShoppingCart")
class ReferralApplied:
    """A referral code was resolved to a referrer and attached to the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    referral_code = String(required=True, max_length=120)
    referrer_id = Identifier(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCheckedOut:
    """The cart was converted to an order and emptied."""

    __version__ = 1

    cart_id = Identifier(required=True)
    order_id = Identifier(required=True)
