"""Pricing Engine: turns a cart into a price quote.

For each cart line the catalogue is consulted: out-of-stock lines are dropped
silently, unknown items are an error. Two independent discounts stack on the
line total:

- referral discount: ``referral_discount_percent`` of the total when the cart
  carries a referrer
- wallet redemption: ``min(spendable_balance, wallet_redemption_cap_percent of
  the total)`` when the customer holds a spendable balance

Percentages are taken with integer floor arithmetic on the smallest currency
unit. A quote is advisory; checkout re-prices and debits the wallet itself.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, List, String, ValueObject
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.collaborators import get_catalogue
from ordering.order.order import OrderItem
from shared.config import get_settings
from shared.domain import storefront
from wallet.account.account import CustomerAccount
from wallet.account.registration import resolve_referrer

logger = structlog.get_logger(__name__)


def percent_of(amount: int, percent: int) -> int:
    """``percent`` % of ``amount``, rounded down."""
    return amount * percent // 100


@storefront.value_object(part_of="ShoppingCart")
class PriceQuote:
    items = List(content_type=ValueObject(OrderItem))
    total_amount = Integer(required=True, min_value=0)
    referral_discount = Integer(default=0, min_value=0)
    wallet_redemption = Integer(default=0, min_value=0)
    referrer_id = Identifier()

    @property
    def discount(self) -> int:
        return self.referral_discount + self.wallet_redemption

    @property
    def payable_amount(self) -> int:
        return self.total_amount - self.discount


def price_lines(lines) -> list[OrderItem]:
    """Snapshot in-stock cart lines with their current catalogue price."""
    catalogue = get_catalogue()
    priced = []
    for line in lines:
        item = catalogue.get_item(line.item_ref)
        if item is None:
            raise ObjectNotFoundError({"item_ref": [f"Item {line.item_ref} does not exist"]})
        if not item.in_stock:
            logger.debug("Dropping out-of-stock line", item_ref=line.item_ref)
            continue
        priced.append(
            OrderItem(
                item_ref=line.item_ref,
                quantity=line.quantity,
                size=line.size or "",
                unit_price=item.unit_price,
            )
        )
    return priced


def price_cart(lines, referrer_id=None, spendable_balance=0) -> PriceQuote:
    """Compute the quote for ``lines``. Raises ValidationError when nothing is payable."""
    settings = get_settings()
    items = price_lines(lines)
    total_amount = sum(item.line_total for item in items)
    if total_amount == 0:
        raise ValidationError({"cart": ["Cart has no purchasable items"]})

    referral_discount = percent_of(total_amount, settings.referral_discount_percent) if referrer_id else 0
    wallet_redemption = 0
    if spendable_balance > 0:
        wallet_redemption = min(spendable_balance, percent_of(total_amount, settings.wallet_redemption_cap_percent))

    # Discounts never exceed the total
    wallet_redemption = min(wallet_redemption, total_amount - referral_discount)

    return PriceQuote(
        items=items,
        total_amount=total_amount,
        referral_discount=referral_discount,
        wallet_redemption=wallet_redemption,
        referrer_id=referrer_id,
    )


def spendable_balance_of(customer_id) -> int:
    account = current_domain.repository_for(CustomerAccount).get_or_none(customer_id)
    return account.spendable_balance if account is not None else 0


@storefront.command(part_of="ShoppingCart")
class ComputeCartTotal:
    customer_id = Identifier(required=True)
    referral_code = String(max_length=120)


@storefront.command_handler(part_of=ShoppingCart)
class CartPricingHandler:
    @handle(ComputeCartTotal)
    def compute_cart_total(self, command):
        cart = current_domain.repository_for(ShoppingCart).get_or_none(command.customer_id)
        lines = cart.lines if cart is not None else []

        if command.referral_code:
            referrer_id = resolve_referrer(command.referral_code, command.customer_id).id
        else:
            referrer_id = cart.referrer_id if cart is not None else None

        return price_cart(lines, referrer_id, spendable_balance_of(command.customer_id))
