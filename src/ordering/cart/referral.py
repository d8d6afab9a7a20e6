"""Referral code application: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.cart.items import load_or_create_cart
from shared.domain import storefront
from wallet.account.registration import resolve_referrer

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class ApplyReferralCode:
    """Attach the referrer behind ``referral_code`` to the customer's cart."""

    customer_id = Identifier(required=True)
    referral_code = String(required=True, max_length=120)


@storefront.command_handler(part_of=ShoppingCart)
class ApplyReferralHandler:
    @handle(ApplyReferralCode)
    def apply_referral_code(self, command):
        referrer = resolve_referrer(command.referral_code, command.customer_id)

        repo = current_domain.repository_for(ShoppingCart)
        cart = load_or_create_cart(repo, command.customer_id)
        cart.apply_referral(referral_code=referrer.referral_code, referrer_id=referrer.id)
        repo.add(cart)

        logger.info("Referral applied", customer_id=command.customer_id, referrer_id=referrer.id)
        return cart
