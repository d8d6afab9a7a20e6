"""Domain events for the CustomerAccount aggregate."""

from protean.fields import DateTime, Identifier, Integer, List, String

from shared.domain import storefront


@storefront.event(part_of="CustomerAccount")
class AccountOpened:
    """A wallet account was opened for a customer."""

    __version__ = 1

    customer_id = Identifier(required=True)
    username = String(required=True, max_length=100)
    opened_at = DateTime(required=True)


@storefront.event(part_of="CustomerAccount")
class AffiliateRegistered:
    """The customer received a referral code and can now refer other shoppers."""

    __version__ = 1

    customer_id = Identifier(required=True)
    referral_code = String(required=True, max_length=120)


@storefront.event(part_of="CustomerAccount")
class WalletRedeemed:
    """Spendable balance was debited to discount an order at checkout."""

    __version__ = 1

    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Integer(required=True)
    balance_after = Integer(required=True)


@storefront.event(part_of="CustomerAccount")
class RedemptionRestored:
    """A redemption was returned because its order was cancelled or never paid."""

    __version__ = 1

    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Integer(required=True)
    balance_after = Integer(required=True)


@storefront.event(part_of="CustomerAccount")
class CreditLocked:
    """A credit was appended to the locked list, pending maturation."""

    __version__ = 1

    customer_id = Identifier(required=True)
    credit_id = Identifier(required=True)
    order_id = Identifier(required=True)
    source = String(required=True, max_length=30)
    amount = Integer(required=True)
    credited_at = DateTime(required=True)


@storefront.event(part_of="CustomerAccount")
class TierUpgraded:
    __version__ = 1

    customer_id = Identifier(required=True)
    previous_tier = String(required=True, max_length=10)
    new_tier = String(required=True, max_length=10)
    lifetime_spend = Integer(required=True)


@storefront.event(part_of="CustomerAccount")
class CreditsMatured:
    """Locked credits past their holding period moved into spendable balance."""

    __version__ = 1

    customer_id = Identifier(required=True)
    credit_ids = List(content_type=String)
    amount = Integer(required=True)
    balance_after = Integer(required=True)
