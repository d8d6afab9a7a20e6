"""Domain events for the Commission aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from shared.domain import storefront


@storefront.event(part_of="Commission")
class CommissionOpened:
    """A referred order was paid; its commission awaits delivery."""

    __version__ = 1

    commission_id = Identifier(required=True)
    order_id = Identifier(required=True)
    referrer_id = Identifier(required=True)
    referred_customer_id = Identifier(required=True)
    reward_amount = Integer(required=True)


@storefront.event(part_of="Commission")
class CommissionCredited:
    """The referred order was delivered; the referrer's wallet receives the reward."""

    __version__ = 1

    commission_id = Identifier(required=True)
    order_id = Identifier(required=True)
    referrer_id = Identifier(required=True)
    reward_amount = Integer(required=True)
    credited_at = DateTime(required=True)


@storefront.event(part_of="Commission")
class CommissionDeclined:
    """The referred order was cancelled; no reward will be paid."""

    __version__ = 1

    commission_id = Identifier(required=True)
    order_id = Identifier(required=True)
    referrer_id = Identifier(required=True)
    reason = String(required=True, max_length=255)
