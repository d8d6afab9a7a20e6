"""CustomerAccount aggregate: the per-customer wallet ledger.

An account holds two kinds of value:

- ``spendable_balance``: usable immediately to discount a future order.
- ``locked_credits``: purchase rewards and affiliate commissions that become
  spendable only after the holding period. A locked credit leaves the list
  solely through ``mature_credits()``.

``lifetime_spend`` only grows, so the membership tier derived from it never
goes down.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean import atomic_change, invariant
from protean.exceptions import InvalidStateError, ValidationError
from protean.fields import DateTime, Identifier, Integer, List, String, ValueObject

from shared.config import get_settings
from shared.domain import storefront
from wallet.account.events import (
    AccountOpened,
    AffiliateRegistered,
    CreditLocked,
    CreditsMatured,
    RedemptionRestored,
    TierUpgraded,
    WalletRedeemed,
)


class MembershipTier(Enum):
    BASE = "Base"
    MID = "Mid"
    TOP = "Top"


class CreditSource(Enum):
    PURCHASE_REWARD = "PurchaseReward"
    AFFILIATE_COMMISSION = "AffiliateCommission"


def tier_for(lifetime_spend: int) -> MembershipTier:
    """Membership tier earned by a lifetime spend."""
    settings = get_settings()
    if lifetime_spend >= settings.top_tier_threshold:
        return MembershipTier.TOP
    if lifetime_spend >= settings.mid_tier_threshold:
        return MembershipTier.MID
    return MembershipTier.BASE


def reward_percent_for(tier: MembershipTier) -> int:
    settings = get_settings()
    return {
        MembershipTier.BASE: settings.base_reward_percent,
        MembershipTier.MID: settings.mid_reward_percent,
        MembershipTier.TOP: settings.top_reward_percent,
    }[MembershipTier(tier)]


@storefront.value_object(part_of="CustomerAccount")
class LockedCredit:
    """A wallet credit held back until its holding period has elapsed."""

    credit_id = Identifier(required=True)
    amount = Integer(required=True, min_value=1)
    credited_at = DateTime(required=True)
    source = String(required=True, max_length=30, choices=CreditSource)
    order_id = Identifier(required=True)


@storefront.aggregate
class CustomerAccount:
    username = String(required=True, max_length=100)
    spendable_balance = Integer(default=0, min_value=0)
    locked_credits = List(content_type=ValueObject(LockedCredit))
    lifetime_spend = Integer(default=0, min_value=0)
    membership_tier = String(max_length=10, choices=MembershipTier, default=MembershipTier.BASE.value)
    referral_code = String(max_length=120)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def tier_must_match_lifetime_spend(self):
        if MembershipTier(self.membership_tier) != tier_for(self.lifetime_spend or 0):
            raise ValidationError({"membership_tier": ["Tier does not match lifetime spend"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def open(cls, customer_id, username=None):
        now = datetime.now(UTC)
        account = cls(
            id=customer_id,
            username=username or customer_id,
            created_at=now,
            updated_at=now,
        )
        account.raise_(
            AccountOpened(
                customer_id=customer_id,
                username=account.username,
                opened_at=now,
            )
        )
        return account

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def locked_balance(self) -> int:
        return sum(credit.amount for credit in self.locked_credits)

    @property
    def reward_percent(self) -> int:
        return reward_percent_for(MembershipTier(self.membership_tier))

    def _touch(self):
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Affiliate registration
    # -------------------------------------------------------------------
    def register_referral_code(self, referral_code):
        """Assign a referral code. An account keeps its first code forever."""
        if self.referral_code:
            return self.referral_code

        self.referral_code = referral_code
        self._touch()
        self.raise_(AffiliateRegistered(customer_id=self.id, referral_code=referral_code))
        return referral_code

    # -------------------------------------------------------------------
    # Spendable balance
    # -------------------------------------------------------------------
    def redeem(self, amount, order_id):
        """Debit ``amount`` of spendable balance against an order."""
        if amount <= 0:
            raise ValidationError({"amount": ["Redemption amount must be positive"]})
        if amount > self.spendable_balance:
            raise InvalidStateError(
                {
                    "spendable_balance": [
                        f"Insufficient wallet balance: {self.spendable_balance} available, {amount} requested"
                    ]
                }
            )

        self.spendable_balance -= amount
        self._touch()
        self.raise_(
            WalletRedeemed(
                customer_id=self.id,
                order_id=order_id,
                amount=amount,
                balance_after=self.spendable_balance,
            )
        )

    def restore_redemption(self, amount, order_id):
        """Return a previously redeemed amount to the spendable balance."""
        if amount <= 0:
            raise ValidationError({"amount": ["Restored amount must be positive"]})

        self.spendable_balance += amount
        self._touch()
        self.raise_(
            RedemptionRestored(
                customer_id=self.id,
                order_id=order_id,
                amount=amount,
                balance_after=self.spendable_balance,
            )
        )

    # -------------------------------------------------------------------
    # Locked credits
    # -------------------------------------------------------------------
    def lock_credit(self, amount, credited_at, source, order_id):
        """Append a credit that becomes spendable after the holding period."""
        if amount <= 0:
            raise ValidationError({"amount": ["Locked credit amount must be positive"]})

        credit = LockedCredit(
            credit_id=str(uuid4()),
            amount=amount,
            credited_at=credited_at,
            source=CreditSource(source).value,
            order_id=order_id,
        )
        # List fields are tracked on assignment, never on in-place mutation
        self.locked_credits = [*self.locked_credits, credit]
        self._touch()
        self.raise_(
            CreditLocked(
                customer_id=self.id,
                credit_id=credit.credit_id,
                order_id=order_id,
                source=credit.source,
                amount=amount,
                credited_at=credited_at,
            )
        )
        return credit

    def record_spend(self, amount):
        """Add a delivered order's payable amount to lifetime spend and re-tier."""
        if amount < 0:
            raise ValidationError({"lifetime_spend": ["Lifetime spend cannot decrease"]})

        previous_tier = MembershipTier(self.membership_tier)
        new_tier = tier_for(self.lifetime_spend + amount)
        now = datetime.now(UTC)

        # Spend and tier move together or the tier invariant trips in between
        with atomic_change(self):
            self.lifetime_spend += amount
            self.membership_tier = new_tier.value
            self.updated_at = now

        if new_tier != previous_tier:
            self.raise_(
                TierUpgraded(
                    customer_id=self.id,
                    previous_tier=previous_tier.value,
                    new_tier=new_tier.value,
                    lifetime_spend=self.lifetime_spend,
                )
            )

    def due_credits(self, cutoff):
        """Identity and timestamp of every locked credit credited at or before ``cutoff``."""
        return [
            (credit.credit_id, credit.credited_at) for credit in self.locked_credits if credit.credited_at <= cutoff
        ]

    def mature_credits(self, due):
        """Promote exactly the captured credits into spendable balance.

        Only credits whose id and ``credited_at`` both match an entry in
        ``due`` are promoted; anything added or already matured since the
        capture is left untouched. Returns the promoted amount.
        """
        wanted = {(credit_id, credited_at) for credit_id, credited_at in due}
        matured = [credit for credit in self.locked_credits if (credit.credit_id, credit.credited_at) in wanted]
        if not matured:
            return 0

        amount = sum(credit.amount for credit in matured)
        matured_ids = {credit.credit_id for credit in matured}
        self.locked_credits = [credit for credit in self.locked_credits if credit.credit_id not in matured_ids]
        self.spendable_balance += amount
        self._touch()
        self.raise_(
            CreditsMatured(
                customer_id=self.id,
                credit_ids=sorted(matured_ids),
                amount=amount,
                balance_after=self.spendable_balance,
            )
        )
        return amount
