"""Wallet ledger commands issued by order and commission transitions.

- CreditPurchaseReward: lock a purchase reward at the customer's current tier
  rate, then add the payable amount to lifetime spend (which may raise the tier)
- LockCommissionCredit: lock the affiliate reward in the referrer's wallet
- RedeemWallet: debit spendable balance against a new order
- RestoreRedemption: return a redeemed amount to spendable balance

The ordering and affiliates handlers process these inside their own unit of
work, so a ledger failure rolls back the transition that caused it.
"""

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.pricing import percent_of
from shared.domain import storefront
from wallet.account.account import CreditSource, CustomerAccount
from wallet.account.events import TierUpgraded

logger = structlog.get_logger(__name__)


@storefront.command(part_of="CustomerAccount")
class CreditPurchaseReward:
    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    payable_amount = Integer(required=True, min_value=0)
    delivered_at = DateTime(required=True)


@storefront.command(part_of="CustomerAccount")
class LockCommissionCredit:
    referrer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Integer(required=True, min_value=1)
    credited_at = DateTime(required=True)


@storefront.command(part_of="CustomerAccount")
class RedeemWallet:
    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Integer(required=True, min_value=1)


@storefront.command(part_of="CustomerAccount")
class RestoreRedemption:
    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Integer(required=True, min_value=1)


def _load_or_open(repo, customer_id):
    """Load the account, opening one for customers who never had a wallet."""
    account = repo.get_or_none(customer_id)
    if account is None:
        logger.info("Opening wallet on first credit", customer_id=customer_id)
        account = CustomerAccount.open(customer_id)
    return account


@storefront.command_handler(part_of=CustomerAccount)
class WalletLedgerHandler:
    @handle(CreditPurchaseReward)
    def credit_purchase_reward(self, command):
        repo = current_domain.repository_for(CustomerAccount)
        account = _load_or_open(repo, command.customer_id)

        reward = percent_of(command.payable_amount, account.reward_percent)
        if reward > 0:
            account.lock_credit(
                amount=reward,
                credited_at=command.delivered_at,
                source=CreditSource.PURCHASE_REWARD,
                order_id=command.order_id,
            )
        account.record_spend(command.payable_amount)
        repo.add(account)

        logger.info(
            "Purchase reward locked",
            customer_id=command.customer_id,
            order_id=command.order_id,
            reward=reward,
            membership_tier=account.membership_tier,
        )
        return reward

    @handle(LockCommissionCredit)
    def lock_commission_credit(self, command):
        repo = current_domain.repository_for(CustomerAccount)
        account = _load_or_open(repo, command.referrer_id)
        account.lock_credit(
            amount=command.amount,
            credited_at=command.credited_at,
            source=CreditSource.AFFILIATE_COMMISSION,
            order_id=command.order_id,
        )
        repo.add(account)

        logger.info(
            "Commission locked in referrer wallet",
            referrer_id=command.referrer_id,
            order_id=command.order_id,
            amount=command.amount,
        )

    @handle(RedeemWallet)
    def redeem_wallet(self, command):
        repo = current_domain.repository_for(CustomerAccount)
        account = repo.get(command.customer_id)
        account.redeem(command.amount, command.order_id)
        repo.add(account)

        logger.info(
            "Wallet redeemed",
            customer_id=command.customer_id,
            order_id=command.order_id,
            amount=command.amount,
            balance_after=account.spendable_balance,
        )

    @handle(RestoreRedemption)
    def restore_redemption(self, command):
        repo = current_domain.repository_for(CustomerAccount)
        account = repo.get(command.customer_id)
        account.restore_redemption(command.amount, command.order_id)
        repo.add(account)

        logger.info(
            "Redemption restored",
            customer_id=command.customer_id,
            order_id=command.order_id,
            amount=command.amount,
        )


@storefront.event_handler(part_of=CustomerAccount)
class MembershipEventHandler:
    @handle(TierUpgraded)
    def on_tier_upgraded(self, event):
        logger.info(
            "Membership tier upgraded",
            customer_id=event.customer_id,
            previous_tier=event.previous_tier,
            new_tier=event.new_tier,
            lifetime_spend=event.lifetime_spend,
        )
