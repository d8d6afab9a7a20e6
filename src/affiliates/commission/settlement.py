"""Commission settlement commands, issued by the referred order's transitions.

- OpenCommission (payment confirmed): record a Pending commission worth
  ``commission_percent`` of the payable amount, Declined straight away if the
  order was already cancelled while its payment was in flight
- CreditCommission (order delivered): credit the Pending commission and lock
  the reward in the referrer's wallet
- DeclineCommission (order cancelled): decline the Pending commission

Orders without a commission are ignored, and a commission is credited at most
once.
"""

import structlog
from protean import handle
from protean.fields import Boolean, DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from affiliates.commission.commission import Commission
from ordering.cart.pricing import percent_of
from shared.config import get_settings
from shared.domain import storefront
from wallet.account.rewards import LockCommissionCredit

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Commission")
class OpenCommission:
    order_id = Identifier(required=True)
    referrer_id = Identifier(required=True)
    referred_customer_id = Identifier(required=True)
    payable_amount = Integer(required=True, min_value=0)
    order_cancelled = Boolean(default=False)


@storefront.command(part_of="Commission")
class CreditCommission:
    order_id = Identifier(required=True)
    credited_at = DateTime(required=True)


@storefront.command(part_of="Commission")
class DeclineCommission:
    order_id = Identifier(required=True)
    reason = String(max_length=255, default="Order cancelled")


@storefront.command_handler(part_of=Commission)
class CommissionSettlementHandler:
    @handle(OpenCommission)
    def open_commission(self, command):
        repo = current_domain.repository_for(Commission)
        if repo.get_or_none(command.order_id) is not None:
            logger.info("Commission already recorded", order_id=command.order_id)
            return None

        commission = Commission.open(
            order_id=command.order_id,
            referrer_id=command.referrer_id,
            referred_customer_id=command.referred_customer_id,
            reward_amount=percent_of(command.payable_amount, get_settings().commission_percent),
        )
        if command.order_cancelled:
            commission.decline("Order was cancelled before payment completed")
        repo.add(commission)

        logger.info(
            "Commission opened",
            order_id=command.order_id,
            referrer_id=command.referrer_id,
            reward_amount=commission.reward_amount,
            status=commission.status,
        )
        return commission

    @handle(CreditCommission)
    def credit_commission(self, command):
        repo = current_domain.repository_for(Commission)
        commission = repo.get_or_none(command.order_id)
        if commission is None:
            return None
        if not commission.is_pending:
            logger.warning("Commission not pending at delivery", order_id=command.order_id, status=commission.status)
            return commission

        commission.credit(credited_at=command.credited_at)
        repo.add(commission)

        if commission.reward_amount > 0:
            current_domain.process(
                LockCommissionCredit(
                    referrer_id=commission.referrer_id,
                    order_id=commission.order_id,
                    amount=commission.reward_amount,
                    credited_at=command.credited_at,
                ),
                asynchronous=False,
            )

        logger.info(
            "Commission credited",
            order_id=command.order_id,
            referrer_id=commission.referrer_id,
            reward_amount=commission.reward_amount,
        )
        return commission

    @handle(DeclineCommission)
    def decline_commission(self, command):
        repo = current_domain.repository_for(Commission)
        commission = repo.get_or_none(command.order_id)
        if commission is None or not commission.is_pending:
            return commission

        commission.decline(command.reason)
        repo.add(commission)

        logger.info("Commission declined", order_id=command.order_id, referrer_id=commission.referrer_id)
        return commission
