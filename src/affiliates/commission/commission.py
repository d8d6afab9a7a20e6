"""Commission aggregate: one affiliate reward per referred order.

    Pending → Credited   (order delivered, at most once)
    Pending → Declined   (order cancelled)

A commission's identity is the order id, so an order can never have two.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import InvalidStateError
from protean.fields import DateTime, Identifier, Integer, Status, String

from affiliates.commission.events import CommissionCredited, CommissionDeclined, CommissionOpened
from shared.domain import storefront


class CommissionStatus(Enum):
    PENDING = "Pending"
    CREDITED = "Credited"
    DECLINED = "Declined"


@storefront.aggregate
class Commission:
    referrer_id = Identifier(required=True)
    referred_customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reward_amount = Integer(required=True, min_value=0)
    status = Status(
        CommissionStatus,
        default=CommissionStatus.PENDING,
        transitions={
            CommissionStatus.PENDING: [CommissionStatus.CREDITED, CommissionStatus.DECLINED],
        },
    )
    decline_reason = String(max_length=255)
    created_at = DateTime()
    settled_at = DateTime()

    @classmethod
    def open(cls, order_id, referrer_id, referred_customer_id, reward_amount):
        commission = cls(
            id=order_id,
            order_id=order_id,
            referrer_id=referrer_id,
            referred_customer_id=referred_customer_id,
            reward_amount=reward_amount,
            created_at=datetime.now(UTC),
        )
        commission.raise_(
            CommissionOpened(
                commission_id=commission.id,
                order_id=order_id,
                referrer_id=referrer_id,
                referred_customer_id=referred_customer_id,
                reward_amount=reward_amount,
            )
        )
        return commission

    @property
    def is_pending(self) -> bool:
        return CommissionStatus(self.status) == CommissionStatus.PENDING

    def _assert_pending(self):
        if not self.is_pending:
            raise InvalidStateError({"status": [f"Commission for order {self.order_id} is already {self.status}"]})

    def credit(self, credited_at=None):
        """Settle the commission in the referrer's favour."""
        self._assert_pending()

        now = credited_at or datetime.now(UTC)
        self.status = CommissionStatus.CREDITED.value
        self.settled_at = now
        self.raise_(
            CommissionCredited(
                commission_id=self.id,
                order_id=self.order_id,
                referrer_id=self.referrer_id,
                reward_amount=self.reward_amount,
                credited_at=now,
            )
        )

    def decline(self, reason):
        self._assert_pending()

        self.status = CommissionStatus.DECLINED.value
        self.decline_reason = reason
        self.settled_at = datetime.now(UTC)
        self.raise_(
            CommissionDeclined(
                commission_id=self.id,
                order_id=self.order_id,
                referrer_id=self.referrer_id,
                reason=reason,
            )
        )
