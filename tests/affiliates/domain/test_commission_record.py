"""Tests for the Commission aggregate."""

import pytest
from affiliates.commission.commission import Commission, CommissionStatus
from affiliates.commission.events import CommissionCredited, CommissionDeclined, CommissionOpened
from protean.exceptions import InvalidStateError


def _make_commission():
    commission = Commission.open(
        order_id="ord-001",
        referrer_id="cust-ravi",
        referred_customer_id="cust-asha",
        reward_amount=9,
    )
    commission._events.clear()
    return commission


class TestOpenCommission:
    def test_identity_is_order_id(self):
        commission = Commission.open("ord-001", "cust-ravi", "cust-asha", 9)
        assert commission.id == "ord-001"
        assert commission.status == CommissionStatus.PENDING.value
        assert isinstance(commission._events[0], CommissionOpened)


class TestCredit:
    def test_credit_moves_to_credited(self):
        commission = _make_commission()
        commission.credit()
        assert commission.status == CommissionStatus.CREDITED.value
        assert commission.settled_at is not None
        event = commission._events[0]
        assert isinstance(event, CommissionCredited)
        assert event.referrer_id == "cust-ravi"
        assert event.reward_amount == 9

    def test_credit_at_most_once(self):
        commission = _make_commission()
        commission.credit()
        commission._events.clear()
        with pytest.raises(InvalidStateError):
            commission.credit()
        assert commission._events == []


class TestDecline:
    def test_decline(self):
        commission = _make_commission()
        commission.decline("Order cancelled")
        assert commission.status == CommissionStatus.DECLINED.value
        assert commission.decline_reason == "Order cancelled"
        assert isinstance(commission._events[0], CommissionDeclined)

    def test_declined_commission_cannot_be_credited(self):
        commission = _make_commission()
        commission.decline("Order cancelled")
        with pytest.raises(InvalidStateError):
            commission.credit()

    def test_credited_commission_cannot_be_declined(self):
        commission = _make_commission()
        commission.credit()
        with pytest.raises(InvalidStateError):
            commission.decline("Too late")
