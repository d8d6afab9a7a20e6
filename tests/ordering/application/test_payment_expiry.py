"""Application tests for the stale payment expiry job."""

from datetime import UTC, datetime, timedelta

from ordering.order.cancellation import CancelOrder
from ordering.order.expiry import expire_stale_payments
from ordering.order.order import Order
from shared.domain import storefront
from wallet.account.account import CustomerAccount


def _later(minutes):
    return datetime.now(UTC) + timedelta(minutes=minutes)


class TestExpireStalePayments:
    def test_fresh_orders_are_left_alone(self, place_order):
        order = place_order()
        assert expire_stale_payments() == []
        assert storefront.repository_for(Order).get(order.id).payment_status == "Pending"

    def test_stale_order_is_failed_and_cancelled(self, place_order):
        order = place_order()

        expired = expire_stale_payments(as_of=_later(31))

        assert expired == [order.id]
        stored = storefront.repository_for(Order).get(order.id)
        assert stored.payment_status == "Failed"
        assert stored.fulfillment_status == "Cancelled"
        assert stored.cancelled_by == "System"

    def test_paid_orders_are_never_expired(self, place_order, pay_order):
        order = place_order()
        pay_order(order)
        assert expire_stale_payments(as_of=_later(120)) == []

    def test_expiry_returns_redemption(self, place_order, open_account):
        open_account("cust-asha", spendable_balance=100)
        place_order()

        expire_stale_payments(as_of=_later(31))

        assert storefront.repository_for(CustomerAccount).get("cust-asha").spendable_balance == 100

    def test_cancelled_unpaid_order_only_fails_payment(self, place_order, open_account):
        open_account("cust-asha", spendable_balance=100)
        order = place_order()
        storefront.process(CancelOrder(order_id=order.id, requester_id="cust-asha"))

        expire_stale_payments(as_of=_later(31))

        stored = storefront.repository_for(Order).get(order.id)
        assert stored.payment_status == "Failed"
        assert stored.cancelled_by == "Customer"
        assert storefront.repository_for(CustomerAccount).get("cust-asha").spendable_balance == 100

    def test_custom_window(self, place_order):
        order = place_order()
        assert expire_stale_payments(older_than_minutes=5, as_of=_later(6)) == [order.id]

    def test_second_run_is_a_no_op(self, place_order):
        place_order()
        expire_stale_payments(as_of=_later(31))
        assert expire_stale_payments(as_of=_later(31)) == []
