"""Application tests for fulfillment updates and order cancellation."""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest
from ordering.order.cancellation import CancelOrder
from ordering.order.fulfillment import UpdateOrderStatus
from ordering.order.order import Order
from protean.exceptions import InvalidStateError, ValidationError
from shared.domain import storefront
from shared.exceptions import AuthError
from wallet.account.account import CustomerAccount


@pytest.fixture()
def paid_order(place_order, pay_order):
    order = place_order()
    pay_order(order)
    return storefront.repository_for(Order).get(order.id)


class TestUpdateOrderStatus:
    def test_admin_advances_one_step(self, paid_order):
        order = storefront.process(
            UpdateOrderStatus(order_id=paid_order.id, new_status="Ordered", requester_id="admin-1", is_admin=True)
        )
        assert order.fulfillment_status == "Ordered"

    def test_customer_cannot_update_status(self, paid_order):
        with pytest.raises(AuthError):
            storefront.process(
                UpdateOrderStatus(order_id=paid_order.id, new_status="Ordered", requester_id="cust-asha")
            )
        assert storefront.repository_for(Order).get(paid_order.id).fulfillment_status == "Pending"

    def test_skipping_a_step_is_a_conflict(self, paid_order):
        with pytest.raises(InvalidStateError):
            storefront.process(
                UpdateOrderStatus(order_id=paid_order.id, new_status="Shipped", requester_id="admin-1", is_admin=True)
            )

    def test_unknown_status(self, paid_order):
        with pytest.raises(ValidationError):
            UpdateOrderStatus(order_id=paid_order.id, new_status="Lost", requester_id="admin-1", is_admin=True)

    def test_unpaid_order_cannot_be_fulfilled(self, place_order):
        order = place_order()
        with pytest.raises(InvalidStateError):
            storefront.process(
                UpdateOrderStatus(order_id=order.id, new_status="Ordered", requester_id="admin-1", is_admin=True)
            )

    def test_cash_on_delivery_also_needs_confirmed_payment(self, place_order):
        order = place_order(payment_method="Cash on delivery")
        with pytest.raises(InvalidStateError):
            storefront.process(
                UpdateOrderStatus(order_id=order.id, new_status="Ordered", requester_id="admin-1", is_admin=True)
            )

    def test_cancelled_target_cancels_as_admin(self, paid_order):
        order = storefront.process(
            UpdateOrderStatus(order_id=paid_order.id, new_status="Cancelled", requester_id="admin-1", is_admin=True)
        )
        assert order.fulfillment_status == "Cancelled"
        assert order.cancelled_by == "Admin"

    def test_full_path_to_delivery(self, paid_order, advance_order):
        order = advance_order(paid_order.id)
        assert order.fulfillment_status == "Delivered"
        assert order.delivered_at is not None

    def test_delivered_is_terminal(self, paid_order, advance_order):
        advance_order(paid_order.id)
        with pytest.raises(InvalidStateError):
            storefront.process(
                UpdateOrderStatus(order_id=paid_order.id, new_status="Delivered", requester_id="admin-1", is_admin=True)
            )


class TestConcurrentDelivery:
    def test_racing_deliveries_credit_exactly_once(self, paid_order, advance_order):
        advance_order(paid_order.id, until="OutForDelivery")

        def deliver():
            with storefront.domain_context():
                try:
                    storefront.process(
                        UpdateOrderStatus(
                            order_id=paid_order.id,
                            new_status="Delivered",
                            requester_id="admin-1",
                            is_admin=True,
                        )
                    )
                    return "delivered"
                except InvalidStateError:
                    return "conflict"

        with ThreadPoolExecutor(max_workers=8) as pool:
            outcomes = list(pool.map(lambda _: deliver(), range(8)))

        assert outcomes.count("delivered") == 1
        assert outcomes.count("conflict") == 7

        account = storefront.repository_for(CustomerAccount).get("cust-asha")
        assert len(account.locked_credits) == 1
        assert account.locked_credits[0].amount == 30
        assert account.lifetime_spend == 1000


class TestDeliveryIsAtomicWithRewards:
    def _deliver(self, order_id):
        return storefront.process(
            UpdateOrderStatus(order_id=order_id, new_status="Delivered", requester_id="admin-1", is_admin=True)
        )

    def test_failing_reward_rolls_back_delivery(self, paid_order, advance_order):
        advance_order(paid_order.id, until="OutForDelivery")

        with patch("wallet.account.rewards.percent_of", side_effect=RuntimeError("ledger unavailable")):
            with pytest.raises(RuntimeError):
                self._deliver(paid_order.id)

        order = storefront.repository_for(Order).get(paid_order.id)
        assert order.fulfillment_status == "OutForDelivery"
        assert order.delivered_at is None
        assert storefront.repository_for(CustomerAccount).get_or_none("cust-asha") is None

    def test_delivery_succeeds_once_the_ledger_recovers(self, paid_order, advance_order):
        advance_order(paid_order.id, until="OutForDelivery")
        with patch("wallet.account.rewards.percent_of", side_effect=RuntimeError("ledger unavailable")):
            with pytest.raises(RuntimeError):
                self._deliver(paid_order.id)

        order = self._deliver(paid_order.id)

        assert order.fulfillment_status == "Delivered"
        account = storefront.repository_for(CustomerAccount).get("cust-asha")
        assert [credit.amount for credit in account.locked_credits] == [30]
        assert account.lifetime_spend == 1000


class TestCancelOrder:
    def test_customer_cancels_own_order(self, paid_order):
        order = storefront.process(
            CancelOrder(order_id=paid_order.id, requester_id="cust-asha", reason="Changed my mind")
        )
        assert order.fulfillment_status == "Cancelled"
        assert order.cancelled_by == "Customer"
        assert order.cancellation_reason == "Changed my mind"

    def test_customer_cannot_cancel_someone_elses_order(self, paid_order):
        with pytest.raises(AuthError):
            storefront.process(CancelOrder(order_id=paid_order.id, requester_id="cust-ravi"))
        assert storefront.repository_for(Order).get(paid_order.id).fulfillment_status == "Pending"

    def test_admin_cancels_any_order(self, paid_order):
        order = storefront.process(CancelOrder(order_id=paid_order.id, requester_id="admin-1", is_admin=True))
        assert order.cancelled_by == "Admin"

    def test_cancel_twice_is_a_conflict(self, paid_order):
        storefront.process(CancelOrder(order_id=paid_order.id, requester_id="cust-asha"))
        version = storefront.repository_for(Order).get(paid_order.id)._version

        with pytest.raises(InvalidStateError):
            storefront.process(CancelOrder(order_id=paid_order.id, requester_id="cust-asha"))
        assert storefront.repository_for(Order).get(paid_order.id)._version == version

    def test_cannot_cancel_delivered_order(self, paid_order, advance_order):
        advance_order(paid_order.id)
        with pytest.raises(InvalidStateError):
            storefront.process(CancelOrder(order_id=paid_order.id, requester_id="cust-asha"))

    def test_cancel_restores_redemption_once(self, place_order, pay_order, open_account):
        open_account("cust-asha", spendable_balance=100)
        order = place_order()
        pay_order(order)
        assert storefront.repository_for(CustomerAccount).get("cust-asha").spendable_balance == 0

        storefront.process(CancelOrder(order_id=order.id, requester_id="cust-asha"))
        with pytest.raises(InvalidStateError):
            storefront.process(CancelOrder(order_id=order.id, requester_id="cust-asha"))

        assert storefront.repository_for(CustomerAccount).get("cust-asha").spendable_balance == 100

    def test_cancelled_order_earns_no_reward(self, paid_order):
        storefront.process(CancelOrder(order_id=paid_order.id, requester_id="cust-asha"))
        assert storefront.repository_for(CustomerAccount).get_or_none("cust-asha") is None
