"""Shared BDD fixtures and step definitions for order settlement."""

from datetime import UTC, datetime, timedelta

import pytest
from ordering.order.cancellation import CancelOrder
from ordering.order.expiry import expire_stale_payments
from ordering.order.order import Order
from ordering.order.payment import verify_payment
from pytest_bdd import given, parsers, then, when
from shared.domain import storefront
from shared.exceptions import PaymentVerificationError
from wallet.account.account import CustomerAccount
from wallet.account.maturation import mature_locked_credits


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def customer_id():
    return "cust-asha"


@pytest.fixture()
def error():
    """Container for the error a When step captured."""
    return {"exc": None}


def _stored_order(order):
    return storefront.repository_for(Order).get(order.id)


def _wallet(customer_id):
    return storefront.repository_for(CustomerAccount).get(customer_id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a customer with a spendable wallet balance of {balance:d}"))
def _(open_account, customer_id, balance):
    open_account(customer_id, spendable_balance=balance)


@given(parsers.cfparse('the customer checked out {quantity:d} "{item_ref}"'), target_fixture="order")
def _(place_order, customer_id, quantity, item_ref):
    return place_order(customer_id, lines=((item_ref, quantity),))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the payment is verified", target_fixture="order")
def _(order, pay_order):
    return pay_order(order)


@when("the payment callback carries a forged signature")
def _(order, error):
    try:
        verify_payment(order.id, gateway_payment_id="pay_001", signature="forged")
    except PaymentVerificationError as exc:
        error["exc"] = exc


@when("the order is delivered", target_fixture="order")
def _(order, advance_order):
    return advance_order(order.id)


@when(parsers.cfparse('the customer cancels the order because "{reason}"'), target_fixture="order")
def _(order, customer_id, reason):
    return storefront.process(CancelOrder(order_id=order.id, requester_id=customer_id, reason=reason))


@when(parsers.cfparse("the payment expiry runs {minutes:d} minutes later"))
def _(minutes):
    expire_stale_payments(as_of=datetime.now(UTC) + timedelta(minutes=minutes))


@when(parsers.cfparse("the maturation sweep runs {days:d} days later"))
def _(days):
    mature_locked_credits(as_of=datetime.now(UTC) + timedelta(days=days))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order payable amount is {amount:d}"))
def _(order, amount):
    assert _stored_order(order).payable_amount == amount


@then(parsers.cfparse('the order fulfillment status is "{status}"'))
def _(order, status):
    assert _stored_order(order).fulfillment_status == status


@then(parsers.cfparse('the order payment status is "{status}"'))
def _(order, status):
    assert _stored_order(order).payment_status == status


@then("payment verification is rejected")
def _(error):
    assert isinstance(error["exc"], PaymentVerificationError)


@then(parsers.cfparse("the wallet spendable balance is {amount:d}"))
def _(customer_id, amount):
    assert _wallet(customer_id).spendable_balance == amount


@then(parsers.cfparse('the wallet holds a locked "{source}" credit of {amount:d}'))
def _(customer_id, source, amount):
    credits = [(credit.source, credit.amount) for credit in _wallet(customer_id).locked_credits]
    assert credits == [(source, amount)]


@then("the wallet holds no locked credits")
def _(customer_id):
    assert _wallet(customer_id).locked_credits == []
