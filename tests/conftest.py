import os
from pathlib import Path

import pytest

os.environ.setdefault("STOREFRONT_ENV", "test")


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Initialize the storefront domain and push its domain context. The activated
    domain can then be referred to elsewhere as `current_domain`.
    """
    from shared.domain import init_domain

    storefront = init_domain()
    storefront.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure and adapters after every test"""
    yield

    from protean import current_domain

    from ordering.collaborators import reset_collaborators
    from payments.gateway import reset_gateway

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()

    reset_gateway()
    reset_collaborators()


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
@pytest.fixture()
def catalogue():
    from ordering.collaborators import set_catalogue
    from ordering.collaborators.memory_adapter import InMemoryCatalogue

    catalogue = InMemoryCatalogue()
    catalogue.stock("kurta", 1000)
    catalogue.stock("saree", 2500)
    catalogue.stock("sneakers", 4000)
    catalogue.stock("dupatta", 400, in_stock=False)
    set_catalogue(catalogue)
    return catalogue


@pytest.fixture()
def address_book():
    from ordering.collaborators import set_address_book
    from ordering.collaborators.memory_adapter import InMemoryAddressBook

    book = InMemoryAddressBook()
    book.register("addr-asha", "cust-asha")
    book.register("addr-ravi", "cust-ravi")
    book.register("addr-meera", "cust-meera")
    set_address_book(book)
    return book


@pytest.fixture()
def gateway():
    from payments.gateway import set_gateway
    from payments.gateway.fake_adapter import FakeGateway

    fake = FakeGateway(key_secret="test-secret")
    set_gateway(fake)
    return fake


# ---------------------------------------------------------------------------
# Workflow helpers
# ---------------------------------------------------------------------------
@pytest.fixture()
def open_account():
    """Open a wallet account, optionally seeding its balance and lifetime spend."""
    from protean import atomic_change

    from shared.domain import storefront
    from wallet.account.account import CustomerAccount, tier_for
    from wallet.account.registration import OpenAccount

    def _open(customer_id, username=None, spendable_balance=0, lifetime_spend=0):
        storefront.process(OpenAccount(customer_id=customer_id, username=username or customer_id.split("-")[-1]))
        repo = storefront.repository_for(CustomerAccount)
        if spendable_balance or lifetime_spend:
            account = repo.get(customer_id)
            with atomic_change(account):
                account.spendable_balance = spendable_balance
                account.lifetime_spend = lifetime_spend
                account.membership_tier = tier_for(lifetime_spend).value
            repo.add(account)
        return repo.get(customer_id)

    return _open


@pytest.fixture()
def fill_cart(catalogue):
    from ordering.cart.items import AddToCart
    from shared.domain import storefront

    def _fill(customer_id, *lines):
        cart = None
        for item_ref, quantity in lines:
            cart = storefront.process(AddToCart(customer_id=customer_id, item_ref=item_ref, quantity=quantity))
        return cart

    return _fill


@pytest.fixture()
def place_order(fill_cart, address_book, gateway):
    """Fill the customer's cart and check it out."""
    from ordering.order.checkout import PlaceOrder
    from shared.domain import storefront

    def _place(customer_id="cust-asha", lines=(("kurta", 1),), payment_method="UPI"):
        fill_cart(customer_id, *lines)
        address_id = "addr-" + customer_id.split("-")[-1]
        return storefront.process(
            PlaceOrder(customer_id=customer_id, address_id=address_id, payment_method=payment_method)
        )

    return _place


@pytest.fixture()
def pay_order(gateway):
    """Verify the order's payment with a genuine gateway signature."""
    from ordering.order.payment import verify_payment

    def _pay(order, gateway_payment_id="pay_001"):
        return verify_payment(
            order.id,
            gateway_payment_id=gateway_payment_id,
            signature=gateway.sign(order.gateway_order_id, gateway_payment_id),
        )

    return _pay


@pytest.fixture()
def advance_order():
    """Drive an order forward through fulfillment as an administrator."""
    from ordering.order.fulfillment import UpdateOrderStatus
    from shared.domain import storefront

    path = ["Ordered", "Shipped", "OutForDelivery", "Delivered"]

    def _advance(order_id, until="Delivered"):
        order = None
        for status in path[: path.index(until) + 1]:
            order = storefront.process(
                UpdateOrderStatus(order_id=order_id, new_status=status, requester_id="admin-1", is_admin=True)
            )
        return order

    return _advance
