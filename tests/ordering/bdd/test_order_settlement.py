"""BDD tests for order settlement against the wallet ledger."""

from pytest_bdd import scenarios

scenarios("features/order_settlement.feature")
