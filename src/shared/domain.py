"""Domain initialization and configuration.

A single domain hosts the ordering, payments, wallet, and affiliates
contexts. Commands and events are processed synchronously so that a
request sees the ledger effects of its own order transition.
"""

import importlib
from functools import lru_cache

from protean.domain import Domain

from shared.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(
    name="storefront",
    config={
        "event_processing": "sync",
        "command_processing": "sync",
    },
)

# Modules that declare aggregates, commands, events, and handlers
ELEMENT_MODULES = [
    "wallet.account.account",
    "wallet.account.repository",
    "wallet.account.registration",
    "wallet.account.rewards",
    "wallet.account.maturation",
    "affiliates.commission.commission",
    "affiliates.commission.settlement",
    "ordering.cart.cart",
    "ordering.cart.items",
    "ordering.cart.referral",
    "ordering.cart.pricing",
    "ordering.order.order",
    "ordering.order.repository",
    "ordering.order.checkout",
    "ordering.order.payment",
    "ordering.order.fulfillment",
    "ordering.order.cancellation",
    "ordering.order.expiry",
]


@lru_cache
def init_domain() -> Domain:
    """Import every element module and initialize the domain once."""
    for module in ELEMENT_MODULES:
        importlib.import_module(module)

    storefront.init(traverse=False)
    logger.info("Domain initialized", domain=storefront.name, modules=len(ELEMENT_MODULES))
    return storefront
