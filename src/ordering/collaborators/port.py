"""Ports for the collaborators the ordering context consumes.

Catalogue and address persistence live outside the settlement engine. These
contracts describe the only questions ordering asks of them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogueItem:
    """Price and availability of a catalogue item at lookup time."""

    item_ref: str
    unit_price: int
    in_stock: bool


@dataclass(frozen=True)
class ShippingAddress:
    """A deliverable address owned by exactly one customer."""

    address_id: str
    owner_id: str
    name: str
    line1: str
    city: str
    state: str
    pincode: str
    country: str = "India"


class Catalogue(ABC):
    @abstractmethod
    def get_item(self, item_ref: str) -> CatalogueItem | None:
        """Return the item, or None when the reference is unknown."""
        ...


class AddressBook(ABC):
    @abstractmethod
    def get_address(self, address_id: str) -> ShippingAddress | None:
        """Return the address, or None when it does not exist."""
        ...
