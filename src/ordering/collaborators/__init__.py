"""Collaborator factory.

Provides get/set/reset pairs for the catalogue and the address book, so tests
and the application bootstrap can swap the in-memory adapters for real ones.
"""

from ordering.collaborators.memory_adapter import InMemoryAddressBook, InMemoryCatalogue
from ordering.collaborators.port import AddressBook, Catalogue

_current_catalogue: Catalogue | None = None
_current_address_book: AddressBook | None = None


def get_catalogue() -> Catalogue:
    """Return the current catalogue. Defaults to InMemoryCatalogue."""
    global _current_catalogue
    if _current_catalogue is None:
        _current_catalogue = InMemoryCatalogue()
    return _current_catalogue


def set_catalogue(catalogue: Catalogue) -> None:
    global _current_catalogue
    _current_catalogue = catalogue


def get_address_book() -> AddressBook:
    """Return the current address book. Defaults to InMemoryAddressBook."""
    global _current_address_book
    if _current_address_book is None:
        _current_address_book = InMemoryAddressBook()
    return _current_address_book


def set_address_book(address_book: AddressBook) -> None:
    global _current_address_book
    _current_address_book = address_book


def reset_collaborators() -> None:
    """Reset to the default in-memory adapters."""
    global _current_catalogue, _current_address_book
    _current_catalogue = None
    _current_address_book = None
