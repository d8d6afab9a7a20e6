"""In-memory catalogue and address book for development and testing."""

from ordering.collaborators.port import AddressBook, Catalogue, CatalogueItem, ShippingAddress


class InMemoryCatalogue(Catalogue):
    def __init__(self) -> None:
        self._items: dict[str, CatalogueItem] = {}

    def stock(self, item_ref: str, unit_price: int, in_stock: bool = True) -> CatalogueItem:
        """Add or replace an item."""
        item = CatalogueItem(item_ref=item_ref, unit_price=unit_price, in_stock=in_stock)
        self._items[item_ref] = item
        return item

    def get_item(self, item_ref: str) -> CatalogueItem | None:
        return self._items.get(item_ref)


class InMemoryAddressBook(AddressBook):
    def __init__(self) -> None:
        self._addresses: dict[str, ShippingAddress] = {}

    def register(self, address_id: str, owner_id: str, **fields) -> ShippingAddress:
        defaults = {
            "name": "Customer",
            "line1": "12 MG Road",
            "city": "Bengaluru",
            "state": "Karnataka",
            "pincode": "560001",
        }
        address = ShippingAddress(address_id=address_id, owner_id=owner_id, **{**defaults, **fields})
        self._addresses[address_id] = address
        return address

    def get_address(self, address_id: str) -> ShippingAddress | None:
        return self._addresses.get(address_id)
