"""Cart item management: commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.collaborators import get_catalogue
from shared.domain import storefront


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    item_ref = String(required=True, max_length=120)
    quantity = Integer(default=1, min_value=1)
    size = String(max_length=20, default="")


@storefront.command(part_of="ShoppingCart")
class UpdateCartLine:
    customer_id = Identifier(required=True)
    item_ref = String(required=True, max_length=120)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=20, default="")
    current_size = String(max_length=20)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    item_ref = String(required=True, max_length=120)
    size = String(max_length=20)


def load_or_create_cart(repo, customer_id):
    cart = repo.get_or_none(customer_id)
    return cart if cart is not None else ShoppingCart.create(customer_id)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        if get_catalogue().get_item(command.item_ref) is None:
            raise ObjectNotFoundError({"item_ref": [f"Item {command.item_ref} does not exist"]})

        repo = current_domain.repository_for(ShoppingCart)
        cart = load_or_create_cart(repo, command.customer_id)
        cart.add_item(
            item_ref=command.item_ref,
            quantity=command.quantity,
            size=command.size or "",
        )
        return repo.add(cart)

    @handle(UpdateCartLine)
    def update_cart_line(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.customer_id)
        cart.update_line(
            item_ref=command.item_ref,
            quantity=command.quantity,
            size=command.size or "",
            current_size=command.current_size,
        )
        return repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.customer_id)
        cart.remove_item(item_ref=command.item_ref, size=command.size)
        return repo.add(cart)
