"""Order queries: single-order lookup and paginated listing.

Customers only ever see their own orders. Administrators may look at any
order, list a chosen customer's orders, or list every order.

Queries read the repository directly; they never open a unit of work.
"""

import math
from dataclasses import dataclass

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.order.order import FulfillmentStatus, Order, PaymentMethod
from shared.exceptions import AuthError

SORTABLE_FIELDS = ("created_at", "updated_at", "payable_amount")
MAX_PAGE_SIZE = 100


@dataclass
class OrderPage:
    orders: list[Order]
    page: int
    page_size: int
    total: int
    total_pages: int


def get_order(order_id, requester_id, is_admin=False) -> Order:
    order = current_domain.repository_for(Order).get(order_id)
    if not is_admin and order.customer_id != requester_id:
        raise AuthError({"requester": ["You can only view your own orders"]})
    return order


def _validate_listing(status, payment_method, page, page_size, sort_by, sort_order):
    errors = {}
    if status is not None and status not in {s.value for s in FulfillmentStatus}:
        errors["status"] = [f"Unknown status {status}"]
    if payment_method is not None and payment_method not in {m.value for m in PaymentMethod}:
        errors["payment_method"] = [f"Unknown payment method {payment_method}"]
    if page < 1:
        errors["page"] = ["Page must be at least 1"]
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        errors["page_size"] = [f"Page size must be between 1 and {MAX_PAGE_SIZE}"]
    if sort_by not in SORTABLE_FIELDS:
        errors["sort_by"] = [f"Orders can be sorted by {', '.join(SORTABLE_FIELDS)}"]
    if sort_order not in ("asc", "desc"):
        errors["sort_order"] = ["Sort order must be asc or desc"]
    if errors:
        raise ValidationError(errors)


def list_orders(
    requester_id,
    is_admin=False,
    customer_id=None,
    status=None,
    payment_method=None,
    page=1,
    page_size=10,
    sort_by="created_at",
    sort_order="desc",
) -> OrderPage:
    _validate_listing(status, payment_method, page, page_size, sort_by, sort_order)

    if not is_admin:
        if customer_id and customer_id != requester_id:
            raise AuthError({"customer_id": ["Only administrators can list other customers' orders"]})
        customer_id = requester_id

    filters = {}
    if customer_id is not None:
        filters["customer_id"] = customer_id
    if status is not None:
        filters["fulfillment_status"] = status
    if payment_method is not None:
        filters["payment_method"] = payment_method

    result = current_domain.repository_for(Order).search(
        filters,
        sort_by=sort_by,
        descending=sort_order == "desc",
        page=page,
        page_size=page_size,
    )
    return OrderPage(
        orders=result.items,
        page=page,
        page_size=page_size,
        total=result.total,
        total_pages=math.ceil(result.total / page_size),
    )
