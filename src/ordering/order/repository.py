"""Repository for the Order aggregate."""

from ordering.order.order import Order, PaymentStatus
from shared.domain import storefront


@storefront.repository(part_of=Order)
class OrderRepository:
    def pending_payments(self) -> list[Order]:
        """Orders whose payment is unresolved, oldest first."""
        return (
            self.query.filter(payment_status=PaymentStatus.PENDING.value)
            .order_by(["created_at", "id"])
            .limit(None)
            .all()
            .items
        )

    def search(self, filters: dict, sort_by: str, descending: bool, page: int, page_size: int):
        """One page of orders matching ``filters``. Ties on ``sort_by`` are broken by id."""
        query = self.query
        if filters:
            query = query.filter(**filters)
        direction = "-" if descending else ""
        return (
            query.order_by([f"{direction}{sort_by}", "id"])
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
