"""Repository for the CustomerAccount aggregate."""

from shared.domain import storefront
from wallet.account.account import CustomerAccount


@storefront.repository(part_of=CustomerAccount)
class CustomerAccountRepository:
    def find_by_referral_code(self, referral_code: str) -> CustomerAccount | None:
        return self.query.filter(referral_code=referral_code).all().first

    def all_accounts(self) -> list[CustomerAccount]:
        """Every account, unpaginated."""
        return self.query.order_by("id").limit(None).all().items
