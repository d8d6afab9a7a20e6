"""Account opening and affiliate registration: commands and handler."""

import structlog
from protean import handle
from protean.exceptions import InvalidStateError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from shared.domain import storefront
from wallet.account.account import CustomerAccount

logger = structlog.get_logger(__name__)


@storefront.command(part_of="CustomerAccount")
class OpenAccount:
    customer_id = Identifier(required=True)
    username = String(required=True, max_length=100)


@storefront.command(part_of="CustomerAccount")
class RegisterForAffiliate:
    customer_id = Identifier(required=True)


def referral_code_for(account):
    """Username followed by the last four characters of the customer id."""
    return f"{account.username}{str(account.id)[-4:]}".lower()


def resolve_referrer(referral_code, customer_id):
    """Find the account that owns ``referral_code``.

    Raises ValidationError for unknown codes and for self-referral.
    """
    code = (referral_code or "").strip().lower()
    if not code:
        raise ValidationError({"referral_code": ["Referral code is required"]})

    referrer = current_domain.repository_for(CustomerAccount).find_by_referral_code(code)
    if referrer is None:
        raise ValidationError({"referral_code": ["Invalid referral code"]})
    if referrer.id == customer_id:
        raise ValidationError({"referral_code": ["You cannot use your own referral code"]})
    return referrer


@storefront.command_handler(part_of=CustomerAccount)
class AccountRegistrationHandler:
    @handle(OpenAccount)
    def open_account(self, command):
        repo = current_domain.repository_for(CustomerAccount)
        if repo.get_or_none(command.customer_id) is not None:
            raise InvalidStateError({"customer_id": [f"Account {command.customer_id} already exists"]})

        account = CustomerAccount.open(command.customer_id, command.username)
        repo.add(account)

        logger.info("Account opened", customer_id=command.customer_id)
        return account

    @handle(RegisterForAffiliate)
    def register_for_affiliate(self, command):
        repo = current_domain.repository_for(CustomerAccount)
        account = repo.get(command.customer_id)
        if account.referral_code:
            return account.referral_code

        code = referral_code_for(account)
        owner = repo.find_by_referral_code(code)
        if owner is not None and owner.id != account.id:
            raise InvalidStateError({"referral_code": [f"Referral code {code} is already taken"]})

        account.register_referral_code(code)
        repo.add(account)

        logger.info("Affiliate registered", customer_id=command.customer_id, referral_code=code)
        return code
