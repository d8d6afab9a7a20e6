"""FastAPI endpoints for the Wallet domain: accounts and affiliate registration."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from shared.exceptions import AuthError
from shared.identity import Requester, get_requester
from wallet.account.account import CustomerAccount
from wallet.account.registration import OpenAccount, RegisterForAffiliate
from wallet.api.schemas import AccountResponse, OpenAccountRequest, ReferralCodeResponse

router = APIRouter(prefix="/accounts", tags=["accounts"])


def _account_response(account: CustomerAccount) -> AccountResponse:
    return AccountResponse(
        customer_id=account.id,
        username=account.username,
        spendable_balance=account.spendable_balance,
        locked_balance=account.locked_balance,
        locked_credits=[credit.to_dict() for credit in account.locked_credits],
        lifetime_spend=account.lifetime_spend,
        membership_tier=account.membership_tier,
        referral_code=account.referral_code,
    )


@router.post("", status_code=201, response_model=AccountResponse)
async def open_account(body: OpenAccountRequest, requester: Requester = Depends(get_requester)) -> AccountResponse:
    command = OpenAccount(customer_id=requester.customer_id, username=body.username)
    return _account_response(current_domain.process(command, asynchronous=False))


@router.post("/me/affiliate", response_model=ReferralCodeResponse)
async def register_for_affiliate(requester: Requester = Depends(get_requester)) -> ReferralCodeResponse:
    code = current_domain.process(RegisterForAffiliate(customer_id=requester.customer_id), asynchronous=False)
    return ReferralCodeResponse(referral_code=code)


@router.get("/me", response_model=AccountResponse)
async def get_my_account(requester: Requester = Depends(get_requester)) -> AccountResponse:
    return _account_response(current_domain.repository_for(CustomerAccount).get(requester.customer_id))


@router.get("/{customer_id}", response_model=AccountResponse)
async def get_account(customer_id: str, requester: Requester = Depends(get_requester)) -> AccountResponse:
    if not requester.is_admin and customer_id != requester.customer_id:
        raise AuthError({"requester": ["You can only view your own account"]})
    return _account_response(current_domain.repository_for(CustomerAccount).get(customer_id))
