"""Pydantic request/response schemas for the Wallet API."""

from datetime import datetime

from pydantic import BaseModel, Field


class OpenAccountRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)


class LockedCreditSchema(BaseModel):
    credit_id: str
    amount: int
    credited_at: datetime
    source: str
    order_id: str


class AccountResponse(BaseModel):
    customer_id: str
    username: str
    spendable_balance: int
    locked_balance: int
    locked_credits: list[LockedCreditSchema] = []
    lifetime_spend: int
    membership_tier: str
    referral_code: str | None = None


class ReferralCodeResponse(BaseModel):
    referral_code: str
