"""
Pydantic schemas for customer operations.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from bank_ledger.schemas.account import AccountResponse


class CustomerCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    national_id: str = Field(min_length=1, max_length=50)
    phone: str | None = Field(default=None, max_length=30)
    email: str | None = Field(default=None, max_length=255)
    address: str | None = Field(default=None, max_length=255)
    date_of_birth: date | None = None
    kyc_verified: bool = False


class KycUpdate(BaseModel):
    """Request to change a customer's KYC flag."""
    kyc_verified: bool


class CustomerResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    national_id: str
    phone: str | None
    email: str | None
    address: str | None
    date_of_birth: date | None
    kyc_verified: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class CustomerWithAccountsResponse(CustomerResponse):
    accounts: list[AccountResponse]
