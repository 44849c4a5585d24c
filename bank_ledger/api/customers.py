"""
Customer API endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bank_ledger.api.deps import get_current_subject, require_admin
from bank_ledger.models.base import get_db
from bank_ledger.services.customer_service import CustomerService
from bank_ledger.schemas.customer import (
    CustomerCreate,
    CustomerResponse,
    CustomerWithAccountsResponse,
    KycUpdate,
)

router = APIRouter(
    prefix="/customers",
    tags=["Customers"],
    dependencies=[Depends(get_current_subject)],
)


@router.post("", response_model=CustomerResponse, status_code=201)
def create_customer(
    request: CustomerCreate,
    db: Session = Depends(get_db),
):
    """Create a new customer."""
    return CustomerService(db).create_customer(request)


@router.get("", response_model=list[CustomerResponse])
def list_customers(db: Session = Depends(get_db)):
    return CustomerService(db).list_customers()


@router.get(
    "/{customer_id}/accounts",
    response_model=CustomerWithAccountsResponse,
)
def get_customer_with_accounts(
    customer_id: int,
    db: Session = Depends(get_db),
):
    """Get one customer together with all of their accounts."""
    return CustomerService(db).get_customer_with_accounts(customer_id)


@router.patch(
    "/{customer_id}/kyc",
    response_model=CustomerResponse,
    dependencies=[Depends(require_admin)],
)
def set_kyc_verified(
    customer_id: int,
    request: KycUpdate,
    db: Session = Depends(get_db),
):
    """Change a customer's KYC flag. Admins only."""
    return CustomerService(db).set_kyc_verified(customer_id, request.kyc_verified)
