"""
Customer service: registration and lookup of account holders.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from bank_ledger.errors import NotFound, ValidationError
from bank_ledger.models.base import unit_of_work
from bank_ledger.models.customer import Customer
from bank_ledger.schemas.customer import CustomerCreate

logger = logging.getLogger(__name__)


class CustomerService:

    def __init__(self, db: Session):
        self.db = db

    def create_customer(self, request: CustomerCreate) -> Customer:
        """Create a new customer. The national ID must be unused."""
        existing = self.db.execute(
            select(Customer).where(Customer.national_id == request.national_id)
        ).scalar_one_or_none()

        if existing:
            raise ValidationError(
                f"Customer with national ID '{request.national_id}' already exists"
            )

        with unit_of_work(self.db, "create_customer"):
            customer = Customer(**request.model_dump())
            self.db.add(customer)
            self.db.flush()

        logger.info("Customer %s created", customer.id)
        return customer

    def list_customers(self) -> list[Customer]:
        customers = self.db.execute(
            select(Customer).order_by(Customer.id)
        ).scalars().all()
        return list(customers)

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if not customer:
            raise NotFound(f"Customer {customer_id} not found")
        return customer

    def get_customer_with_accounts(self, customer_id: int) -> Customer:
        """Get a customer with their accounts loaded."""
        customer = self.db.execute(
            select(Customer)
            .where(Customer.id == customer_id)
            .options(selectinload(Customer.accounts))
        ).scalar_one_or_none()
        if not customer:
            raise NotFound(f"Customer {customer_id} not found")
        return customer

    def set_kyc_verified(self, customer_id: int, verified: bool) -> Customer:
        """
        Change the KYC flag, the one customer field that is
        mutable after creation.
        """
        with unit_of_work(self.db, "set_kyc_verified"):
            customer = self.get_customer(customer_id)
            customer.kyc_verified = verified

        logger.info("Customer %s KYC verified=%s", customer_id, verified)
        return customer
