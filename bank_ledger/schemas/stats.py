"""
Pydantic schemas for dashboard statistics.
"""

from decimal import Decimal

from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_customers: int
    total_accounts: int
    total_balance: Decimal
