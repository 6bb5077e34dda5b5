"""
Typed Records for Finance Store

One model per table. Rows coming back from the database are decoded
by column name into these records, so a record never depends on the
order in which the driver happened to return columns.

DESIGN DECISION: Records describe what is stored, nothing more.
There is no validation beyond types here - enumerated values and
foreign keys are enforced by the database itself.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """
    General accounting type of an account.

    Fixed at creation.
    """
    ASSET = "Asset"
    LIABILITY = "Liability"


class AccountStatus(str, Enum):
    """Lifecycle status of an account."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    CLOSED = "Closed"


class CategoryType(str, Enum):
    """
    General accounting type of a category.

    Fixed at creation.
    """
    INCOME = "Income"
    EXPENSE = "Expense"
    EQUITY = "Equity"


class BudgetPeriod(str, Enum):
    """How often a budget amount renews."""
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    YEARLY = "yearly"
    ONE_TIME = "one-time"


# =============================================================================
# RECORDS
# =============================================================================

class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore")


class AccountRecord(_Record):
    """
    A financial account: checking, savings, credit card, mortgage...

    current_balance is a running total maintained by callers; nothing
    here recomputes it from transaction history.
    """
    id: int
    name: str
    type: AccountType
    color: Optional[str] = None
    currency: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    initial_balance: float = 0.0
    current_balance: float = 0.0
    status: AccountStatus = AccountStatus.ACTIVE
    created_at: datetime
    updated_at: datetime


class CategoryRecord(_Record):
    """Classifies financial movements (Groceries, Salary, Rent...)."""
    id: int
    name: str
    type: CategoryType


class TransactionRecord(_Record):
    """
    An individual financial movement.

    Always linked to exactly one account and one category.
    """
    id: int
    amount: float
    date: str
    description: Optional[str] = None
    payee: Optional[str] = None
    account_id: int
    category_id: int
    transaction_type: Optional[str] = None  # e.g. upcoming, subscription, repetitive
    notes: Optional[str] = None
    attachments: Optional[Any] = None

    @field_validator('attachments', mode='before')
    @classmethod
    def decode_attachments(cls, v: Any) -> Any:
        """Attachments are stored as JSON text."""
        if isinstance(v, (str, bytes)):
            return json.loads(v)
        return v


class BudgetRecord(_Record):
    """
    A spending limit for a period.

    A budget without a category applies to overall spending.
    """
    id: int
    name: str
    amount: float
    period_type: BudgetPeriod
    start_date: str
    end_date: Optional[str] = None
    category_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class GoalRecord(_Record):
    """A savings target (house down payment, retirement fund...)."""
    id: int
    name: str
    target_amount: float
    current_amount: float = 0.0
    target_date: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
