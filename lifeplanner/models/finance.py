"""
Finance Models

Transactions, savings goals, recurring templates, bills and budgets.

DESIGN DECISION: Amounts are Decimal, never float, so totals add up
exactly. The store trusts its inputs: a negative amount is accepted,
input validation is the caller's job.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class RecurrenceFrequency(str, Enum):
    """How often a recurring template spawns a transaction."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BillFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class FinancialGoalCategory(str, Enum):
    SAVINGS = "savings"
    INVESTMENT = "investment"
    DEBT = "debt"
    PURCHASE = "purchase"


# =============================================================================
# TRANSACTIONS
# =============================================================================

class FinancialTransaction(BaseModel):
    """A single income or expense on a given day."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    date: dt.date
    amount: Decimal = Field(..., description="Positive amount; sign comes from `type`")
    category: str
    description: Optional[str] = None
    type: TransactionType
    is_recurring: bool = False


class RecurringTransaction(BaseModel):
    """
    Template that spawns concrete FinancialTransactions.

    `last_processed` is the date of the most recent occurrence already
    emitted. A fresh template starts with `last_processed == start_date`,
    so its first emitted occurrence is one interval after the start.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    amount: Decimal
    category: str
    description: Optional[str] = None
    type: TransactionType
    frequency: RecurrenceFrequency
    start_date: dt.date
    last_processed: Optional[dt.date] = None

    @model_validator(mode='after')
    def default_last_processed(self) -> 'RecurringTransaction':
        if self.last_processed is None:
            self.last_processed = self.start_date
        return self


# =============================================================================
# GOALS
# =============================================================================

class FinancialGoal(BaseModel):
    """
    A savings/investment/debt/purchase target.

    INVARIANT: current_amount never exceeds target_amount. The validator
    clamps on creation and on every re-validated update, and contributions
    clamp as well (see FinanceStore.update_goal_progress).
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    deadline: Optional[dt.date] = None
    category: FinancialGoalCategory

    @model_validator(mode='after')
    def clamp_current_amount(self) -> 'FinancialGoal':
        if self.current_amount > self.target_amount:
            self.current_amount = self.target_amount
        return self

    @property
    def is_reached(self) -> bool:
        return self.current_amount >= self.target_amount


# =============================================================================
# BILLS AND BUDGETS
# =============================================================================

class Bill(BaseModel):
    """An upcoming payment."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    amount: Decimal
    due_date: dt.date
    category: str
    is_paid: bool = False
    is_recurring: bool = False
    frequency: Optional[BillFrequency] = None


class Budget(BaseModel):
    """A spending envelope over a date range."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    amount: Decimal
    start_date: dt.date
    end_date: dt.date
    description: Optional[str] = None


class BudgetCategory(BaseModel):
    """
    Per-category limit inside a budget.

    `name` is matched against FinancialTransaction.category.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    budget_id: UUID
    name: str
    limit: Decimal


class BudgetProgress(BaseModel):
    """Spending against a budget."""

    spent: Decimal = Decimal("0")
    remaining: Decimal = Decimal("0")
    # No lower bound: net refunds give a negative share
    percentage: float = Field(default=0.0, le=100.0)


class BudgetCategoryProgress(BaseModel):
    """Spending against one category limit of a budget."""

    category_id: UUID
    name: str
    limit: Decimal
    spent: Decimal
    remaining: Decimal
    percentage: float = Field(le=100.0)
