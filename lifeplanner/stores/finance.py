"""
Finance Store

Transactions, financial goals, recurring templates, bills and budgets,
persisted together as one document, plus the aggregates computed over them.

The recurring-transaction materializer back-fills every occurrence that
fell due while the app was closed:

    for each template T:
        next = advance(T.last_processed)
        while next <= today:
            emit a transaction dated `next` (is_recurring=True)
            T.last_processed = next
            next = advance(next)

`next <= today` is inclusive, so an occurrence due today is emitted today.
Running it again without time passing emits nothing.
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from lifeplanner.models.audit import AuditEventBuilder
from lifeplanner.models.finance import (
    Bill,
    BillFrequency,
    Budget,
    BudgetCategory,
    BudgetCategoryProgress,
    BudgetProgress,
    FinancialGoal,
    FinancialGoalCategory,
    FinancialTransaction,
    RecurrenceFrequency,
    RecurringTransaction,
    TransactionType,
)
from lifeplanner.services.scheduling import advance_date
from lifeplanner.stores.base import PersistentStore, find_index


ZERO = Decimal("0")


def spent_percentage(spent: Decimal, amount: Decimal) -> float:
    """
    Share of `amount` spent, capped at 100; 0 for a non-positive amount.

    There is no lower bound: net refunds give a negative share.
    """
    if amount <= 0:
        return 0.0
    return min(100.0, float(spent / amount * 100))


class FinanceState(BaseModel):
    transactions: list[FinancialTransaction] = Field(default_factory=list)
    goals: list[FinancialGoal] = Field(default_factory=list)
    recurring_transactions: list[RecurringTransaction] = Field(default_factory=list)
    bills: list[Bill] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)
    budget_categories: list[BudgetCategory] = Field(default_factory=list)


class FinanceStore(PersistentStore[FinanceState]):

    state_model = FinanceState

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    @property
    def transactions(self) -> list[FinancialTransaction]:
        return list(self._state.transactions)

    def get_transaction_by_id(self, transaction_id: UUID) -> Optional[FinancialTransaction]:
        index = find_index(self._state.transactions, transaction_id)
        return None if index is None else self._state.transactions[index]

    def get_transactions_by_category(self, category: str) -> list[FinancialTransaction]:
        return [t for t in self._state.transactions if t.category == category]

    def get_transactions_by_type(self, type: TransactionType) -> list[FinancialTransaction]:
        return [t for t in self._state.transactions if t.type == type]

    def get_transactions_by_date_range(
        self,
        start: date,
        end: date,
    ) -> list[FinancialTransaction]:
        """Transactions dated within [start, end], inclusive."""
        return [t for t in self._state.transactions if start <= t.date <= end]

    async def add_transaction(
        self,
        date: date,
        amount: Decimal,
        category: str,
        type: TransactionType,
        description: Optional[str] = None,
        is_recurring: bool = False,
    ) -> FinancialTransaction:
        transaction = FinancialTransaction(
            date=date,
            amount=amount,
            category=category,
            type=type,
            description=description,
            is_recurring=is_recurring,
        )
        self._state.transactions.insert(0, transaction)
        await self._commit(AuditEventBuilder.entity_created(
            "transaction", transaction.id,
            {"type": transaction.type.value, "amount": str(transaction.amount)},
        ))
        return transaction

    async def update_transaction(
        self,
        transaction_id: UUID,
        **changes: Any,
    ) -> Optional[FinancialTransaction]:
        return await self._update_in(
            self._state.transactions, "transaction", transaction_id, changes
        )

    async def delete_transaction(self, transaction_id: UUID) -> Optional[FinancialTransaction]:
        return await self._delete_from(self._state.transactions, "transaction", transaction_id)

    # =========================================================================
    # FINANCIAL GOALS
    # =========================================================================

    @property
    def goals(self) -> list[FinancialGoal]:
        return list(self._state.goals)

    def get_goal_by_id(self, goal_id: UUID) -> Optional[FinancialGoal]:
        index = find_index(self._state.goals, goal_id)
        return None if index is None else self._state.goals[index]

    def get_goals_by_category(self, category: FinancialGoalCategory) -> list[FinancialGoal]:
        return [g for g in self._state.goals if g.category == category]

    async def add_goal(
        self,
        title: str,
        target_amount: Decimal,
        category: FinancialGoalCategory,
        current_amount: Decimal = ZERO,
        deadline: Optional[date] = None,
    ) -> FinancialGoal:
        goal = FinancialGoal(
            title=title,
            target_amount=target_amount,
            current_amount=current_amount,
            category=category,
            deadline=deadline,
        )
        self._state.goals.insert(0, goal)
        await self._commit(AuditEventBuilder.entity_created(
            "financial_goal", goal.id, {"title": goal.title}
        ))
        return goal

    async def update_goal(self, goal_id: UUID, **changes: Any) -> Optional[FinancialGoal]:
        return await self._update_in(self._state.goals, "financial_goal", goal_id, changes)

    async def delete_goal(self, goal_id: UUID) -> Optional[FinancialGoal]:
        return await self._delete_from(self._state.goals, "financial_goal", goal_id)

    async def update_goal_progress(
        self,
        goal_id: UUID,
        amount: Decimal,
    ) -> Optional[FinancialGoal]:
        """Contribute `amount` to a goal; the balance never passes the target."""
        goal = self.get_goal_by_id(goal_id)
        if goal is None:
            self._not_found("financial_goal", goal_id)
            return None
        new_amount = min(goal.current_amount + amount, goal.target_amount)
        return await self.update_goal(goal_id, current_amount=new_amount)

    # =========================================================================
    # RECURRING TRANSACTIONS
    # =========================================================================

    @property
    def recurring_transactions(self) -> list[RecurringTransaction]:
        return list(self._state.recurring_transactions)

    def get_recurring_transaction_by_id(
        self,
        template_id: UUID,
    ) -> Optional[RecurringTransaction]:
        index = find_index(self._state.recurring_transactions, template_id)
        return None if index is None else self._state.recurring_transactions[index]

    async def add_recurring_transaction(
        self,
        amount: Decimal,
        category: str,
        type: TransactionType,
        frequency: RecurrenceFrequency,
        start_date: date,
        description: Optional[str] = None,
        last_processed: Optional[date] = None,
    ) -> RecurringTransaction:
        """
        Register a template.

        `last_processed` defaults to `start_date`: the first emitted
        occurrence is one interval after the start.
        """
        template = RecurringTransaction(
            amount=amount,
            category=category,
            type=type,
            frequency=frequency,
            start_date=start_date,
            description=description,
            last_processed=last_processed,
        )
        self._state.recurring_transactions.append(template)
        await self._commit(AuditEventBuilder.entity_created(
            "recurring_transaction", template.id, {"frequency": template.frequency.value}
        ))
        return template

    async def update_recurring_transaction(
        self,
        template_id: UUID,
        **changes: Any,
    ) -> Optional[RecurringTransaction]:
        return await self._update_in(
            self._state.recurring_transactions, "recurring_transaction", template_id, changes
        )

    async def delete_recurring_transaction(
        self,
        template_id: UUID,
    ) -> Optional[RecurringTransaction]:
        return await self._delete_from(
            self._state.recurring_transactions, "recurring_transaction", template_id
        )

    async def process_recurring_transactions(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> list[FinancialTransaction]:
        """
        Materialize every occurrence due up to and including today.

        Returns:
            The emitted transactions, oldest first. Nothing is written
            when nothing was due.
        """
        today = self.today()
        emitted: list[FinancialTransaction] = []

        for index, template in enumerate(self._state.recurring_transactions):
            anchor_day = template.start_date.day
            last_processed = template.last_processed or template.start_date
            occurrences: list[FinancialTransaction] = []

            next_date = advance_date(last_processed, template.frequency, anchor_day)
            while next_date <= today:
                occurrences.append(FinancialTransaction(
                    date=next_date,
                    amount=template.amount,
                    category=template.category,
                    description=template.description,
                    type=template.type,
                    is_recurring=True,
                ))
                last_processed = next_date
                next_date = advance_date(next_date, template.frequency, anchor_day)

            if not occurrences:
                continue

            self._state.recurring_transactions[index] = template.model_copy(
                update={"last_processed": last_processed}
            )
            for transaction in occurrences:
                self._state.transactions.insert(0, transaction)
            emitted.extend(occurrences)
            await self.record_event(AuditEventBuilder.recurring_materialized(
                template.id,
                [t.date.isoformat() for t in occurrences],
                correlation_id=correlation_id,
            ))

        if emitted:
            self._logger.info("recurring_transactions_processed", count=len(emitted))
            await self._commit()
        return emitted

    # =========================================================================
    # BILLS
    # =========================================================================

    @property
    def bills(self) -> list[Bill]:
        return list(self._state.bills)

    def get_bill_by_id(self, bill_id: UUID) -> Optional[Bill]:
        index = find_index(self._state.bills, bill_id)
        return None if index is None else self._state.bills[index]

    async def add_bill(
        self,
        name: str,
        amount: Decimal,
        due_date: date,
        category: str,
        is_paid: bool = False,
        is_recurring: bool = False,
        frequency: Optional[BillFrequency] = None,
    ) -> Bill:
        bill = Bill(
            name=name,
            amount=amount,
            due_date=due_date,
            category=category,
            is_paid=is_paid,
            is_recurring=is_recurring,
            frequency=frequency,
        )
        self._state.bills.append(bill)
        await self._commit(AuditEventBuilder.entity_created(
            "bill", bill.id, {"name": bill.name, "amount": str(bill.amount)}
        ))
        return bill

    async def update_bill(self, bill_id: UUID, **changes: Any) -> Optional[Bill]:
        return await self._update_in(self._state.bills, "bill", bill_id, changes)

    async def delete_bill(self, bill_id: UUID) -> Optional[Bill]:
        return await self._delete_from(self._state.bills, "bill", bill_id)

    async def toggle_bill_paid(self, bill_id: UUID) -> Optional[Bill]:
        bill = self.get_bill_by_id(bill_id)
        if bill is None:
            self._not_found("bill", bill_id)
            return None
        return await self.update_bill(bill_id, is_paid=not bill.is_paid)

    def get_upcoming_bills(self, days: int = 30) -> list[Bill]:
        """Unpaid bills due within [today, today + days], soonest first."""
        today = self.today()
        horizon = today + timedelta(days=days)
        upcoming = [
            b for b in self._state.bills
            if not b.is_paid and today <= b.due_date <= horizon
        ]
        return sorted(upcoming, key=lambda b: b.due_date)

    # =========================================================================
    # BUDGETS
    # =========================================================================

    @property
    def budgets(self) -> list[Budget]:
        return list(self._state.budgets)

    def get_budget_by_id(self, budget_id: UUID) -> Optional[Budget]:
        index = find_index(self._state.budgets, budget_id)
        return None if index is None else self._state.budgets[index]

    def get_budget_categories(self, budget_id: UUID) -> list[BudgetCategory]:
        return [c for c in self._state.budget_categories if c.budget_id == budget_id]

    async def add_budget(
        self,
        name: str,
        amount: Decimal,
        start_date: date,
        end_date: date,
        description: Optional[str] = None,
    ) -> Budget:
        budget = Budget(
            name=name,
            amount=amount,
            start_date=start_date,
            end_date=end_date,
            description=description,
        )
        self._state.budgets.append(budget)
        await self._commit(AuditEventBuilder.entity_created(
            "budget", budget.id, {"name": budget.name}
        ))
        return budget

    async def update_budget(self, budget_id: UUID, **changes: Any) -> Optional[Budget]:
        return await self._update_in(self._state.budgets, "budget", budget_id, changes)

    async def delete_budget(self, budget_id: UUID) -> Optional[Budget]:
        """Remove a budget and its category limits."""
        index = find_index(self._state.budgets, budget_id)
        if index is None:
            self._not_found("budget", budget_id)
            return None
        removed = self._state.budgets.pop(index)
        self._state.budget_categories = [
            c for c in self._state.budget_categories if c.budget_id != budget_id
        ]
        await self._commit(AuditEventBuilder.entity_deleted("budget", budget_id))
        return removed

    async def add_budget_category(
        self,
        budget_id: UUID,
        name: str,
        limit: Decimal,
    ) -> BudgetCategory:
        category = BudgetCategory(budget_id=budget_id, name=name, limit=limit)
        self._state.budget_categories.append(category)
        await self._commit(AuditEventBuilder.entity_created(
            "budget_category", category.id, {"budget_id": str(budget_id), "name": name}
        ))
        return category

    async def update_budget_category(
        self,
        category_id: UUID,
        **changes: Any,
    ) -> Optional[BudgetCategory]:
        return await self._update_in(
            self._state.budget_categories, "budget_category", category_id, changes
        )

    async def delete_budget_category(self, category_id: UUID) -> Optional[BudgetCategory]:
        return await self._delete_from(
            self._state.budget_categories, "budget_category", category_id
        )

    def _budget_expenses_by_category(self, budget: Budget) -> dict[str, Decimal]:
        spent: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for t in self.get_transactions_by_date_range(budget.start_date, budget.end_date):
            if t.type == TransactionType.EXPENSE:
                spent[t.category] += t.amount
        return spent

    def get_budget_progress(self, budget_id: UUID) -> BudgetProgress:
        """
        Spending against a budget.

        Counts expenses inside the budget's date range, once for each of the
        budget's category rows matching their category. Unknown budget: all
        zeros.
        """
        budget = self.get_budget_by_id(budget_id)
        if budget is None:
            return BudgetProgress()

        by_category = self._budget_expenses_by_category(budget)
        # Summed per category row; two rows with one name count twice
        spent = sum(
            (by_category.get(c.name, ZERO) for c in self.get_budget_categories(budget_id)),
            ZERO,
        )

        return BudgetProgress(
            spent=spent,
            remaining=max(ZERO, budget.amount - spent),
            percentage=spent_percentage(spent, budget.amount),
        )

    def get_budget_category_progress(self, budget_id: UUID) -> list[BudgetCategoryProgress]:
        """Per-category spending against each limit of a budget."""
        budget = self.get_budget_by_id(budget_id)
        if budget is None:
            return []

        by_category = self._budget_expenses_by_category(budget)
        breakdown = []
        for category in self.get_budget_categories(budget_id):
            spent = by_category.get(category.name, ZERO)
            breakdown.append(BudgetCategoryProgress(
                category_id=category.id,
                name=category.name,
                limit=category.limit,
                spent=spent,
                remaining=max(ZERO, category.limit - spent),
                percentage=spent_percentage(spent, category.limit),
            ))
        return breakdown

    # =========================================================================
    # SUMMARIES
    # =========================================================================

    def _in_period(
        self,
        type: TransactionType,
        start: Optional[date],
        end: Optional[date],
    ) -> list[FinancialTransaction]:
        # The date filter applies only when both bounds are given
        if start is not None and end is not None:
            candidates = self.get_transactions_by_date_range(start, end)
        else:
            candidates = self._state.transactions
        return [t for t in candidates if t.type == type]

    def get_total_income(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Decimal:
        return sum(
            (t.amount for t in self._in_period(TransactionType.INCOME, start, end)),
            ZERO,
        )

    def get_total_expenses(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Decimal:
        return sum(
            (t.amount for t in self._in_period(TransactionType.EXPENSE, start, end)),
            ZERO,
        )

    def get_net_income(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Decimal:
        return self.get_total_income(start, end) - self.get_total_expenses(start, end)

    def get_expenses_by_category(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> dict[str, Decimal]:
        """Expense totals per category, in first-seen order."""
        totals: dict[str, Decimal] = {}
        for t in self._in_period(TransactionType.EXPENSE, start, end):
            totals[t.category] = totals.get(t.category, ZERO) + t.amount
        return totals

    def _monthly(self, type: TransactionType, year: Optional[int]) -> list[Decimal]:
        year = year if year is not None else self.today().year
        months = [ZERO] * 12
        for t in self._state.transactions:
            if t.type == type and t.date.year == year:
                months[t.date.month - 1] += t.amount
        return months

    def get_monthly_expenses(self, year: Optional[int] = None) -> list[Decimal]:
        """Twelve expense totals, January first (current year by default)."""
        return self._monthly(TransactionType.EXPENSE, year)

    def get_monthly_income(self, year: Optional[int] = None) -> list[Decimal]:
        """Twelve income totals, January first (current year by default)."""
        return self._monthly(TransactionType.INCOME, year)
