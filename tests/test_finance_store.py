"""
Tests for the finance store.

Covers recurring materialization (catch-up, idempotence, month-end
clamping), the goal clamp, bills, budgets and the aggregate summaries.
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from lifeplanner.models.finance import (
    FinancialGoalCategory,
    RecurrenceFrequency,
    TransactionType,
)
from lifeplanner.services.storage import PersistenceError
from lifeplanner.stores.finance import FinanceState, FinanceStore


KEY = "pln-finance-storage"


@pytest.fixture
def store(storage, clock):
    return FinanceStore(storage, KEY, clock=clock)


@pytest.mark.asyncio
class TestTransactions:

    async def test_add_transaction_prepends(self, store):
        first = await store.add_transaction(
            date(2024, 3, 1), Decimal("10"), "Food", TransactionType.EXPENSE
        )
        second = await store.add_transaction(
            date(2024, 3, 2), Decimal("20"), "Food", TransactionType.EXPENSE
        )
        assert [t.id for t in store.transactions] == [second.id, first.id]
        assert first.is_recurring is False

    async def test_add_transaction_writes_through(self, store, storage):
        await store.add_transaction(
            date(2024, 3, 1), Decimal("10"), "Food", TransactionType.EXPENSE
        )
        saved = FinanceState.model_validate_json(await storage.get(KEY))
        assert len(saved.transactions) == 1
        assert saved.transactions[0].amount == Decimal("10")

    async def test_update_keeps_id(self, store):
        t = await store.add_transaction(
            date(2024, 3, 1), Decimal("10"), "Food", TransactionType.EXPENSE
        )
        updated = await store.update_transaction(t.id, amount=Decimal("12"), id=uuid4())
        assert updated.id == t.id
        assert store.get_transaction_by_id(t.id).amount == Decimal("12")

    async def test_update_unknown_id_is_noop(self, store, storage):
        assert await store.update_transaction(uuid4(), amount=Decimal("1")) is None
        assert await store.delete_transaction(uuid4()) is None
        assert storage.write_count == 0

    async def test_delete_transaction(self, store):
        t = await store.add_transaction(
            date(2024, 3, 1), Decimal("10"), "Food", TransactionType.EXPENSE
        )
        removed = await store.delete_transaction(t.id)
        assert removed.id == t.id
        assert store.get_transaction_by_id(t.id) is None

    async def test_filters(self, store):
        await store.add_transaction(
            date(2024, 3, 1), Decimal("10"), "Food", TransactionType.EXPENSE
        )
        await store.add_transaction(
            date(2024, 3, 15), Decimal("500"), "Salary", TransactionType.INCOME
        )
        await store.add_transaction(
            date(2024, 3, 31), Decimal("30"), "Transport", TransactionType.EXPENSE
        )

        assert len(store.get_transactions_by_category("Food")) == 1
        assert len(store.get_transactions_by_type(TransactionType.EXPENSE)) == 2
        in_range = store.get_transactions_by_date_range(date(2024, 3, 1), date(2024, 3, 15))
        assert {t.category for t in in_range} == {"Food", "Salary"}

    async def test_failed_write_raises_but_keeps_memory_state(self, store, storage):
        storage.fail_writes = True
        with pytest.raises(PersistenceError):
            await store.add_transaction(
                date(2024, 3, 1), Decimal("10"), "Food", TransactionType.EXPENSE
            )
        assert len(store.transactions) == 1
        assert await storage.get(KEY) is None


@pytest.mark.asyncio
class TestRecurringTransactions:

    async def test_last_processed_defaults_to_start_date(self, store):
        template = await store.add_recurring_transaction(
            Decimal("100"), "Rent", TransactionType.EXPENSE,
            RecurrenceFrequency.MONTHLY, date(2024, 1, 1),
        )
        assert template.last_processed == date(2024, 1, 1)

    async def test_monthly_catch_up_includes_today(self, store):
        template = await store.add_recurring_transaction(
            Decimal("100"), "Rent", TransactionType.EXPENSE,
            RecurrenceFrequency.MONTHLY, date(2024, 1, 1),
        )

        emitted = await store.process_recurring_transactions()

        assert [t.date for t in emitted] == [
            date(2024, 2, 1),
            date(2024, 3, 1),
            date(2024, 4, 1),
        ]
        assert all(t.is_recurring for t in emitted)
        assert all(t.amount == Decimal("100") for t in emitted)
        assert store.get_recurring_transaction_by_id(template.id).last_processed == date(2024, 4, 1)
        # Newest occurrence first in the list
        assert store.transactions[0].date == date(2024, 4, 1)

    async def test_second_run_emits_nothing(self, store, storage):
        await store.add_recurring_transaction(
            Decimal("100"), "Rent", TransactionType.EXPENSE,
            RecurrenceFrequency.MONTHLY, date(2024, 1, 1),
        )
        await store.process_recurring_transactions()
        writes = storage.write_count

        assert await store.process_recurring_transactions() == []
        assert len(store.transactions) == 3
        assert storage.write_count == writes

    async def test_processing_persists_once(self, store, storage):
        await store.add_recurring_transaction(
            Decimal("5"), "Coffee", TransactionType.EXPENSE,
            RecurrenceFrequency.DAILY, date(2024, 3, 25),
        )
        await store.add_recurring_transaction(
            Decimal("50"), "Gym", TransactionType.EXPENSE,
            RecurrenceFrequency.WEEKLY, date(2024, 3, 11),
        )
        writes = storage.write_count

        emitted = await store.process_recurring_transactions()

        # Daily: Mar 26..Apr 1 (7); weekly: Mar 18, Mar 25, Apr 1 (3)
        assert len(emitted) == 10
        assert storage.write_count == writes + 1
        saved = FinanceState.model_validate_json(await storage.get(KEY))
        assert len(saved.transactions) == 10

    async def test_month_end_anchor_is_kept(self, store, clock):
        clock.now = clock.now.replace(month=4, day=30)
        await store.add_recurring_transaction(
            Decimal("100"), "Savings", TransactionType.EXPENSE,
            RecurrenceFrequency.MONTHLY, date(2024, 1, 31),
        )

        emitted = await store.process_recurring_transactions()

        assert [t.date for t in emitted] == [
            date(2024, 2, 29),
            date(2024, 3, 31),
            date(2024, 4, 30),
        ]

    async def test_future_template_emits_nothing(self, store):
        await store.add_recurring_transaction(
            Decimal("100"), "Rent", TransactionType.EXPENSE,
            RecurrenceFrequency.YEARLY, date(2024, 3, 1),
        )
        assert await store.process_recurring_transactions() == []

    async def test_delete_recurring_keeps_emitted(self, store):
        template = await store.add_recurring_transaction(
            Decimal("100"), "Rent", TransactionType.EXPENSE,
            RecurrenceFrequency.MONTHLY, date(2024, 1, 1),
        )
        await store.process_recurring_transactions()
        await store.delete_recurring_transaction(template.id)
        assert store.recurring_transactions == []
        assert len(store.transactions) == 3


@pytest.mark.asyncio
class TestFinancialGoals:

    async def test_contributions_clamp_at_target(self, store):
        goal = await store.add_goal(
            "Emergency fund", Decimal("100"), FinancialGoalCategory.SAVINGS
        )
        await store.update_goal_progress(goal.id, Decimal("60"))
        updated = await store.update_goal_progress(goal.id, Decimal("60"))
        assert updated.current_amount == Decimal("100")
        assert updated.is_reached

    async def test_update_cannot_exceed_target(self, store):
        goal = await store.add_goal(
            "Laptop", Decimal("1000"), FinancialGoalCategory.PURCHASE
        )
        updated = await store.update_goal(goal.id, current_amount=Decimal("1500"))
        assert updated.current_amount == Decimal("1000")

    async def test_progress_on_unknown_goal(self, store, storage):
        assert await store.update_goal_progress(uuid4(), Decimal("10")) is None
        assert storage.write_count == 0

    async def test_goals_by_category(self, store):
        await store.add_goal("Index fund", Decimal("500"), FinancialGoalCategory.INVESTMENT)
        await store.add_goal("Car", Decimal("5000"), FinancialGoalCategory.PURCHASE)
        found = store.get_goals_by_category(FinancialGoalCategory.INVESTMENT)
        assert [g.title for g in found] == ["Index fund"]


@pytest.mark.asyncio
class TestBills:

    async def test_upcoming_bills_window(self, store):
        await store.add_bill("Past", Decimal("10"), date(2024, 3, 31), "Utilities")
        late = await store.add_bill("Late", Decimal("10"), date(2024, 4, 20), "Utilities")
        soon = await store.add_bill("Soon", Decimal("10"), date(2024, 4, 1), "Utilities")
        await store.add_bill("Paid", Decimal("10"), date(2024, 4, 5), "Utilities", is_paid=True)
        await store.add_bill("Far", Decimal("10"), date(2024, 6, 1), "Utilities")

        upcoming = store.get_upcoming_bills()

        assert [b.id for b in upcoming] == [soon.id, late.id]

    async def test_upcoming_bills_custom_days(self, store):
        await store.add_bill("Water", Decimal("10"), date(2024, 4, 8), "Utilities")
        assert store.get_upcoming_bills(days=7) != []
        assert store.get_upcoming_bills(days=6) == []

    async def test_toggle_bill_paid(self, store):
        bill = await store.add_bill("Power", Decimal("80"), date(2024, 4, 10), "Utilities")
        toggled = await store.toggle_bill_paid(bill.id)
        assert toggled.is_paid is True
        toggled = await store.toggle_bill_paid(bill.id)
        assert toggled.is_paid is False

    async def test_bills_are_appended(self, store):
        first = await store.add_bill("A", Decimal("1"), date(2024, 4, 10), "X")
        second = await store.add_bill("B", Decimal("1"), date(2024, 4, 2), "X")
        assert [b.id for b in store.bills] == [first.id, second.id]


@pytest.mark.asyncio
class TestBudgets:

    async def _budget_with_spending(self, store):
        budget = await store.add_budget(
            "April", Decimal("500"), date(2024, 4, 1), date(2024, 4, 30)
        )
        await store.add_budget_category(budget.id, "Food", Decimal("300"))
        await store.add_budget_category(budget.id, "Fun", Decimal("100"))
        await store.add_transaction(
            date(2024, 4, 2), Decimal("200"), "Food", TransactionType.EXPENSE
        )
        await store.add_transaction(
            date(2024, 3, 30), Decimal("70"), "Food", TransactionType.EXPENSE
        )
        await store.add_transaction(
            date(2024, 4, 3), Decimal("50"), "Transport", TransactionType.EXPENSE
        )
        await store.add_transaction(
            date(2024, 4, 4), Decimal("1000"), "Food", TransactionType.INCOME
        )
        return budget

    async def test_budget_progress(self, store):
        budget = await self._budget_with_spending(store)

        progress = store.get_budget_progress(budget.id)

        assert progress.spent == Decimal("200")
        assert progress.remaining == Decimal("300")
        assert progress.percentage == pytest.approx(40.0)

    async def test_category_breakdown(self, store):
        budget = await self._budget_with_spending(store)

        breakdown = {p.name: p for p in store.get_budget_category_progress(budget.id)}

        assert breakdown["Food"].spent == Decimal("200")
        assert breakdown["Food"].remaining == Decimal("100")
        assert breakdown["Food"].percentage == pytest.approx(200 / 3)
        assert breakdown["Fun"].spent == Decimal("0")
        assert breakdown["Fun"].percentage == 0.0

    async def test_unknown_budget_is_all_zero(self, store):
        progress = store.get_budget_progress(uuid4())
        assert progress.spent == Decimal("0")
        assert progress.remaining == Decimal("0")
        assert progress.percentage == 0.0
        assert store.get_budget_category_progress(uuid4()) == []

    async def test_zero_amount_budget(self, store):
        budget = await store.add_budget(
            "Empty", Decimal("0"), date(2024, 4, 1), date(2024, 4, 30)
        )
        await store.add_budget_category(budget.id, "Food", Decimal("0"))
        await store.add_transaction(
            date(2024, 4, 2), Decimal("20"), "Food", TransactionType.EXPENSE
        )
        progress = store.get_budget_progress(budget.id)
        assert progress.percentage == 0.0
        assert progress.remaining == Decimal("0")

    async def test_overspending_caps_percentage(self, store):
        budget = await store.add_budget(
            "Tight", Decimal("100"), date(2024, 4, 1), date(2024, 4, 30)
        )
        await store.add_budget_category(budget.id, "Food", Decimal("100"))
        await store.add_transaction(
            date(2024, 4, 2), Decimal("150"), "Food", TransactionType.EXPENSE
        )
        progress = store.get_budget_progress(budget.id)
        assert progress.percentage == 100.0
        assert progress.remaining == Decimal("0")

    async def test_delete_budget_removes_its_categories(self, store):
        budget = await store.add_budget(
            "April", Decimal("500"), date(2024, 4, 1), date(2024, 4, 30)
        )
        other = await store.add_budget(
            "May", Decimal("500"), date(2024, 5, 1), date(2024, 5, 31)
        )
        await store.add_budget_category(budget.id, "Food", Decimal("300"))
        await store.add_budget_category(other.id, "Food", Decimal("300"))

        await store.delete_budget(budget.id)

        assert store.get_budget_categories(budget.id) == []
        assert len(store.get_budget_categories(other.id)) == 1
        assert [b.id for b in store.budgets] == [other.id]

    async def test_update_and_delete_budget_category(self, store):
        budget = await store.add_budget(
            "April", Decimal("500"), date(2024, 4, 1), date(2024, 4, 30)
        )
        category = await store.add_budget_category(budget.id, "Food", Decimal("300"))
        updated = await store.update_budget_category(category.id, limit=Decimal("250"))
        assert updated.limit == Decimal("250")
        await store.delete_budget_category(category.id)
        assert store.get_budget_categories(budget.id) == []
    async def test_refund_gives_negative_share(self, store):
        budget = await store.add_budget(
            "April", Decimal("500"), date(2024, 4, 1), date(2024, 4, 30)
        )
        await store.add_budget_category(budget.id, "Food", Decimal("200"))
        await store.add_transaction(
            date(2024, 4, 2), Decimal("-50"), "Food", TransactionType.EXPENSE
        )

        progress = store.get_budget_progress(budget.id)
        breakdown = store.get_budget_category_progress(budget.id)

        assert progress.spent == Decimal("-50")
        assert progress.remaining == Decimal("550")
        assert progress.percentage == pytest.approx(-10.0)
        assert breakdown[0].spent == Decimal("-50")
        assert breakdown[0].remaining == Decimal("250")
        assert breakdown[0].percentage == pytest.approx(-25.0)

    async def test_same_named_categories_count_per_row(self, store):
        budget = await store.add_budget(
            "April", Decimal("500"), date(2024, 4, 1), date(2024, 4, 30)
        )
        await store.add_budget_category(budget.id, "Food", Decimal("100"))
        await store.add_budget_category(budget.id, "Food", Decimal("100"))
        await store.add_transaction(
            date(2024, 4, 2), Decimal("60"), "Food", TransactionType.EXPENSE
        )

        progress = store.get_budget_progress(budget.id)

        assert progress.spent == Decimal("120")
        assert progress.percentage == pytest.approx(24.0)


@pytest.mark.asyncio
class TestSummaries:

    async def test_net_income_and_expenses_by_category(self, store):
        await store.add_transaction(
            date(2024, 1, 5), Decimal("1000"), "Salary", TransactionType.INCOME
        )
        await store.add_transaction(
            date(2024, 1, 10), Decimal("200"), "Food", TransactionType.EXPENSE
        )

        assert store.get_total_income() == Decimal("1000")
        assert store.get_total_expenses() == Decimal("200")
        assert store.get_net_income() == Decimal("800")
        assert store.get_expenses_by_category() == {"Food": Decimal("200")}

    async def test_date_filter_needs_both_bounds(self, store):
        await store.add_transaction(
            date(2024, 1, 5), Decimal("1000"), "Salary", TransactionType.INCOME
        )
        await store.add_transaction(
            date(2024, 2, 5), Decimal("1000"), "Salary", TransactionType.INCOME
        )

        assert store.get_total_income(date(2024, 1, 1), date(2024, 1, 31)) == Decimal("1000")
        assert store.get_total_income(start=date(2024, 2, 1)) == Decimal("2000")

    async def test_range_totals_include_both_bounds(self, store):
        start, end = date(2024, 3, 1), date(2024, 3, 31)
        await store.add_transaction(
            date(2024, 2, 29), Decimal("7"), "Food", TransactionType.EXPENSE
        )
        await store.add_transaction(start, Decimal("100"), "Gift", TransactionType.INCOME)
        await store.add_transaction(
            date(2024, 3, 15), Decimal("10"), "Food", TransactionType.EXPENSE
        )
        await store.add_transaction(end, Decimal("40"), "Food", TransactionType.EXPENSE)
        await store.add_transaction(
            date(2024, 4, 1), Decimal("1000"), "Salary", TransactionType.INCOME
        )

        in_range = store.get_transactions_by_date_range(start, end)
        income = store.get_total_income(start, end)
        expenses = store.get_total_expenses(start, end)

        assert {t.date for t in in_range} == {start, date(2024, 3, 15), end}
        assert income == Decimal("100")
        assert expenses == Decimal("50")
        assert income + expenses == sum((t.amount for t in in_range), Decimal("0"))

    async def test_expenses_by_category_first_seen_order(self, store):
        # Prepended, so "Rent" is seen first
        await store.add_transaction(
            date(2024, 1, 1), Decimal("5"), "Food", TransactionType.EXPENSE
        )
        await store.add_transaction(
            date(2024, 1, 2), Decimal("700"), "Rent", TransactionType.EXPENSE
        )
        await store.add_transaction(
            date(2024, 1, 3), Decimal("7"), "Food", TransactionType.EXPENSE
        )

        totals = store.get_expenses_by_category()

        assert list(totals) == ["Food", "Rent"]
        assert totals["Food"] == Decimal("12")

    async def test_empty_store_totals(self, store):
        assert store.get_total_income() == Decimal("0")
        assert store.get_net_income() == Decimal("0")
        assert store.get_expenses_by_category() == {}

    async def test_monthly_series(self, store):
        await store.add_transaction(
            date(2024, 1, 5), Decimal("100"), "Food", TransactionType.EXPENSE
        )
        await store.add_transaction(
            date(2024, 1, 20), Decimal("50"), "Food", TransactionType.EXPENSE
        )
        await store.add_transaction(
            date(2024, 12, 1), Decimal("10"), "Food", TransactionType.EXPENSE
        )
        await store.add_transaction(
            date(2023, 1, 1), Decimal("999"), "Food", TransactionType.EXPENSE
        )
        await store.add_transaction(
            date(2024, 3, 1), Decimal("2000"), "Salary", TransactionType.INCOME
        )

        expenses = store.get_monthly_expenses()
        income = store.get_monthly_income(2024)

        assert len(expenses) == 12
        assert expenses[0] == Decimal("150")
        assert expenses[11] == Decimal("10")
        assert sum(expenses) == Decimal("160")
        assert income[2] == Decimal("2000")
        assert store.get_monthly_expenses(2023)[0] == Decimal("999")
