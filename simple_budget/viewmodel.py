"""Aggregation engine between the store and whatever renders the budget.

``BudgetViewModel`` keeps one live query on the viewed month and republishes
an immutable ``UiState`` whenever the month's budgets or transactions change.
Mutations are queued through a dispatcher and never return a result; callers
observe their effect in the next published state.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

import pandas as pd
from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .amounts import from_cents
from .forms import budget_amount, coerce_category, validate_expense
from .models import (
    CATEGORIES,
    BudgetRecord,
    Category,
    CategorySummary,
    TransactionRecord,
    UiState,
    budget_after_hide,
    budget_after_set,
    budget_after_spend,
)
from .months import current_month_year, month_of_millis, parse_month_year, shift_month
from .store import BudgetStore, StoreError, Subscription, transaction_records

logger = logging.getLogger(__name__)

Dispatcher = Callable[[Callable[[], None]], None]


def qt_dispatcher(job: Callable[[], None]) -> None:
    """Run ``job`` on the next pass of the Qt event loop."""
    QTimer.singleShot(0, job)


def build_summaries(budgets: pd.DataFrame, transactions: pd.DataFrame) -> tuple[CategorySummary, ...]:
    """Derive the visible category summaries of one month.

    Only active budget rows are shown. A row's spend is the sum of the month's
    transactions of its category recorded after the row's reset watermark.
    """
    if budgets.empty:
        return ()
    active = budgets[budgets["is_active"].astype(bool)]
    if active.empty:
        return ()

    spent: dict[str, int] = {}
    if not transactions.empty:
        merged = transactions[["id", "category_id", "amount_cents"]].merge(
            active[["category_id", "reset_after_id"]], on="category_id", how="inner"
        )
        merged = merged[merged["id"].astype("int64") > merged["reset_after_id"].astype("int64")]
        if not merged.empty:
            spent = {cid: int(total) for cid, total in merged.groupby("category_id")["amount_cents"].sum().items()}

    summaries = []
    for row in active.itertuples(index=False):
        try:
            category = Category.from_id(row.category_id)
        except ValueError:
            logger.warning("Skipping budget %s with unknown category %r", row.id, row.category_id)
            continue
        summaries.append(
            CategorySummary(
                category=category,
                budget_amount=from_cents(row.max_budget_cents),
                spent_amount=from_cents(spent.get(row.category_id, 0)),
            )
        )
    summaries.sort(key=lambda summary: summary.category.order)
    return tuple(summaries)


class BudgetViewModel(QObject):
    state_changed = pyqtSignal(object)
    transactions_changed = pyqtSignal(object)

    def __init__(
        self,
        store: BudgetStore,
        *,
        clock: Callable[[], datetime] | None = None,
        dispatcher: Dispatcher | None = None,
        month_year: str | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._store = store
        self._clock = clock or datetime.now
        self._dispatch = dispatcher or qt_dispatcher
        self.categories: tuple[Category, ...] = CATEGORIES
        month_year = month_year or current_month_year(self._clock())
        parse_month_year(month_year)
        self._state = UiState(month_year=month_year)
        self._transactions: tuple[TransactionRecord, ...] = ()
        self._subscription: Optional[Subscription] = None
        self._observe(month_year)

    # -- published state -------------------------------------------------

    @property
    def state(self) -> UiState:
        return self._state

    @property
    def transactions(self) -> tuple[TransactionRecord, ...]:
        return self._transactions

    @property
    def month_year(self) -> str:
        return self._state.month_year

    def _set_state(self, state: UiState) -> None:
        self._state = state
        self.state_changed.emit(state)

    # -- subscription ----------------------------------------------------

    def _observe(self, month_year: str) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        self._transactions = ()
        self._set_state(UiState(month_year=month_year, error_message=self._state.error_message))
        self._subscription = self._store.observe_month(
            month_year,
            lambda budgets, transactions: self._on_month_data(month_year, budgets, transactions),
            on_error=self._on_store_error,
        )

    def _on_month_data(self, month_year: str, budgets: pd.DataFrame, transactions: pd.DataFrame) -> None:
        if month_year != self._state.month_year:
            return
        self._transactions = transaction_records(transactions)
        self.transactions_changed.emit(self._transactions)
        self._set_state(
            UiState(
                month_year=month_year,
                summaries=build_summaries(budgets, transactions),
                is_loading=False,
                error_message=None,
            )
        )

    def _on_store_error(self, exc: StoreError) -> None:
        logger.error("Live query for %s failed: %s", self._state.month_year, exc)
        self._set_state(self._state.copy(is_loading=False, error_message=str(exc)))

    def set_month(self, month_year: str) -> None:
        parse_month_year(month_year)
        if month_year == self._state.month_year and self._subscription is not None:
            return
        logger.info("Viewing budgets for %s", month_year)
        self._observe(month_year)

    def show_previous_month(self) -> None:
        self.set_month(shift_month(self._state.month_year, -1))

    def show_next_month(self) -> None:
        self.set_month(shift_month(self._state.month_year, 1))

    def refresh(self) -> None:
        self._observe(self._state.month_year)

    def dispose(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    # -- operations ------------------------------------------------------

    def _submit(self, action: str, fn, *args) -> None:
        def job():
            try:
                fn(*args)
            except StoreError as exc:
                logger.exception("Failed to %s", action)
                self._set_state(self._state.copy(error_message=str(exc)))

        logger.debug("Queued %s", action)
        self._dispatch(job)

    def set_max_budget_for_category(self, category, amount) -> None:
        category = coerce_category(category)
        amount = budget_amount(amount)
        self._submit("set budget", self._write_budget, self._state.month_year, category, amount)

    def _write_budget(self, month_year: str, category: Category, amount) -> None:
        record = self._store.get_budget(month_year, category)
        self._store.upsert_budget(budget_after_set(record, month_year, category, amount))

    def record_transaction(self, amount, category, description: str | None = None, timestamp: datetime | None = None) -> None:
        """Append an expense; its month's budget row is created or re-shown as needed."""
        expense = validate_expense(amount, category, description)
        when = timestamp or self._clock()
        transaction = TransactionRecord(
            timestamp_millis=int(when.timestamp() * 1000),
            amount=expense.amount,
            category=expense.category,
            description=expense.description,
        )
        self._submit("record transaction", self._write_transaction, transaction)

    def _write_transaction(self, transaction: TransactionRecord) -> None:
        month_year = month_of_millis(transaction.timestamp_millis)
        with self._store.batch():
            self._store.insert_transaction(transaction)
            record = self._store.get_budget(month_year, transaction.category)
            updated = budget_after_spend(record, month_year, transaction.category)
            if updated != record:
                self._store.upsert_budget(updated)

    def hide_category_budget(self, category) -> None:
        category = coerce_category(category)
        self._submit("hide budget", self._write_hide, self._state.month_year, category)

    def _write_hide(self, month_year: str, category: Category) -> None:
        with self._store.batch():
            record: BudgetRecord | None = self._store.get_budget(month_year, category)
            hidden = budget_after_hide(record, self._store.latest_transaction_id())
            if hidden is not None:
                self._store.upsert_budget(hidden)

    def delete_transaction(self, transaction) -> None:
        transaction_id = transaction.id if isinstance(transaction, TransactionRecord) else transaction
        if transaction_id is None:
            raise ValueError("Transaction has not been saved")
        self._submit("delete transaction", self._store.delete_transaction, int(transaction_id))

    def clear_all_transactions(self) -> None:
        self._submit("clear transactions", self._store.delete_all_transactions)

    def clear_error_message(self) -> None:
        if self._state.error_message is not None:
            self._set_state(self._state.copy(error_message=None))
