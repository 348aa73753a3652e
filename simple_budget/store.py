"""Observable budget store.

One SQLite connection wrapped in a QObject. Every committed write emits
``changed`` once; live queries re-run when a change concerns them and push
the fresh DataFrame(s) to their callback.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, Optional

import pandas as pd
from pandas.errors import DatabaseError
from PyQt6.QtCore import QObject, pyqtSignal

from . import repository
from .amounts import from_cents, to_cents
from .db import get_conn
from .models import BudgetRecord, Category, TransactionRecord
from .months import month_bounds

logger = logging.getLogger(__name__)

ErrorHandler = Callable[["StoreError"], Any]


class StoreError(RuntimeError):
    """A storage operation failed (disk, database or closed store)."""


@dataclass(frozen=True)
class StoreChange:
    budget_months: frozenset = frozenset()
    transactions: bool = False


class Subscription:
    """Handle of a live query. ``cancel()`` stops further pushes."""

    def __init__(self, store: "BudgetStore", slot: Callable[[StoreChange], None], description: str):
        self._store = store
        self._slot = slot
        self.description = description
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._store._release(self)

    def __repr__(self) -> str:
        state = "active" if self._active else "cancelled"
        return f"<Subscription {self.description} ({state})>"


def budget_from_row(row) -> BudgetRecord:
    id_, month_year, category_id, max_budget_cents, is_active, reset_after_id = row
    return BudgetRecord(
        month_year=month_year,
        category=Category.from_id(category_id),
        max_budget=from_cents(max_budget_cents),
        is_active=bool(is_active),
        reset_after_id=int(reset_after_id),
        id=int(id_),
    )


def transaction_records(df: pd.DataFrame) -> tuple[TransactionRecord, ...]:
    records = []
    for row in df.itertuples(index=False):
        try:
            category = Category.from_id(row.category_id)
        except ValueError:
            logger.warning("Skipping transaction %s with unknown category %r", row.id, row.category_id)
            continue
        description = row.description if isinstance(row.description, str) else None
        records.append(
            TransactionRecord(
                timestamp_millis=int(row.timestamp_millis),
                amount=from_cents(row.amount_cents),
                category=category,
                description=description,
                id=int(row.id),
            )
        )
    return tuple(records)


class BudgetStore(QObject):
    changed = pyqtSignal(object)

    def __init__(self, db_path: Path | str, timeout: float = 5.0, parent: QObject | None = None):
        super().__init__(parent)
        self.db_path = db_path
        try:
            self._conn: Optional[sqlite3.Connection] = get_conn(db_path, timeout=timeout)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open database {db_path}: {exc}") from exc
        self._subscriptions: list[Subscription] = []
        self._batch_depth = 0
        self._pending_months: set[str] = set()
        self._pending_transactions = False
        logger.debug("Opened budget store at %s", db_path)

    # -- lifecycle -------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._conn is None

    def close(self) -> None:
        for subscription in list(self._subscriptions):
            subscription.cancel()
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("Closed budget store at %s", self.db_path)

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("Budget store is closed")
        return self._conn

    @contextmanager
    def _guard(self, action: str):
        # OverflowError and InvalidOperation come from amounts beyond an INTEGER column
        try:
            yield
        except (sqlite3.Error, DatabaseError, OverflowError, InvalidOperation) as exc:
            raise StoreError(f"Could not {action}: {exc}") from exc

    # -- live queries ----------------------------------------------------

    def _observe(self, description, concerns, load, callback, on_error) -> Subscription:
        def deliver():
            with self._guard(f"load {description}"):
                result = load(self._connection())
            callback(*result)

        def on_change(change: StoreChange):
            if not concerns(change):
                return
            try:
                deliver()
            except StoreError as exc:
                # slots must not raise into the Qt signal machinery
                if on_error is None:
                    logger.exception("Live query %s failed", description)
                else:
                    on_error(exc)

        subscription = Subscription(self, on_change, description)
        self._subscriptions.append(subscription)
        self.changed.connect(on_change)
        try:
            deliver()
        except StoreError as exc:
            if on_error is None:
                subscription.cancel()
                raise
            on_error(exc)
        return subscription

    def _release(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
            self.changed.disconnect(subscription._slot)

    def observe_budgets(self, month_year: str, callback, on_error: ErrorHandler | None = None) -> Subscription:
        """Push all budget rows of ``month_year`` now and after every change to them."""
        return self._observe(
            f"budgets {month_year}",
            lambda change: month_year in change.budget_months,
            lambda conn: (repository.load_budgets_for_month(conn, month_year),),
            callback,
            on_error,
        )

    def observe_transactions(
        self, start_millis: int, end_millis: int, callback, on_error: ErrorHandler | None = None
    ) -> Subscription:
        return self._observe(
            f"transactions {start_millis}..{end_millis}",
            lambda change: change.transactions,
            lambda conn: (repository.load_transactions_between(conn, start_millis, end_millis),),
            callback,
            on_error,
        )

    def observe_month(self, month_year: str, callback, on_error: ErrorHandler | None = None) -> Subscription:
        """Push ``(budgets, transactions)`` frames for one month as a single update."""
        start, end = month_bounds(month_year)
        return self._observe(
            f"month {month_year}",
            lambda change: change.transactions or month_year in change.budget_months,
            lambda conn: (
                repository.load_budgets_for_month(conn, month_year),
                repository.load_transactions_between(conn, start, end),
            ),
            callback,
            on_error,
        )

    # -- one-shot reads --------------------------------------------------

    def get_budget(self, month_year: str, category: Category) -> BudgetRecord | None:
        with self._guard("read budget"):
            row = repository.fetch_budget(self._connection(), month_year, Category.from_id(category).value)
        return budget_from_row(row) if row else None

    def latest_transaction_id(self) -> int:
        with self._guard("read transactions"):
            return repository.latest_transaction_id(self._connection())

    # -- writes ----------------------------------------------------------

    @contextmanager
    def batch(self):
        """Commit the writes made inside the block together and announce them once."""
        conn = self._connection()
        self._batch_depth += 1
        try:
            yield self
        except BaseException:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._discard_pending(conn)
            raise
        self._batch_depth -= 1
        if self._batch_depth == 0:
            self._commit(conn)

    def _discard_pending(self, conn: sqlite3.Connection) -> None:
        self._pending_months.clear()
        self._pending_transactions = False
        with self._guard("roll back"):
            conn.rollback()

    def _commit(self, conn: sqlite3.Connection) -> None:
        try:
            with self._guard("commit"):
                conn.commit()
        except StoreError:
            self._discard_pending(conn)
            raise
        change = StoreChange(frozenset(self._pending_months), self._pending_transactions)
        self._pending_months.clear()
        self._pending_transactions = False
        if change.budget_months or change.transactions:
            self.changed.emit(change)

    def _write(self, action: str, fn, *, month_year: str | None = None, transactions: bool = False):
        conn = self._connection()
        try:
            with self._guard(action):
                result = fn(conn)
        except StoreError:
            if self._batch_depth == 0:
                self._discard_pending(conn)
            raise
        if month_year is not None:
            self._pending_months.add(month_year)
        if transactions:
            self._pending_transactions = True
        if self._batch_depth == 0:
            self._commit(conn)
        return result

    def upsert_budget(self, record: BudgetRecord) -> None:
        logger.debug(
            "Upsert budget %s/%s max=%s active=%s",
            record.month_year,
            record.category.value,
            record.max_budget,
            record.is_active,
        )
        self._write(
            "save budget",
            lambda conn: repository.upsert_budget(
                conn,
                record.month_year,
                record.category.value,
                to_cents(record.max_budget),
                record.is_active,
                record.reset_after_id,
            ),
            month_year=record.month_year,
        )

    def insert_transaction(self, record: TransactionRecord) -> int:
        if Decimal(record.amount) <= 0:
            raise ValueError("Transaction amount must be positive")
        transaction_id = self._write(
            "save transaction",
            lambda conn: repository.insert_transaction(
                conn,
                record.timestamp_millis,
                to_cents(record.amount),
                record.category.value,
                record.description,
            ),
            transactions=True,
        )
        logger.debug("Inserted transaction %s (%s %s)", transaction_id, record.category.value, record.amount)
        return transaction_id

    def delete_transaction(self, transaction_id: int) -> bool:
        deleted = self._write(
            "delete transaction",
            lambda conn: repository.delete_transaction(conn, transaction_id),
            transactions=True,
        )
        return deleted > 0

    def delete_all_transactions(self) -> int:
        return self._write("delete transactions", repository.delete_all_transactions, transactions=True)
