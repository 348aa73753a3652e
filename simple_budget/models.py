"""Categories, stored records and the derived state snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class Category(str, Enum):
    """Fixed budget categories. The value is the id persisted in the database."""

    HOUSING = "Housing"
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    SAVINGS = "Savings"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def order(self) -> int:
        return _ORDER[self]

    @classmethod
    def from_id(cls, category_id: str) -> "Category":
        try:
            return cls(category_id)
        except ValueError:
            raise ValueError(f"Unknown category: {category_id!r}") from None


_LABELS = {
    Category.HOUSING: "Housing",
    Category.FOOD: "Food",
    Category.TRANSPORTATION: "Transportation",
    Category.ENTERTAINMENT: "Entertainment",
    Category.SAVINGS: "Savings",
}
_ORDER = {category: index for index, category in enumerate(Category)}

CATEGORIES: tuple[Category, ...] = tuple(Category)


@dataclass(frozen=True)
class Absent:
    """No budget record exists for the month/category."""


@dataclass(frozen=True)
class Active:
    max_budget: Decimal


@dataclass(frozen=True)
class Hidden:
    """Soft-deleted budget; the row and its transactions are kept."""

    last_max_budget: Decimal


BudgetState = Union[Absent, Active, Hidden]


@dataclass(frozen=True)
class BudgetRecord:
    month_year: str  # "YYYY-MM"
    category: Category
    max_budget: Decimal
    is_active: bool = True
    # transactions with an id at or below this one no longer count as spent
    reset_after_id: int = 0
    id: Optional[int] = None

    @property
    def state(self) -> BudgetState:
        if self.is_active:
            return Active(self.max_budget)
        return Hidden(self.max_budget)


def budget_state(record: Optional[BudgetRecord]) -> BudgetState:
    if record is None:
        return Absent()
    return record.state


ZERO = Decimal("0.00")


def budget_after_set(record: Optional[BudgetRecord], month_year: str, category: Category, amount: Decimal) -> BudgetRecord:
    """A new cap always (re)activates the category."""
    if isinstance(budget_state(record), Absent):
        return BudgetRecord(month_year=month_year, category=category, max_budget=amount)
    return replace(record, max_budget=amount, is_active=True)


def budget_after_spend(record: Optional[BudgetRecord], month_year: str, category: Category) -> BudgetRecord:
    state = budget_state(record)
    if isinstance(state, Absent):
        return BudgetRecord(month_year=month_year, category=category, max_budget=ZERO)
    if isinstance(state, Hidden):
        return replace(record, max_budget=ZERO, is_active=True)
    return record


def budget_after_hide(record: Optional[BudgetRecord], latest_transaction_id: int) -> Optional[BudgetRecord]:
    """Return the hidden record, or None when there is nothing to hide."""
    if not isinstance(budget_state(record), Active):
        return None
    return replace(record, is_active=False, reset_after_id=latest_transaction_id)


@dataclass(frozen=True)
class TransactionRecord:
    timestamp_millis: int
    amount: Decimal
    category: Category
    description: Optional[str] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class CategorySummary:
    category: Category
    budget_amount: Decimal
    spent_amount: Decimal

    @property
    def remaining_amount(self) -> Decimal:
        return self.budget_amount - self.spent_amount


@dataclass(frozen=True)
class UiState:
    month_year: str
    summaries: tuple[CategorySummary, ...] = field(default_factory=tuple)
    is_loading: bool = True
    error_message: Optional[str] = None

    def copy(self, **changes) -> "UiState":
        return replace(self, **changes)

    def summary_for(self, category: Category) -> Optional[CategorySummary]:
        for summary in self.summaries:
            if summary.category is category:
                return summary
        return None
