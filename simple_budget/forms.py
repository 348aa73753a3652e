"""Validation of the add-expense and set-budget forms.

The rendering layer hands raw text over; anything rejected here never reaches
the view-model. Messages are meant to be shown to the user as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from .amounts import MAX_CENTS, parse_amount, quantize, to_cents
from .models import Category

INVALID_AMOUNT = "Enter a valid amount"
MISSING_CATEGORY = "Select a category"


class ValidationError(ValueError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class ExpenseInput:
    amount: Decimal
    category: Category
    description: Optional[str] = None


@dataclass(frozen=True)
class BudgetInput:
    amount: Decimal
    category: Category


def coerce_category(category) -> Category:
    if category is None or category == "":
        raise ValidationError(MISSING_CATEGORY)
    try:
        return Category.from_id(category)
    except ValueError:
        raise ValidationError(MISSING_CATEGORY) from None


def _coerce_amount(amount) -> Decimal | None:
    if isinstance(amount, Decimal):
        return amount if amount.is_finite() else None
    if isinstance(amount, bool):
        return None
    if isinstance(amount, (int, float)):
        return parse_amount(repr(amount))
    return parse_amount(amount)


def clean_description(description) -> Optional[str]:
    if description is None:
        return None
    text = str(description).strip()
    return text or None


def _rounded_amount(amount) -> Decimal:
    value = _coerce_amount(amount)
    if value is None:
        raise ValidationError(INVALID_AMOUNT)
    try:
        value = quantize(value)
    except InvalidOperation:
        # too many digits to round to cents
        raise ValidationError(INVALID_AMOUNT) from None
    if abs(to_cents(value)) > MAX_CENTS:
        raise ValidationError(INVALID_AMOUNT)
    return value


def expense_amount(amount) -> Decimal:
    value = _rounded_amount(amount)
    if value <= 0:
        raise ValidationError(INVALID_AMOUNT)
    return value


def budget_amount(amount) -> Decimal:
    value = _rounded_amount(amount)
    if value < 0:
        raise ValidationError(INVALID_AMOUNT)
    return value


def validate_expense(amount_text, category, description=None) -> ExpenseInput:
    amount = expense_amount(amount_text)
    return ExpenseInput(
        amount=amount,
        category=coerce_category(category),
        description=clean_description(description),
    )


def validate_budget(amount_text, category) -> BudgetInput:
    amount = budget_amount(amount_text)
    return BudgetInput(amount=amount, category=coerce_category(category))
