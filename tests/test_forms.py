from decimal import Decimal

import pytest

from simple_budget.forms import (
    INVALID_AMOUNT,
    MISSING_CATEGORY,
    ValidationError,
    validate_budget,
    validate_expense,
)
from simple_budget.models import Category


def test_validate_expense_accepts_text_and_category_id():
    expense = validate_expense("120.50", "Food", " lunch ")
    assert expense.amount == Decimal("120.50")
    assert expense.category is Category.FOOD
    assert expense.description == "lunch"


def test_blank_description_becomes_none():
    assert validate_expense("5", Category.HOUSING, "   ").description is None
    assert validate_expense("5", Category.HOUSING).description is None


@pytest.mark.parametrize("amount", ["", "abc", "0", "0.00", "-5", None, "0.001", "1e30", "100000000000000000000"])
def test_validate_expense_rejects_bad_amounts(amount):
    with pytest.raises(ValidationError) as excinfo:
        validate_expense(amount, Category.FOOD)
    assert excinfo.value.message == INVALID_AMOUNT


@pytest.mark.parametrize("category", [None, "", "Groceries"])
def test_validate_expense_requires_a_category(category):
    with pytest.raises(ValidationError) as excinfo:
        validate_expense("10", category)
    assert str(excinfo.value) == MISSING_CATEGORY


def test_amount_is_checked_before_category():
    with pytest.raises(ValidationError) as excinfo:
        validate_expense("abc", None)
    assert excinfo.value.message == INVALID_AMOUNT


def test_validate_budget_accepts_zero():
    budget = validate_budget("0", Category.SAVINGS)
    assert budget.amount == Decimal("0")
    assert budget.category is Category.SAVINGS


def test_validate_budget_rejects_negative_amounts():
    with pytest.raises(ValidationError):
        validate_budget("-1", Category.SAVINGS)


def test_numeric_amounts_are_accepted():
    assert validate_expense(Decimal("30"), Category.FOOD).amount == Decimal("30.00")
    assert validate_expense(12.5, Category.FOOD).amount == Decimal("12.50")
    assert validate_budget(500, Category.FOOD).amount == Decimal("500.00")


@pytest.mark.parametrize("amount", ["1e30", "100000000000000000000", Decimal("1E+40"), 10**25])
def test_validate_budget_rejects_amounts_too_large_to_store(amount):
    with pytest.raises(ValidationError) as excinfo:
        validate_budget(amount, Category.FOOD)
    assert excinfo.value.message == INVALID_AMOUNT


def test_largest_storable_amount_is_accepted():
    assert validate_budget("92233720368547758.07", Category.FOOD).amount == Decimal("92233720368547758.07")
    with pytest.raises(ValidationError):
        validate_budget("92233720368547758.08", Category.FOOD)
