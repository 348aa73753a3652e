import pytest

from simple_budget import config
from simple_budget.app import BudgetApplication
from simple_budget.models import Category

from .conftest import FIXED_NOW, run_now

SETTINGS = {"log_level": "INFO", "currency_symbol": "₹", "db_timeout": 1.0}


@pytest.fixture(autouse=True)
def ini(tmp_path, monkeypatch):
    path = tmp_path / "simple_budget.ini"
    monkeypatch.setattr(config, "CONFIG_FILE", path)
    return path


def test_application_wires_store_and_view_model(qapp, db_path):
    with BudgetApplication(db_path, settings=SETTINGS, clock=lambda: FIXED_NOW, dispatcher=run_now) as app:
        assert app.overview_lines() == ["Simple Budget - October 2025", "No budgets set for this month."]

        app.view_model.set_max_budget_for_category(Category.FOOD, 500)
        app.view_model.record_transaction("120", Category.FOOD, "lunch")
        assert app.overview_lines()[1] == "Food: spent ₹120.00 of ₹500.00, remaining ₹380.00"
        store = app.store

    assert store.closed


def test_application_reopens_existing_data(qapp, db_path):
    with BudgetApplication(db_path, settings=SETTINGS, clock=lambda: FIXED_NOW, dispatcher=run_now) as app:
        app.view_model.set_max_budget_for_category(Category.HOUSING, 900)

    with BudgetApplication(db_path, settings=SETTINGS, clock=lambda: FIXED_NOW, dispatcher=run_now) as app:
        summary = app.view_model.state.summary_for(Category.HOUSING)
        assert summary is not None
        assert summary.budget_amount == 900


def test_explicit_database_is_remembered_for_the_next_start(qapp, tmp_path):
    chosen = tmp_path / "books" / "household.db"
    with BudgetApplication(chosen, settings=SETTINGS, clock=lambda: FIXED_NOW, dispatcher=run_now) as app:
        app.view_model.set_max_budget_for_category(Category.SAVINGS, 75)

    assert config.load_db_path() == chosen.resolve()
    with BudgetApplication(settings=SETTINGS, clock=lambda: FIXED_NOW, dispatcher=run_now) as app:
        assert app.db_path == chosen.resolve()
        assert app.view_model.state.summary_for(Category.SAVINGS).budget_amount == 75


def test_without_a_database_argument_the_default_file_is_used(qapp, ini):
    with BudgetApplication(settings=SETTINGS, clock=lambda: FIXED_NOW, dispatcher=run_now) as app:
        assert app.db_path == ini.parent / config.DEFAULT_DB_FILENAME
    assert not ini.exists()
