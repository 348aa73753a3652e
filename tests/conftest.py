from datetime import datetime

import pytest
from PyQt6.QtCore import QCoreApplication

from simple_budget.store import BudgetStore
from simple_budget.viewmodel import BudgetViewModel

FIXED_NOW = datetime(2025, 10, 15, 12, 30)


def run_now(job):
    job()


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "budget.db"


@pytest.fixture
def store(qapp, db_path):
    budget_store = BudgetStore(db_path)
    yield budget_store
    budget_store.close()


@pytest.fixture
def view_model(store):
    vm = BudgetViewModel(store, clock=lambda: FIXED_NOW, dispatcher=run_now)
    yield vm
    vm.dispose()


@pytest.fixture
def published(view_model):
    """States published by the view-model after the fixture was created."""
    states = []
    view_model.state_changed.connect(states.append)
    return states
