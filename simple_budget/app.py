import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from PyQt6.QtCore import QCoreApplication

from . import config
from .amounts import format_amount
from .months import format_month_year
from .store import BudgetStore, StoreError
from .viewmodel import BudgetViewModel

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


class BudgetApplication:
    """Owns the store and the view-model for one session.

    A database file passed in explicitly is remembered in the ini and opened
    by default on the next start.

    Nothing here is global: a second instance on another database file is a
    separate, independent application.
    """

    def __init__(
        self,
        db_path: Path | str | None = None,
        *,
        settings: dict[str, Any] | None = None,
        clock: Callable[[], datetime] | None = None,
        dispatcher=None,
    ):
        self.settings = settings if settings is not None else config.load_app_settings()
        self.db_path = db_path or config.load_db_path()
        self.store = BudgetStore(self.db_path, timeout=self.settings.get("db_timeout", 5.0))
        if db_path:
            config.save_db_path(Path(db_path))
        self.view_model = BudgetViewModel(self.store, clock=clock, dispatcher=dispatcher)
        logger.info("Budget application started on %s", self.db_path)

    def overview_lines(self) -> list[str]:
        state = self.view_model.state
        symbol = self.settings.get("currency_symbol", "")
        lines = [f"Simple Budget - {format_month_year(state.month_year)}"]
        if not state.summaries:
            lines.append("No budgets set for this month.")
        for summary in state.summaries:
            lines.append(
                f"{summary.category.label}: spent {format_amount(summary.spent_amount, symbol)}"
                f" of {format_amount(summary.budget_amount, symbol)},"
                f" remaining {format_amount(summary.remaining_amount, symbol)}"
            )
        if state.error_message:
            lines.append(f"Error: {state.error_message}")
        return lines

    def close(self) -> None:
        self.view_model.dispose()
        self.store.close()
        logger.info("Budget application closed")

    def __enter__(self) -> "BudgetApplication":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv if argv is None else argv
    app = QCoreApplication(argv)
    app.setApplicationName("Simple Budget")
    settings = config.load_app_settings()
    configure_logging(settings["log_level"])
    try:
        db_path = argv[1] if len(argv) > 1 else None
        with BudgetApplication(db_path, settings=settings) as budget_app:
            app.processEvents()
            for line in budget_app.overview_lines():
                logger.info(line)
    except StoreError as e:
        logger.error("Cannot start: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
