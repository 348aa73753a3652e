import sqlite3
from pathlib import Path

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    month_year TEXT NOT NULL,
    category_id TEXT NOT NULL,
    max_budget_cents INTEGER NOT NULL DEFAULT 0 CHECK (max_budget_cents >= 0),
    is_active INTEGER NOT NULL DEFAULT 1,
    reset_after_id INTEGER NOT NULL DEFAULT 0,
    UNIQUE (month_year, category_id)
);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp_millis INTEGER NOT NULL,
    amount_cents INTEGER NOT NULL CHECK (amount_cents > 0),
    category_id TEXT NOT NULL,
    description TEXT
);

CREATE INDEX IF NOT EXISTS ix_txn_timestamp ON transactions (timestamp_millis);
CREATE INDEX IF NOT EXISTS ix_txn_category ON transactions (category_id);
"""

MEMORY_DB = ":memory:"


def get_conn(db_path: Path | str, timeout: float = 5.0) -> sqlite3.Connection:
    """Return a sqlite3 connection to ``db_path`` with the schema in place."""
    if not db_path:
        raise RuntimeError("Database path is not configured.")
    if str(db_path) != MEMORY_DB:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), timeout=timeout)
    init_schema(conn)
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA_SQL)
    conn.commit()
