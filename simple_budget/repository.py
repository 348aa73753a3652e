import sqlite3

import pandas as pd

BUDGET_COLUMNS = ["id", "month_year", "category_id", "max_budget_cents", "is_active", "reset_after_id"]
TRANSACTION_COLUMNS = ["id", "timestamp_millis", "amount_cents", "category_id", "description"]


def load_budgets_for_month(conn: sqlite3.Connection, month_year: str) -> pd.DataFrame:
    df = pd.read_sql_query(
        "SELECT id, month_year, category_id, max_budget_cents, is_active, reset_after_id "
        "FROM budgets WHERE month_year = ? ORDER BY id",
        conn,
        params=[month_year],
    )
    if df.empty:
        return pd.DataFrame(columns=BUDGET_COLUMNS)
    df["is_active"] = df["is_active"].astype(bool)
    return df


def load_transactions_between(conn: sqlite3.Connection, start_millis: int, end_millis: int) -> pd.DataFrame:
    df = pd.read_sql_query(
        "SELECT id, timestamp_millis, amount_cents, category_id, description FROM transactions "
        "WHERE timestamp_millis BETWEEN ? AND ? ORDER BY timestamp_millis DESC, id DESC",
        conn,
        params=[int(start_millis), int(end_millis)],
    )
    if df.empty:
        return pd.DataFrame(columns=TRANSACTION_COLUMNS)
    return df


def fetch_budget(conn: sqlite3.Connection, month_year: str, category_id: str):
    cur = conn.cursor()
    cur.execute(
        "SELECT id, month_year, category_id, max_budget_cents, is_active, reset_after_id "
        "FROM budgets WHERE month_year=? AND category_id=?",
        (month_year, category_id),
    )
    return cur.fetchone()


def upsert_budget(conn: sqlite3.Connection, month_year, category_id, max_budget_cents, is_active, reset_after_id):
    """Insert or replace the budget row keyed by (month_year, category_id).

    Relies on the UNIQUE constraint, so a repeated upsert never adds a row.
    """
    conn.execute(
        """
        INSERT INTO budgets (month_year, category_id, max_budget_cents, is_active, reset_after_id)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT (month_year, category_id) DO UPDATE SET
            max_budget_cents = excluded.max_budget_cents,
            is_active = excluded.is_active,
            reset_after_id = excluded.reset_after_id
        """,
        (str(month_year), str(category_id), int(max_budget_cents), 1 if is_active else 0, int(reset_after_id)),
    )


def insert_transaction(conn: sqlite3.Connection, timestamp_millis, amount_cents, category_id, description) -> int:
    cur = conn.cursor()
    cur.execute(
        "INSERT INTO transactions (timestamp_millis, amount_cents, category_id, description) VALUES (?,?,?,?)",
        (int(timestamp_millis), int(amount_cents), str(category_id), description),
    )
    return int(cur.lastrowid)


def delete_transaction(conn: sqlite3.Connection, transaction_id) -> int:
    cur = conn.cursor()
    cur.execute("DELETE FROM transactions WHERE id=?", (int(transaction_id),))
    return cur.rowcount


def delete_all_transactions(conn: sqlite3.Connection) -> int:
    cur = conn.cursor()
    cur.execute("DELETE FROM transactions")
    return cur.rowcount


def latest_transaction_id(conn: sqlite3.Connection) -> int:
    cur = conn.cursor()
    cur.execute("SELECT COALESCE(MAX(id), 0) FROM transactions")
    return int(cur.fetchone()[0])
