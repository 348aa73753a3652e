"""Simple monthly budgeting: per-category caps, an expense log and live summaries.

Modules:
- config: ini configuration and DB path persistence
- db: connection helpers and schema
- models: categories, records and the published state snapshot
- months: month keys and month time windows
- amounts: amount parsing, cents conversion and formatting
- forms: input validation for the expense and budget forms
- repository: SQL data access functions
- store: observable store wrapping one SQLite connection
- viewmodel: aggregation engine publishing UiState snapshots
- app: application lifecycle and entry point
"""
