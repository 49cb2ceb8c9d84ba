from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

from careers.models.application import Application
from careers.models.application_file import ApplicationFile

logger = logging.getLogger(__name__)


def _column_exists(conn, table_name: str, column_name: str) -> bool:
    return any(column["name"] == column_name for column in inspect(conn).get_columns(table_name))


def _add_column_if_missing(conn, table_name: str, column_name: str, column_sql: str) -> None:
    if _column_exists(conn, table_name, column_name):
        return
    logger.info("Adding column %s.%s", table_name, column_name)
    conn.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {column_sql}"))


def run_runtime_migrations(engine: Engine) -> None:
    """Bring tables created by older releases up to the current schema."""
    with engine.begin() as conn:
        _add_column_if_missing(conn, "applications", "status", "status VARCHAR(20) NOT NULL DEFAULT 'pending'")
        conn.execute(
            text("UPDATE applications SET status = 'pending' WHERE status IS NULL OR status NOT IN ('pending', 'reviewed')")
        )

        for table in (Application.__table__, ApplicationFile.__table__):
            for index in table.indexes:
                index.create(conn, checkfirst=True)
