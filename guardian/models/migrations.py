# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

import enum
import logging
from sqlalchemy import bindparam, inspect, text
from sqlalchemy.engine import Engine

from guardian.models.database import Base
from guardian.models.streak import StreakCounter, STREAK_ID

logger = logging.getLogger(__name__)


def _literal(value) -> str:
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    return "'" + str(value).replace("'", "''") + "'"


def _column_ddl(column, engine: Engine) -> str:
    preparer = engine.dialect.identifier_preparer
    ddl = f"{preparer.quote(column.name)} {column.type.compile(dialect=engine.dialect)}"
    if column.server_default is not None:
        default = column.server_default.arg
        if isinstance(default, str):
            default = _literal(default)
        else:
            default = default.compile(dialect=engine.dialect)
        ddl += f" DEFAULT {default}"
    elif column.default is not None and column.default.is_scalar:
        ddl += f" DEFAULT {_literal(column.default.arg)}"
    return ddl


def _backfill_callable_default(column, engine: Engine) -> None:
    # SQLite cannot ADD COLUMN with a non-constant default, so existing rows
    # get the Python-side default (e.g. utcnow) written in once.
    preparer = engine.dialect.identifier_preparer
    table, name = preparer.quote(column.table.name), preparer.quote(column.name)
    value = column.default.arg(None)
    stmt = text(f"UPDATE {table} SET {name} = :value WHERE {name} IS NULL").bindparams(
        bindparam("value", type_=column.type)
    )
    with engine.begin() as conn:
        conn.execute(stmt, {"value": value})


def add_missing_columns(engine: Engine) -> list:
    """
    Adds every model column that an existing table lacks.
    Existing rows pick up the column's default instead of NULL. Safe to run repeatedly.
    """
    added = []
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())

    for table in Base.metadata.sorted_tables:
        if table.name not in existing_tables:
            continue

        present = {col["name"] for col in inspector.get_columns(table.name)}
        for column in table.columns:
            if column.name in present:
                continue
            ddl = f"ALTER TABLE {engine.dialect.identifier_preparer.quote(table.name)} ADD COLUMN {_column_ddl(column, engine)}"
            with engine.begin() as conn:
                conn.execute(text(ddl))
            if column.server_default is None and column.default is not None and column.default.is_callable:
                _backfill_callable_default(column, engine)
            added.append(f"{table.name}.{column.name}")
            logger.info(f"🧱 Migration: added {column.name} to {table.name}")

    return added


def ensure_schema(engine: Engine) -> list:
    """
    Creates missing tables, adds missing columns and seeds the streak row.
    Returns the list of columns added on this run.
    """
    Base.metadata.create_all(bind=engine)
    added = add_missing_columns(engine)

    with engine.begin() as conn:
        exists = conn.execute(
            text(f"SELECT 1 FROM {StreakCounter.__tablename__} WHERE id = :id"),
            {"id": STREAK_ID}
        ).first()
        if not exists:
            conn.execute(
                text(f"INSERT INTO {StreakCounter.__tablename__} (id, current_count) VALUES (:id, 0)"),
                {"id": STREAK_ID}
            )

    return added
