"""
Small SQL building blocks shared by the feature repositories.

User input only ever travels as positional parameters ($1, $2, ...). Column
and table names come from code (schema field names, constants), never from
the request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

_OPERATORS = {"=", "<>", "<", "<=", ">", ">=", "ILIKE"}


@dataclass(frozen=True)
class Condition:
    """One `(column, operator, value)` filter entry."""

    column: str | tuple[str, ...]
    operator: str
    value: Any


@dataclass
class FilterBuilder:
    """Accumulate WHERE conditions and compile them to `$n` placeholders."""

    conditions: list[Condition] = field(default_factory=list)

    def add(self, column: str, operator: str, value: Any) -> "FilterBuilder":
        operator = operator.upper()
        if operator not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {operator}")
        self.conditions.append(Condition(column, operator, value))
        return self

    def add_if(self, value: Any, column: str, operator: str = "=") -> "FilterBuilder":
        """Add the condition only when a filter value was supplied."""
        if value is None or value == "":
            return self
        return self.add(column, operator, value)

    def contains(self, value: str | None, *columns: str) -> "FilterBuilder":
        """
        Case-insensitive substring match over one or more columns (OR-ed).
        """
        if not value:
            return self
        self.conditions.append(Condition(tuple(columns), "SEARCH", f"%{_escape_like(value)}%"))
        return self

    def compile(self, start: int = 1) -> tuple[str, list[Any]]:
        """
        Return (where_sql, params). `where_sql` is "" when there are no conditions,
        otherwise "WHERE ...". Placeholders start at `$start`.
        """
        parts: list[str] = []
        params: list[Any] = []
        index = start
        for cond in self.conditions:
            if cond.operator == "SEARCH":
                columns = cond.column
                parts.append("(" + " OR ".join(f"{col} ILIKE ${index}" for col in columns) + ")")
            else:
                parts.append(f"{cond.column} {cond.operator} ${index}")
            params.append(cond.value)
            index += 1

        if not parts:
            return "", params
        return "WHERE " + " AND ".join(parts), params


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def insert_statement(table: str, values: Mapping[str, Any], *, returning: str = "*", casts: Mapping[str, str] | None = None) -> tuple[str, list[Any]]:
    """
    Build `INSERT INTO table (...) VALUES ($1, ...) RETURNING ...`.

    `casts` maps a column to a SQL type, e.g. {"locations": "jsonb"}.
    """
    casts = casts or {}
    columns = list(values.keys())
    if not columns:
        raise ValueError("Nothing to insert.")
    placeholders = [
        f"${i}::{casts[col]}" if col in casts else f"${i}"
        for i, col in enumerate(columns, start=1)
    ]
    sql = (
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES ({', '.join(placeholders)}) "
        f"RETURNING {returning}"
    )
    return sql, [values[c] for c in columns]


def update_statement(
    table: str,
    key_column: str,
    key: Any,
    values: Mapping[str, Any],
    *,
    returning: str = "*",
    casts: Mapping[str, str] | None = None,
    touch: str | None = "updated_at",
) -> tuple[str, list[Any]]:
    """
    Build `UPDATE table SET col = $2, ... WHERE key_column = $1 RETURNING ...`.

    With no values the statement only refreshes `touch`, which still returns
    the row (or nothing when the key does not exist).
    """
    casts = casts or {}
    assignments: list[str] = []
    params: list[Any] = [key]
    for i, (col, value) in enumerate(values.items(), start=2):
        placeholder = f"${i}::{casts[col]}" if col in casts else f"${i}"
        assignments.append(f"{col} = {placeholder}")
        params.append(value)
    if touch:
        assignments.append(f"{touch} = now()")
    if not assignments:
        raise ValueError("Nothing to update.")

    sql = (
        f"UPDATE {table} SET {', '.join(assignments)} "
        f"WHERE {key_column} = $1 "
        f"RETURNING {returning}"
    )
    return sql, params
