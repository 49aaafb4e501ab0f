"""Query Builder — per-command query object executing CRUD against the DocumentStore.

Invariants:
    - table() selects the target and clears previous where-clauses
    - The first where() takes exactly (column, operator, value); later ones may add a join
    - Joins are 'and' / 'or'; the first stored clause always carries an empty join
    - Protected tables fail with ProtectedTableError before any IO
    - Every command reloads the whole database; nothing is cached between commands
    - insert/update/delete hold the store lock across load -> mutate -> commit
    - update/delete on an absent table return False without committing
    - select on an absent table returns an empty result
    - A terminal method consumes the query; call table() again to build a new one

Design Decisions:
    - select returns the row itself (not a one-element list) when exactly one row
      matches; itemsCount is counted before that unwrap. Clients depend on this shape
    - select accepts limit but does not cap the result, matching existing clients
    - Projection keeps a row's key order and silently drops columns the row lacks
"""

import logging
from typing import Any, Iterable

from jsdb.config import Settings
from jsdb.core.domain_types import Row, WhereClause, VALID_JOINS
from jsdb.core.errors import (
    BuilderConsumedError, ErrorContext, InvalidClauseError, ProtectedTableError,
    ValidationError,
)
from jsdb.core.evaluate_conditions import evaluate
from jsdb.infrastructure.document_store import DocumentStore

logger = logging.getLogger(__name__)


class QueryBuilder:
    """Fluent query: table().columns().where()... then one terminal method."""

    def __init__(self, store: DocumentStore, settings: Settings, table: str | None = None):
        self._store = store
        self._settings = settings
        self._table: str | None = None
        self._columns: list[str] = []
        self._where: list[WhereClause] = []
        self._consumed = False
        if table is not None:
            self.table(table)

    @property
    def clauses(self) -> tuple[WhereClause, ...]:
        return tuple(self._where)

    # ─── Building ───────────────────────────────────────────────

    def table(self, name: str) -> "QueryBuilder":
        self._where = []
        self._table = name
        self._consumed = False
        return self

    def columns(self, columns: Iterable[str]) -> "QueryBuilder":
        self._columns = list(columns)
        return self

    def where(self, *args: Any) -> "QueryBuilder":
        """Add a clause: where(column, operator, value) or where(join, column, operator, value)."""
        if len(args) != 3 and not self._where:
            raise InvalidClauseError("Invalid first 'where' values", self._context())
        if len(args) == 4:
            join = str(args[0]).strip().lower()
            column, op, value = str(args[1]).strip(), args[2], args[3]
        elif len(args) == 3:
            join = "and"
            column, op, value = str(args[0]).strip(), args[1], args[2]
        else:
            raise InvalidClauseError(
                f"A 'where' clause takes 3 or 4 values, got {len(args)}", self._context(),
            )
        if join not in VALID_JOINS:
            raise InvalidClauseError(f"Invalid operation {join}", self._context())
        if not self._where:
            join = ""
        self._where.append(WhereClause(join, column, op, value))
        return self

    # ─── Terminal methods ───────────────────────────────────────

    def select(self, limit: int = 100) -> dict:
        """Return {items, itemsCount}; items is a bare row when exactly one matches."""
        table = self._begin("select")
        if self._settings.is_read_protected(table):
            raise ProtectedTableError(table, "read", self._context("select"))
        db = self._store.open()
        rows = db.get(table)
        if rows is None:
            return {"items": [], "itemsCount": 0}
        if self._where:
            rows = [row for row in rows if self._matches(row)]
        if self._columns:
            wanted = set(self._columns)
            rows = [{k: v for k, v in row.items() if k in wanted} for row in rows]
        count = len(rows)
        return {"items": rows[0] if count == 1 else rows, "itemsCount": count}

    def insert(self, values: Row) -> None:
        table = self._begin("insert")
        self._check_writable(table, "insert")
        with self._store.locked():
            db = self._store.open()
            db.setdefault(table, []).append(dict(values))
            self._store.commit(db)
        logger.debug(f"Inserted row into {table}", extra={"table": table, "command": "insert"})

    def update(self, values: Row) -> bool:
        """Merge values into every matching row (all rows without clauses)."""
        table = self._begin("update")
        self._check_writable(table, "update")
        with self._store.locked():
            db = self._store.open()
            rows = db.get(table)
            if rows is None:
                return False
            changed = 0
            for row in rows:
                if self._where and not self._matches(row):
                    continue
                row.update(values)
                changed += 1
            self._store.commit(db)
        logger.debug(
            f"Updated {changed} row(s) in {table}", extra={"table": table, "command": "update"},
        )
        return True

    def delete(self) -> bool:
        """Remove every matching row (all rows without clauses)."""
        table = self._begin("delete")
        self._check_writable(table, "delete")
        with self._store.locked():
            db = self._store.open()
            rows = db.get(table)
            if rows is None:
                return False
            kept = [row for row in rows if self._where and not self._matches(row)]
            db[table] = kept
            self._store.commit(db)
        logger.debug(
            f"Deleted {len(rows) - len(kept)} row(s) from {table}",
            extra={"table": table, "command": "delete"},
        )
        return True

    # ─── Helpers ────────────────────────────────────────────────

    def _begin(self, command: str) -> str:
        if self._consumed:
            raise BuilderConsumedError(self._context(command))
        if self._table is None:
            raise ValidationError("No table selected", "table", self._context(command))
        self._consumed = True
        return self._table

    def _check_writable(self, table: str, command: str) -> None:
        if self._settings.is_write_protected(table):
            raise ProtectedTableError(table, "write", self._context(command))

    def _matches(self, row: Row) -> bool:
        return evaluate(row, self._where, fold_all=self._settings.fold_all_clauses)

    def _context(self, command: str | None = None) -> ErrorContext:
        return ErrorContext(table=self._table, command=command)
