"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - A Database is a mapping of table name to an ordered list of rows
    - WhereClause is always a 4-tuple (join, column, operator, value)
    - The first clause of a list carries an empty join
    - RESERVED_TABLE is the single source of truth for the metadata table name

Design Decisions:
    - NamedTuple for WhereClause: indexable like the wire format, immutable
    - str Enums: compare equal to the raw strings found in requests
"""

from enum import Enum
from typing import Any, NamedTuple


# ─── Structural Types ────────────────────────────────────────────

Row = dict[str, Any]
Database = dict[str, list[Row]]

RESERVED_TABLE = "__jsdb_core"


# ─── Enums ───────────────────────────────────────────────────────

class Command(str, Enum):
    """Basic commands accepted by the dispatcher."""
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class JoinOperator(str, Enum):
    """Boolean join between a clause and its predecessor."""
    NONE = ""
    AND = "and"
    OR = "or"


class ComparisonOperator(str, Enum):
    """Comparison operators allowed inside a where-clause."""
    EQ = "=="
    LE = "<="
    GE = ">="
    LT = "<"
    GT = ">"


VALID_JOINS = frozenset({JoinOperator.AND.value, JoinOperator.OR.value})
VALID_OPERATORS = frozenset(op.value for op in ComparisonOperator)


# ─── Value Types ─────────────────────────────────────────────────

class WhereClause(NamedTuple):
    """One filter predicate plus its logical join to the previous predicate."""
    join: str
    column: str
    operator: str
    value: Any
