"""Condition Evaluation — decides whether a row satisfies a list of where-clauses.

Invariants:
    - evaluate is PURE: never mutates the row or the clauses
    - A clause on a column the row lacks is False
    - A column present with a null value is still present: a == None holds
    - Clauses are WhereClause tuples or plain 4-element sequences; any other
      shape raises InvalidClauseError
    - Ordering operators (<, <=, >, >=) against a non-numeric value are False, never raise
    - '==' is loose: 5 == "5" holds, numeric strings compare as numbers
    - Unknown comparison or join operators raise InvalidOperatorError
    - With more than two clauses only the first pair decides the result,
      unless fold_all=True requests a left-to-right fold over every clause

Design Decisions:
    - First-pair combination kept for compatibility with existing stores and
      clients; fold_all is opt-in (settings.fold_all_clauses)
    - No short-circuit: every clause is evaluated so invalid operators surface
      regardless of row content
"""

import operator
import re
from typing import Any, Callable, Sequence

from jsdb.core.domain_types import Row, WhereClause, JoinOperator, VALID_OPERATORS
from jsdb.core.errors import InvalidClauseError, InvalidOperatorError

_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")

_ORDERING: dict[str, Callable[[float, float], bool]] = {
    "<=": operator.le,
    ">=": operator.ge,
    "<": operator.lt,
    ">": operator.gt,
}


def is_numeric(value: Any) -> bool:
    """Numbers and numeric strings; booleans are not numeric."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and bool(_NUMERIC.match(value))


def loose_equals(left: Any, right: Any) -> bool:
    """Equality that treats numeric strings as the numbers they spell."""
    spelled = isinstance(left, str) or isinstance(right, str)
    if spelled and is_numeric(left) and is_numeric(right):
        return float(left) == float(right)
    return left == right


def _as_clause(clause: WhereClause | Sequence) -> WhereClause:
    if isinstance(clause, WhereClause):
        return clause
    if isinstance(clause, str) or len(clause) != 4:
        raise InvalidClauseError("A where-clause needs join, column, operator and value")
    return WhereClause._make(clause)


def evaluate_clause(row: Row, clause: WhereClause | Sequence) -> bool:
    """Evaluate a single clause against a row, ignoring its join."""
    clause = _as_clause(clause)
    if not isinstance(clause.operator, str) or clause.operator not in VALID_OPERATORS:
        raise InvalidOperatorError(clause.operator)
    if clause.column not in row:
        return False
    actual = row[clause.column]
    if clause.operator == "==":
        return loose_equals(actual, clause.value)
    if not is_numeric(clause.value) or not is_numeric(actual):
        return False
    return _ORDERING[clause.operator](float(actual), float(clause.value))


def _combine(join: str, left: bool, right: bool) -> bool:
    if join == JoinOperator.AND.value:
        return left and right
    if join == JoinOperator.OR.value:
        return left or right
    raise InvalidOperatorError(join)


def evaluate(
    row: Row, clauses: Sequence[WhereClause | Sequence], fold_all: bool = False,
) -> bool:
    """Evaluate a clause list against a row.

    The join of clause i combines the running result with clause i's result.
    By default the first combination (clauses 0 and 1) is the final answer,
    later clauses are still evaluated for operator validity but ignored.
    An empty clause list matches every row. Clauses may be WhereClause
    instances or plain (join, column, operator, value) sequences.
    """
    clauses = [_as_clause(clause) for clause in clauses]
    if not clauses:
        return True
    results = [evaluate_clause(row, clause) for clause in clauses]
    if len(results) == 1:
        return results[0]
    if not fold_all:
        return _combine(clauses[1].join, results[0], results[1])
    outcome = results[0]
    for clause, result in zip(clauses[1:], results[1:]):
        outcome = _combine(clause.join, outcome, result)
    return outcome
