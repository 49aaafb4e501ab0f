"""Error Hierarchy — codes, categories and response shape.

Tests cover:
    - Every concrete error derives from JsdbError
    - Codes and severities per kind
    - to_response exposes context without internals
"""

import pytest

from jsdb.core.errors import (
    BuilderConsumedError, ErrorCategory, ErrorContext, ErrorSeverity, FormatError,
    InvalidClauseError, InvalidOperatorError, JsdbError, ProtectedTableError,
    StorageIOError, ValidationError,
)


@pytest.mark.parametrize("error, code", [
    (ValidationError("Bad command", "command"), "VALIDATION_ERROR"),
    (ProtectedTableError("t", "read"), "PROTECTED_TABLE"),
    (InvalidClauseError("bad"), "INVALID_CLAUSE"),
    (InvalidOperatorError("!="), "INVALID_OPERATOR"),
    (BuilderConsumedError(), "BUILDER_CONSUMED"),
    (StorageIOError("io", "/tmp/x"), "STORAGE_IO_ERROR"),
    (FormatError("fmt", "/tmp/x"), "FORMAT_ERROR"),
])
def test_error_codes(error, code):
    assert isinstance(error, JsdbError)
    assert error.code == code


def test_storage_errors_are_critical():
    assert StorageIOError("io", "/tmp/x").severity == ErrorSeverity.CRITICAL
    assert FormatError("fmt", "/tmp/x").category == ErrorCategory.STORAGE


def test_validation_error_names_field():
    error = ValidationError("Invalid 'where' syntax", "where")
    assert error.field == "where"
    assert error.to_response()["context"]["field"] == "where"


def test_to_response_carries_context():
    error = ProtectedTableError("__jsdb_core", "write", ErrorContext(command="insert"))
    response = error.to_response()
    assert response["code"] == "PROTECTED_TABLE"
    assert response["message"] == "Table __jsdb_core is write protected."
    assert response["context"] == {
        "table": "__jsdb_core", "command": "insert", "field": None,
    }


def test_storage_error_keeps_path_out_of_response():
    error = StorageIOError("Database file is not readable", "/srv/main.jsdb")
    assert error.context.debug_info == {"path": "/srv/main.jsdb"}
    assert "/srv/main.jsdb" not in str(error.to_response())
