"""Command Validation — request shape checks before dispatch.

Tests cover:
    - Accepted commands and table names
    - Rejections name the offending field
    - insert/update require non-empty values
    - where must be a list, values a mapping, columns a list
"""

import pytest

from jsdb.core.domain_types import Command
from jsdb.core.errors import ValidationError
from jsdb.schemas.command import validate_command


def _field_of(request):
    with pytest.raises(ValidationError) as exc:
        validate_command(request)
    return exc.value.field


# --- accepted ------------------------------------------------------------------

def test_minimal_select_is_valid():
    command = validate_command({"command": "select", "table": "items"})
    assert command.command is Command.SELECT
    assert command.where is None
    assert not command.has_where


def test_full_update_is_valid():
    command = validate_command({
        "command": "update",
        "table": "shop.orders",
        "where": [["id", "==", 2], ["or", "id", "==", 3]],
        "values": {"status": "done"},
    })
    assert command.command is Command.UPDATE
    assert command.has_where
    assert command.values == {"status": "done"}


def test_columns_accepted_for_select():
    command = validate_command({"command": "select", "table": "t1", "columns": ["a", "b"]})
    assert command.columns == ["a", "b"]


def test_unknown_keys_ignored():
    command = validate_command({"command": "delete", "table": "t1", "token": "x"})
    assert command.command is Command.DELETE


# --- rejected ------------------------------------------------------------------

@pytest.mark.parametrize("name", ["drop", "SELECT", "", None])
def test_bad_command(name):
    assert _field_of({"command": name, "table": "items"}) == "command"


def test_missing_command():
    assert _field_of({"table": "items"}) == "command"


@pytest.mark.parametrize("table", ["a", "has space", "semi;colon", "dash-ed", ".x", 12])
def test_bad_table_name(table):
    assert _field_of({"command": "select", "table": table}) == "table"


@pytest.mark.parametrize("table", ["ab", "a_b", "a.b", "a..b", "users_2024"])
def test_good_table_names(table):
    assert validate_command({"command": "select", "table": table}).table == table


def test_where_must_be_list():
    assert _field_of({"command": "select", "table": "t1", "where": "id=1"}) == "where"


def test_where_entries_must_be_lists():
    field = _field_of({"command": "select", "table": "t1", "where": ["id"]})
    assert field.startswith("where")


def test_values_must_be_mapping():
    assert _field_of({"command": "delete", "table": "t1", "values": [1, 2]}) == "values"


def test_columns_must_be_list():
    assert _field_of({"command": "select", "table": "t1", "columns": "a"}) == "columns"


@pytest.mark.parametrize("command", ["insert", "update"])
def test_writes_require_values(command):
    with pytest.raises(ValidationError) as exc:
        validate_command({"command": command, "table": "t1"})
    assert exc.value.field == "values"
    assert exc.value.message == "Values required"


@pytest.mark.parametrize("command", ["insert", "update"])
def test_writes_reject_empty_values(command):
    assert _field_of({"command": command, "table": "t1", "values": {}}) == "values"


def test_non_mapping_request_rejected():
    assert _field_of(["select"]) == "request"
