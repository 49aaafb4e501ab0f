"""Command Dispatch — explicit routing from a validated command to a QueryBuilder call.

Invariants:
    - Every command -> handler mapping is visible in one dict
    - Requests are validated (schemas.command) before any query is built
    - A fresh QueryBuilder is built per command; no builder state survives a request
    - select returns {items, itemsCount}; insert/update/delete return {"success": bool}
    - handle() raises JsdbError to its caller; respond() turns every failure into an envelope
    - Every dispatched command is logged with its table and command name

Design Decisions:
    - Explicit dict over getattr: adding a command requires editing this mapping
    - A first where entry of 4 values with a blank join is read as the 3-value form,
      clients send the join slot even for the first clause
    - Entries of any other length than 3 or 4 raise InvalidClauseError instead of
      being dropped silently
"""

import logging

from jsdb.config import Settings, get_settings
from jsdb.core.domain_types import Command
from jsdb.core.errors import ErrorContext, ErrorSeverity, InvalidClauseError, JsdbError
from jsdb.core.response_envelope import error_envelope, success_envelope
from jsdb.infrastructure.document_store import DocumentStore
from jsdb.infrastructure.observability import setup_logging
from jsdb.schemas.command import QueryCommand, validate_command
from jsdb.services.query_builder import QueryBuilder

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """Routes command -> QueryBuilder operation. Explicit registration."""

    def __init__(self, store: DocumentStore, settings: Settings):
        self._store = store
        self._settings = settings
        self._handlers = {
            Command.SELECT: self._select,
            Command.INSERT: self._insert,
            Command.UPDATE: self._update,
            Command.DELETE: self._delete,
        }

    def query(self, table: str) -> QueryBuilder:
        return QueryBuilder(self._store, self._settings, table)

    def handle(self, request: dict) -> dict:
        """Validate and execute one request. Raises JsdbError on failure."""
        command = validate_command(request)
        result = self._handlers[command.command](command)
        logger.info(
            f"{command.command.value} on {command.table}",
            extra={"command": command.command.value, "table": command.table},
        )
        return result

    def respond(self, request: dict) -> dict:
        """Execute one request and wrap the outcome in a response envelope."""
        try:
            return success_envelope(self.handle(request), **self._modes())
        except JsdbError as e:
            level = logging.ERROR if e.severity == ErrorSeverity.CRITICAL else logging.WARNING
            logger.log(
                level, f"JsdbError: {e.message}",
                extra={
                    "error_code": e.code,
                    "table": e.context.table,
                    "command": e.context.command,
                },
            )
            return error_envelope(e, **self._modes())
        except Exception as e:
            logger.error(f"Unhandled exception while dispatching: {e}", exc_info=True)
            return error_envelope(e, **self._modes())

    def _modes(self) -> dict:
        return {
            "debug_mode": self._settings.debug_mode,
            "testing_mode": self._settings.testing_mode,
        }

    # ─── Handlers ───────────────────────────────────────────────

    def _select(self, command: QueryCommand) -> dict:
        query = self._build(command)
        if command.columns is not None:
            query.columns(command.columns)
        return query.select()

    def _insert(self, command: QueryCommand) -> dict:
        self.query(command.table).insert(command.values)
        return {"success": True}

    def _update(self, command: QueryCommand) -> dict:
        return {"success": self._build(command).update(command.values)}

    def _delete(self, command: QueryCommand) -> dict:
        return {"success": self._build(command).delete()}

    def _build(self, command: QueryCommand) -> QueryBuilder:
        query = self.query(command.table)
        if not command.has_where:
            return query
        for index, entry in enumerate(command.where):
            if index == 0 and len(entry) == 4 and not str(entry[0]).strip():
                entry = entry[1:]
            if len(entry) not in (3, 4):
                raise InvalidClauseError(
                    f"'where' entry {index} must have 3 or 4 values, got {len(entry)}",
                    ErrorContext(table=command.table, command=command.command.value),
                )
            query.where(*entry)
        return query


def build_dispatcher(
    settings: Settings | None = None, configure_logging: bool = False,
) -> RequestDispatcher:
    """Bootstrap: settings -> store (created lazily on disk) -> dispatcher."""
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings.log_level, settings.log_format, settings.logging_enabled)
    store = DocumentStore.from_settings(settings)
    store.ensure_initialized()
    return RequestDispatcher(store, settings)
