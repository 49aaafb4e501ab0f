"""Response Envelope — transport-neutral result shape for embedding applications.

Invariants:
    - Every envelope has error (0|1), code, messages ([message, type] pairs), data
    - Success envelopes carry the dispatcher payload untouched in data
    - JsdbError envelopes carry the error code and message, never a traceback
    - Unexpected exceptions never leak internal details unless debug_mode is on
    - testing_mode / debug_mode markers appear only when the mode is on

Design Decisions:
    - Mode flags arrive as plain booleans; callers read them from Settings
"""

from jsdb.core.errors import JsdbError


def _envelope(
    error: int, code: str, messages: list, data,
    debug_mode: bool, testing_mode: bool,
) -> dict:
    envelope = {"error": error, "code": code, "messages": messages, "data": data}
    if debug_mode:
        envelope["debug_mode"] = 1
    if testing_mode:
        envelope["testing_mode"] = 1
    return envelope


def success_envelope(data, debug_mode: bool = False, testing_mode: bool = False) -> dict:
    return _envelope(0, "", [], data, debug_mode, testing_mode)


def error_envelope(
    exc: Exception, debug_mode: bool = False, testing_mode: bool = False,
) -> dict:
    """Envelope for a failed command."""
    if isinstance(exc, JsdbError):
        envelope = _envelope(
            1, exc.code, [[exc.message, "error"]], [], debug_mode, testing_mode,
        )
        if debug_mode:
            envelope["details"] = exc.to_response()
        return envelope
    message = str(exc) if debug_mode else "An unexpected error occurred"
    return _envelope(1, "INTERNAL_ERROR", [[message, "error"]], [], debug_mode, testing_mode)
