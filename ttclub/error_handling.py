"""Classify backend/runtime errors and turn them into German user messages."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple, TypeVar

import httpx

try:  # pragma: no cover - optional UI feedback when Streamlit available
    import streamlit as st
except Exception:  # pragma: no cover - running headless
    st = None  # type: ignore

logger = logging.getLogger(__name__)

T = TypeVar("T")

ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "AUTH": {
        "NOT_AUTHENTICATED": "Sie sind nicht angemeldet.",
        "SESSION_EXPIRED": "Ihre Sitzung ist abgelaufen. Bitte melden Sie sich erneut an.",
        "INSUFFICIENT_PERMISSIONS": "Sie besitzen nicht die erforderlichen Berechtigungen.",
    },
    "DATA": {
        "LOAD_ERROR": "Die Daten konnten nicht geladen werden.",
        "SAVE_ERROR": "Die Daten konnten nicht gespeichert werden.",
        "DELETE_ERROR": "Die Daten konnten nicht gelöscht werden.",
        "UPDATE_ERROR": "Die Daten konnten nicht aktualisiert werden.",
        "VALIDATION_ERROR": "Die eingegebenen Daten sind ungültig.",
    },
    "FILE": {
        "UPLOAD_ERROR": "Die Datei konnte nicht hochgeladen werden.",
        "DELETE_ERROR": "Die Datei konnte nicht gelöscht werden.",
        "INVALID_TYPE": "Dieser Dateityp wird nicht unterstützt.",
        "SIZE_ERROR": "Die Datei ist zu groß.",
        "NAME_ERROR": "Der Dateiname ist ungültig.",
    },
    "GENERIC": {
        "UNKNOWN_ERROR": "Ein unerwarteter Fehler ist aufgetreten.",
        "NETWORK_ERROR": "Es besteht ein Problem mit der Internetverbindung.",
        "TIMEOUT_ERROR": "Die Anfrage hat zu lange gedauert.",
        "SERVER_ERROR": "Der Server ist derzeit nicht erreichbar.",
    },
}

# (substrings, category, type); first hit wins
_MESSAGE_RULES = (
    (("not authenticated", "session expired"), "AUTH", "NOT_AUTHENTICATED"),
    (("permission", "forbidden"), "AUTH", "INSUFFICIENT_PERMISSIONS"),
    (("validation",), "DATA", "VALIDATION_ERROR"),
    (("network", "fetch"), "GENERIC", "NETWORK_ERROR"),
)


class HandledError(NamedTuple):
    message: str
    category: str
    type: str


def _error_text(error: Any) -> str:
    message = getattr(error, "message", None)
    return str(message or error).lower()


def determine_error_source(error: Any) -> Tuple[str, str]:
    """Return ``(category, type)`` keys into :data:`ERROR_MESSAGES`."""

    if isinstance(error, httpx.TimeoutException):
        return "GENERIC", "TIMEOUT_ERROR"
    if isinstance(error, httpx.TransportError):
        return "GENERIC", "NETWORK_ERROR"

    if isinstance(error, Exception):
        text = _error_text(error)
        for needles, category, kind in _MESSAGE_RULES:
            if any(needle in text for needle in needles):
                return category, kind

    # PostgREST errors carry the SQLSTATE in ``code``
    code = getattr(error, "code", None)
    if code is None and isinstance(error, dict):
        code = error.get("code")
    if code:
        code = str(code)
        if code.startswith("23"):
            return "DATA", "VALIDATION_ERROR"
        if code.startswith("28"):
            return "AUTH", "INSUFFICIENT_PERMISSIONS"

    return "GENERIC", "UNKNOWN_ERROR"


def _notify(title: str, message: str) -> None:
    if st is not None:
        st.error(f"**{title}:** {message}")
    else:
        print(f"{title}: {message}")


def handle_error(
    error: Any,
    log_error: bool = True,
    show_toast: bool = True,
    toast_title: str = "Fehler",
    custom_message: Optional[str] = None,
) -> HandledError:
    """Log ``error``, show a user message and report how it was classified."""

    category, kind = determine_error_source(error)
    message = custom_message or ERROR_MESSAGES[category][kind]

    if log_error:
        logger.error("[%s] %s: %s", category, kind, error)

    if show_toast:
        _notify(toast_title, message)

    return HandledError(message, category, kind)


def with_error_handling(
    fn: Callable[[], T], **options: Any
) -> Tuple[Optional[T], Optional[Exception]]:
    """Run ``fn`` and return ``(data, None)`` or ``(None, error)`` after handling it."""

    try:
        return fn(), None
    except Exception as exc:
        handle_error(exc, **options)
        return None, exc


__all__ = [
    "ERROR_MESSAGES",
    "HandledError",
    "determine_error_source",
    "handle_error",
    "with_error_handling",
]
