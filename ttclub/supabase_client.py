"""Signed-in Supabase access for the club app.

Tokens live in ``st.session_state`` so a browser rerun keeps the member signed
in; every :func:`get_client` call re-attaches them to the cached client.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, NamedTuple, Optional

import streamlit as st
from supabase import AuthApiError, AuthError

from ttclub.error_handling import ERROR_MESSAGES, handle_error
from ttclub.utils.supa import SupabaseConfigError, get_client as _cached_client
from ttclub.validation import SignIn, validate_form

__all__ = ["get_client", "sign_in", "sign_out", "session_value", "get_current_user"]

logger = logging.getLogger(__name__)

_AUTH_KEY = "ttclub_auth"
_TOKENS_KEY = "ttclub_tokens"
_SESSION_EXPIRED = ERROR_MESSAGES["AUTH"]["SESSION_EXPIRED"]
_USER_FIELDS = ("id", "email", "role", "user_metadata", "last_sign_in_at")


class _Tokens(NamedTuple):
    access_token: str
    refresh_token: str


def session_value(session: Any, key: str) -> Any:
    """Read ``key`` from a Supabase session model or a plain dict."""
    if session is None:
        return None
    if isinstance(session, dict):
        return session.get(key)
    return getattr(session, key, None)


def _auth_state() -> Dict[str, Any]:
    return st.session_state.setdefault(_AUTH_KEY, {"authenticated": False, "user": None})


def _user_dict(user: Any) -> Optional[Dict[str, Any]]:
    if user is None or isinstance(user, dict):
        return user
    return {field: getattr(user, field) for field in _USER_FIELDS if getattr(user, field, None) is not None}


def _saved_tokens() -> Optional[_Tokens]:
    raw = st.session_state.get(_TOKENS_KEY)
    if not raw or not raw.get("access_token") or not raw.get("refresh_token"):
        return None
    return _Tokens(raw["access_token"], raw["refresh_token"])


def _remember(session: Any, user: Any = None) -> bool:
    """Keep the tokens of ``session``; False when it holds no access token."""
    access = session_value(session, "access_token")
    if not access:
        return False
    st.session_state[_TOKENS_KEY] = {
        "access_token": access,
        "refresh_token": session_value(session, "refresh_token") or "",
    }
    auth = _auth_state()
    auth.update(
        authenticated=True,
        user=_user_dict(user or session_value(session, "user")) or auth.get("user"),
        last_error=None,
    )
    return True


def _forget(reason: Optional[str] = None) -> None:
    had_tokens = st.session_state.pop(_TOKENS_KEY, None) is not None
    _auth_state().update(
        authenticated=False,
        user=None,
        last_error=reason if had_tokens else None,
    )


def _restore_session(client: Any) -> None:
    try:
        current = client.auth.get_session()
    except AuthApiError as exc:  # pragma: no cover - network error path
        logger.warning("Supabase get_session failed: %s", exc)
        _forget(_SESSION_EXPIRED)
        return

    saved = _saved_tokens()
    if saved and saved.access_token != session_value(current, "access_token"):
        try:
            response = client.auth.set_session(saved.access_token, saved.refresh_token)
        except AuthError as exc:
            logger.warning("Saved session rejected: %s", exc)
            _forget(_SESSION_EXPIRED)
            return
        if _remember(getattr(response, "session", None), getattr(response, "user", None)):
            return

    if not _remember(current):
        _forget(_SESSION_EXPIRED if saved else None)


def get_client():
    """Cached Supabase client with the member's session attached."""
    try:
        client = _cached_client()
    except SupabaseConfigError as exc:
        st.error(str(exc))
        st.stop()
        raise
    _restore_session(client)
    return client


def get_current_user() -> Optional[Dict[str, Any]]:
    auth = _auth_state()
    return auth.get("user") if auth.get("authenticated") else None


def sign_in(email: str, password: str) -> Optional[Dict[str, Any]]:
    """Sign in with email and password; returns the user or ``None``.

    Invalid input and rejected credentials are reported to the member, not
    raised.
    """
    form, message = validate_form(SignIn, {"email": email, "password": password})
    if form is None:
        handle_error(ValueError(f"validation: {message}"), log_error=False, custom_message=message)
        return None

    try:
        response = get_client().auth.sign_in_with_password(
            {"email": form.email, "password": form.password}
        )
    except AuthApiError as exc:
        _forget()
        handle_error(exc, toast_title="Anmeldung fehlgeschlagen")
        return None

    if not _remember(getattr(response, "session", None), getattr(response, "user", None)):
        _forget()
        return None
    return get_current_user()


def sign_out() -> None:
    client = get_client()
    try:
        client.auth.sign_out()
    finally:
        _forget()
