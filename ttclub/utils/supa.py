from __future__ import annotations
from typing import Any, Dict, NamedTuple, Optional
from functools import lru_cache
import logging

import httpx

try:
    import streamlit as st
except Exception:  # pragma: no cover - allow headless usage (tests / CLI)
    st = None

from supabase import Client, ClientOptions, SupabaseException, create_client

from ttclub.config import get_setting

logger = logging.getLogger(__name__)

ANON_KEY = "anon_key"
SERVICE_ROLE_KEY = "service_role_key"

_TIMEOUT = httpx.Timeout(10.0, connect=5.0)


class SupabaseConfigError(RuntimeError):
    """Supabase URL or key missing, or rejected by the project."""


class SupabaseConnectionError(RuntimeError):
    """Supabase could not be reached within the timeout window."""


class _Credentials(NamedTuple):
    url: str
    key: str


def _missing_config_message(key_name: str) -> str:
    env_name = "SUPABASE_SERVICE_ROLE_KEY" if key_name == SERVICE_ROLE_KEY else "SUPABASE_ANON_KEY"
    return (
        f"Supabase settings missing. Add `[supabase].url` and `[supabase].{key_name}` to "
        f"`.streamlit/secrets.toml` or set SUPABASE_URL and {env_name}."
    )


def _credentials(key_name: str = ANON_KEY) -> _Credentials:
    """URL and API key from Streamlit secrets or the environment."""
    url = get_setting("supabase", "url")
    key = get_setting("supabase", key_name)
    if not url or not key:
        raise SupabaseConfigError(_missing_config_message(key_name))
    return _Credentials(url, key)


def _client_options(http: httpx.Client) -> ClientOptions:
    return ClientOptions(
        httpx_client=http,
        postgrest_client_timeout=_TIMEOUT,
        storage_client_timeout=_TIMEOUT,
        function_client_timeout=_TIMEOUT,
    )


def _status_preview(exc: httpx.HTTPStatusError) -> Dict[str, Any]:
    response = exc.response
    if response is None:
        return {"status": "unknown", "body": str(exc)}
    body = (response.text or "").strip().replace("\n", " ")[:200]
    return {"status": response.status_code, "body": body or str(exc)}


def _create_supabase_client(key_name: str = ANON_KEY) -> Client:
    creds = _credentials(key_name)
    http = httpx.Client(timeout=_TIMEOUT)
    try:
        return create_client(creds.url, creds.key, options=_client_options(http))
    except SupabaseException as exc:
        http.close()
        raise SupabaseConfigError(str(exc) or _missing_config_message(key_name)) from exc
    except httpx.HTTPStatusError as exc:
        http.close()
        preview = _status_preview(exc)
        logger.error("Supabase answered HTTP %s: %s", preview["status"], preview["body"])
        raise SupabaseConfigError(
            f"Supabase responded with HTTP {preview['status']}. "
            "Check the project URL and key in secrets or environment."
        ) from exc
    except httpx.HTTPError as exc:
        http.close()
        logger.error("Supabase unreachable: %s", exc)
        raise SupabaseConnectionError(
            "Supabase is not reachable right now. Check the connection and try again."
        ) from exc


if st is not None:

    @st.cache_resource  # type: ignore[misc]
    def get_client() -> Client:
        """Cached client bound to the anon key."""
        return _create_supabase_client()

else:

    @lru_cache(maxsize=1)
    def get_client() -> Client:
        return _create_supabase_client()


def get_service_client() -> Client:
    """Client bound to the service role key; trusted CLI use only."""
    return _create_supabase_client(SERVICE_ROLE_KEY)


def first_row(rows: Any) -> Optional[Dict[str, Any]]:
    """First record of a PostgREST response (``.data`` list or single dict)."""
    if rows is None:
        return None
    data = getattr(rows, "data", rows)
    if isinstance(data, dict):
        return data
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return data[0]
    return None


__all__ = [
    "ANON_KEY",
    "SERVICE_ROLE_KEY",
    "get_client",
    "get_service_client",
    "first_row",
    "SupabaseConfigError",
    "SupabaseConnectionError",
]
