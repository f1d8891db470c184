"""Settings lookup shared by the club helpers.

Values come from Streamlit secrets when the app runs inside Streamlit and fall
back to environment variables for tests, scripts and other headless usage::

    [ttclub]
    timezone = "Europe/Berlin"

    [supabase]
    url = "https://<project>.supabase.co"
    anon_key = "<anon key>"
"""

from __future__ import annotations

import os
from typing import Optional

try:
    import streamlit as st
except Exception:  # pragma: no cover - allow headless usage (tests / CLI)
    st = None

DEFAULT_TIMEZONE = "Europe/Berlin"

# secrets key -> environment variable
_ENV_NAMES = {
    ("ttclub", "timezone"): "TTCLUB_TIMEZONE",
    ("supabase", "url"): "SUPABASE_URL",
    ("supabase", "anon_key"): "SUPABASE_ANON_KEY",
    ("supabase", "service_role_key"): "SUPABASE_SERVICE_ROLE_KEY",
}


def _from_secrets(section: str, key: str) -> Optional[str]:
    if st is None:
        return None
    try:
        value = st.secrets[section][key]
    except Exception:
        return None
    return str(value) if value else None


def get_setting(section: str, key: str, default: Optional[str] = None) -> Optional[str]:
    """Return ``[section].key`` from Streamlit secrets or its environment variable."""

    value = _from_secrets(section, key)
    if value:
        return value
    env_name = _ENV_NAMES.get((section, key)) or f"{section}_{key}".upper()
    return os.getenv(env_name) or default


def club_timezone() -> str:
    """IANA name of the time zone match times are shown in."""

    return get_setting("ttclub", "timezone", DEFAULT_TIMEZONE) or DEFAULT_TIMEZONE


__all__ = ["DEFAULT_TIMEZONE", "get_setting", "club_timezone"]
