"""Role-based permissions for board features."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx
from postgrest.exceptions import APIError
from supabase import AuthError

from ttclub.db_tables import USER_ROLES

logger = logging.getLogger(__name__)

ADMIN = "admin"
VORSTAND = "vorstand"
ENTWICKLER = "entwickler"

MANAGE_DOCUMENTS = "manage_documents"
MANAGE_MESSAGES = "manage_messages"
MANAGE_FLYERS = "manage_flyers"
MANAGE_EVENTS = "manage_events"

_BOARD_ROLES: Tuple[str, ...] = (ADMIN, VORSTAND, ENTWICKLER)

PERMISSION_ROLES: Dict[str, Tuple[str, ...]] = {
    MANAGE_DOCUMENTS: _BOARD_ROLES,
    MANAGE_MESSAGES: _BOARD_ROLES,
    MANAGE_FLYERS: _BOARD_ROLES,
    MANAGE_EVENTS: _BOARD_ROLES,
}


def roles_grant(roles: Iterable[str], permission: str) -> bool:
    allowed = PERMISSION_ROLES.get(permission, ())
    return any(role in allowed for role in roles)


def _current_user_roles(client: Any) -> Optional[List[str]]:
    """Roles of the signed-in user, or ``None`` when they cannot be determined."""
    try:
        response = client.auth.get_user()
    except AuthError as exc:
        logger.error("Error getting user: %s", exc)
        return None

    user = getattr(response, "user", None)
    if user is None:
        logger.error("Error getting user: no active session")
        return None

    try:
        res = client.table(USER_ROLES).select("role").eq("user_id", user.id).execute()
    except (APIError, httpx.HTTPError) as exc:
        logger.error("Error getting user roles: %s", exc)
        return None

    return [row["role"] for row in (res.data or []) if row.get("role")]


def check_permission(client: Any, permission: str) -> bool:
    """True when any role of the signed-in user grants ``permission``."""
    roles = _current_user_roles(client)
    if roles is None:
        return False
    return roles_grant(roles, permission)


def get_user_permissions(client: Any) -> List[str]:
    roles = _current_user_roles(client)
    if roles is None:
        return []
    return [perm for perm in PERMISSION_ROLES if roles_grant(roles, perm)]


__all__ = [
    "ADMIN",
    "VORSTAND",
    "ENTWICKLER",
    "MANAGE_DOCUMENTS",
    "MANAGE_MESSAGES",
    "MANAGE_FLYERS",
    "MANAGE_EVENTS",
    "PERMISSION_ROLES",
    "roles_grant",
    "check_permission",
    "get_user_permissions",
]
