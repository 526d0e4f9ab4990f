"""
Caller identity and capability-based authorization.

Authentication happens upstream: the identity provider forwards the caller
as ``X-User-Id`` / ``X-User-Role`` headers. Routes declare the capability
they need and never compare role strings themselves.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header

from cemse.errors import AuthenticationError, AuthorizationError
from cemse.models import (
    ROLE_ADOLESCENTS,
    ROLE_COMPANIES,
    ROLE_INSTITUTION,
    ROLE_INSTRUCTOR,
    ROLE_SUPERADMIN,
    ROLE_YOUTH,
)
from cemse.schemas import SessionUser

logger = logging.getLogger(__name__)

ALL_ROLES = frozenset({
    ROLE_YOUTH,
    ROLE_ADOLESCENTS,
    ROLE_COMPANIES,
    ROLE_INSTITUTION,
    ROLE_INSTRUCTOR,
    ROLE_SUPERADMIN,
})

ADMIN_ROLES = frozenset({ROLE_SUPERADMIN})

# capability -> roles granted it
CAPABILITIES: dict[str, frozenset] = {
    "search": ALL_ROLES,
    "discover_startups": ALL_ROLES,
    "view_startup_analytics": frozenset({ROLE_SUPERADMIN, ROLE_INSTITUTION}),
    "view_certificates": ALL_ROLES,
}


def authorize(session: Optional[SessionUser], capability: str) -> bool:
    """True if the session's role is granted ``capability``."""
    if session is None:
        return False
    roles = CAPABILITIES.get(capability)
    if roles is None:
        logger.warning("Unknown capability requested: %s", capability)
        return False
    return session.role in roles


def is_admin(session: Optional[SessionUser]) -> bool:
    return session is not None and session.role in ADMIN_ROLES


async def get_session_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> SessionUser:
    """Resolve the forwarded identity or fail with 401."""
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError()
    return SessionUser(id=x_user_id.strip(), role=(x_user_role or "").strip().upper())


def require(capability: str):
    """Dependency factory: authenticated session holding ``capability``."""

    async def dependency(session: SessionUser = Depends(get_session_user)) -> SessionUser:
        if not authorize(session, capability):
            logger.info("Role %s denied capability %s", session.role or "-", capability)
            raise AuthorizationError()
        return session

    return dependency
