# campus_reservations/api/dependencies/auth.py
"""
Caller identity.

Authentication happens upstream; the gateway forwards the authenticated user
id and role in ``X-User-Id`` and ``X-User-Role``.
"""

import logging
from typing import Optional

from fastapi import Depends, Header

from ...core.enums import RoleName
from ...core.exceptions import ForbiddenException, UnauthorizedException
from ...principal import UserPrincipal

logger = logging.getLogger(__name__)


def get_current_principal(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> UserPrincipal:
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise UnauthorizedException("Authentication required", code="AUTH_REQUIRED").to_http_exception()

    role_name = (x_user_role or RoleName.STUDENT.value).strip().lower()
    try:
        role = RoleName(role_name)
    except ValueError:
        logger.warning(f"Rejected unknown role {role_name!r} for user {user_id}")
        raise UnauthorizedException(
            "Unknown role", code="INVALID_ROLE", details={"role": role_name}
        ).to_http_exception() from None

    return UserPrincipal(user_id=user_id, role=role)


def require_admin(principal: UserPrincipal = Depends(get_current_principal)) -> UserPrincipal:
    if not principal.is_admin:
        raise ForbiddenException("Admin access required", code="ADMIN_REQUIRED").to_http_exception()
    return principal
