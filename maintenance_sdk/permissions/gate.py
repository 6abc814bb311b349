# maintenance_sdk/permissions/gate.py
import logging
from typing import Any, Optional

from fastapi import Depends, HTTPException, Request, status

from maintenance_sdk.config import get_settings
from maintenance_sdk.schemas.auth_user import AuthenticatedUser

logger = logging.getLogger("maintenance_sdk.permissions.gate")


def can_access(user: Optional[AuthenticatedUser], required_role_id: Any) -> bool:
    """True, только если пользователь есть и его роль совпадает с требуемой."""
    if user is None:
        return False
    return user.role_id is not None and user.role_id == required_role_id


def get_optional_current_user(request: Request) -> Optional[AuthenticatedUser]:
    """
    Возвращает AuthenticatedUser, установленного middleware аутентификации, иначе None.
    """
    user = request.scope.get("user")
    if user is not None and not isinstance(user, AuthenticatedUser):
        logger.error(f"Invalid object type found in request user: {type(user)}. Expected AuthenticatedUser or None.")
        return None
    return user


def require_role(required_role_id: Optional[int] = None):
    """
    Фабрика зависимостей FastAPI: пускает только пользователя с нужной ролью.
    Без явной роли берется ADMIN_ROLE_ID из настроек; если и он не задан, проверки нет.
    """
    async def _check_role(
        user: Optional[AuthenticatedUser] = Depends(get_optional_current_user),
    ) -> Optional[AuthenticatedUser]:
        role_id = required_role_id if required_role_id is not None else get_settings().ADMIN_ROLE_ID
        if role_id is None:
            return user
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if not can_access(user, role_id):
            logger.warning(
                f"Role {role_id} required, access denied for user '{user.username or user.id}' (role {user.role_id})"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user
    return _check_role
