# maintenance_sdk/schemas/auth_user.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthenticatedUser(BaseModel):
    """
    Представление пользователя, от имени которого открыт экран обслуживания.
    Принимает как собственные имена полей, так и колонки backend'а (atr_id_usuario, atr_id_rol).
    """

    id: Optional[int] = Field(None, alias="atr_id_usuario", description="ID пользователя.")
    role_id: Optional[int] = Field(None, alias="atr_id_rol", description="ID роли пользователя.")
    username: Optional[str] = Field(None, alias="atr_usuario")

    model_config = ConfigDict(populate_by_name=True)


class ModelPermissions(BaseModel):
    """CRUD-права текущего пользователя на модель (ответ /{model}/permissions)."""

    create: bool = False
    read: bool = False
    update: bool = False
    delete: bool = False
