# maintenance_sdk/permissions/__init__.py
from .gate import can_access, get_optional_current_user, require_role

__all__ = ["can_access", "get_optional_current_user", "require_role"]
