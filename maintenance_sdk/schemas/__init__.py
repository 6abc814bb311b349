# maintenance_sdk/schemas/__init__.py
from .descriptor import FieldDescriptor, ModelMeta, Record
from .pagination import PaginationMeta, CrudResult
from .options import OptionItem, ReferenceEntity
from .auth_user import AuthenticatedUser, ModelPermissions

__all__ = [
    "FieldDescriptor",
    "ModelMeta",
    "Record",
    "PaginationMeta",
    "CrudResult",
    "OptionItem",
    "ReferenceEntity",
    "AuthenticatedUser",
    "ModelPermissions",
]
