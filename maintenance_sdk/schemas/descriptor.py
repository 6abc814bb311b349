# maintenance_sdk/schemas/descriptor.py
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Запись backend'а: имя поля -> скалярное значение
Record = Dict[str, Any]

STRING_TYPE_KEYS = ("string", "text", "enum", "char")
NUMERIC_TYPE_KEYS = ("integer", "number", "decimal", "float", "double", "bigint")


class FieldDescriptor(BaseModel):
    """
    Метаданные одного поля модели.
    Принимает как camelCase-ключи backend'а (primaryKey, allowNull, maxLength),
    так и ключ `length`, который отдает /meta.
    """

    name: str
    type: str = ""
    primary_key: bool = Field(False, alias="primaryKey")
    allow_null: bool = Field(True, alias="allowNull")
    max_length: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("maxLength", "max_length", "length"),
        serialization_alias="maxLength",
    )
    unique: bool = False
    label: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("primary_key", "unique", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("allow_null", mode="before")
    @classmethod
    def _coerce_allow_null(cls, value: Any) -> bool:
        # Обязательным поле делает только явный False
        return value is not False

    @property
    def type_key(self) -> str:
        return self.type.lower()

    @property
    def is_boolean(self) -> bool:
        return "boolean" in self.type_key

    @property
    def is_decimal(self) -> bool:
        return "decimal" in self.type_key

    @property
    def is_numeric(self) -> bool:
        return any(key in self.type_key for key in NUMERIC_TYPE_KEYS)

    @property
    def is_string_like(self) -> bool:
        return any(key in self.type_key for key in STRING_TYPE_KEYS)


class ModelMeta(BaseModel):
    """Описание модели: список атрибутов и явный упорядоченный список ключей."""

    attributes: List[FieldDescriptor] = Field(default_factory=list)
    primary_key_attributes: List[str] = Field(default_factory=list, alias="primaryKeyAttributes")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def key_fields(self) -> List[str]:
        if self.primary_key_attributes:
            return list(self.primary_key_attributes)
        return [attr.name for attr in self.attributes if attr.primary_key]

    @property
    def editable_fields(self) -> List[FieldDescriptor]:
        return [attr for attr in self.attributes if not attr.primary_key]

    def is_empty(self) -> bool:
        return not self.attributes
