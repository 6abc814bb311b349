# maintenance_sdk/forms/rules.py
"""
Построитель правил валидации формы обслуживания.

Правила строятся из дескрипторов полей и работают в две фазы:

1. синхронная - обязательность, тип, длина, email, шаблон; выполняется сразу;
2. асинхронная - проверка уникальности на сервере; должна завершиться до отправки.

Проверка уникальности fail-open: если сервер недоступен, значение считается
допустимым. Для каждого поля ведется счетчик запросов, ответ на устаревший
запрос отбрасывается.
"""
import asyncio
import logging
import re
from enum import Enum
from types import MappingProxyType
from typing import (
    Annotated,
    Any,
    Dict,
    Iterable,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    TYPE_CHECKING,
)

from pydantic import AllowInfNan, BaseModel, ConfigDict, EmailStr, TypeAdapter, ValidationError

from maintenance_sdk.exceptions import ServiceCommunicationError
from maintenance_sdk.schemas.descriptor import FieldDescriptor, ModelMeta

from .identity import record_identity

if TYPE_CHECKING:
    from maintenance_sdk.clients.base import MaintenanceClient

logger = logging.getLogger("maintenance_sdk.forms.rules")

MSG_REQUIRED = "Requerido"
MSG_NOT_A_NUMBER = "Debe ser un número"
MSG_MAX_LENGTH = "Máx. {max_length} caracteres"
MSG_EMAIL = "Formato de email inválido"
MSG_NOT_UNIQUE = "Valor ya existe"

EMAIL_FIELD_RE = re.compile(r"email", re.IGNORECASE)

_NUMBER_ADAPTER = TypeAdapter(Annotated[float, AllowInfNan(False)])
_EMAIL_ADAPTER = TypeAdapter(EmailStr)


class PatternOverride(NamedTuple):
    pattern: str
    message: str


# (модель в нижнем регистре, поле) -> дополнительный шаблон
MODEL_PATTERN_OVERRIDES: Dict[Tuple[str, str], PatternOverride] = {
    ("parametro", "atr_parametro"): PatternOverride(
        r"^[A-Z0-9_]+$",
        "Formato inválido: usar mayúsculas, números y guiones bajos",
    ),
}


class RuleKind(str, Enum):
    STRING = "string"
    NUMERIC = "numeric"
    MIXED = "mixed"


def is_empty_value(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


class FieldRule(BaseModel):
    field: str
    kind: RuleKind = RuleKind.MIXED
    required: bool = False
    max_length: Optional[int] = None
    email: bool = False
    pattern: Optional[str] = None
    pattern_message: Optional[str] = None
    async_unique: bool = False

    model_config = ConfigDict(frozen=True)

    def _email_error(self, text: str) -> Optional[str]:
        if not self.email:
            return None
        try:
            _EMAIL_ADAPTER.validate_python(text)
        except ValidationError:
            return MSG_EMAIL
        return None

    def validate_value(self, value: Any) -> Optional[str]:
        """Синхронная фаза для одного значения. Возвращает текст ошибки или None."""
        if is_empty_value(value):
            return MSG_REQUIRED if self.required else None

        text = value if isinstance(value, str) else str(value)
        # Правило email по имени поля действует при любом объявленном типе
        if self.kind == RuleKind.NUMERIC:
            try:
                _NUMBER_ADAPTER.validate_python(value)
            except ValidationError:
                return MSG_NOT_A_NUMBER
            return self._email_error(text)

        if self.kind == RuleKind.MIXED and not isinstance(value, str):
            return self._email_error(text)

        if self.max_length is not None and len(text) > self.max_length:
            return MSG_MAX_LENGTH.format(max_length=self.max_length)
        email_error = self._email_error(text)
        if email_error:
            return email_error
        if self.pattern and not re.search(self.pattern, text):
            return self.pattern_message or "Formato inválido"
        return None


class UniqueCheckResult(NamedTuple):
    field: str
    valid: bool
    error: Optional[str] = None
    # True, если пока шел запрос, по этому полю был запущен более новый
    stale: bool = False


def rule_kind_for(descriptor: FieldDescriptor) -> RuleKind:
    if descriptor.is_numeric:
        return RuleKind.NUMERIC
    if descriptor.is_string_like:
        return RuleKind.STRING
    return RuleKind.MIXED


def build_field_rule(
    descriptor: FieldDescriptor,
    model: str,
    overrides: Mapping[Tuple[str, str], PatternOverride] = MODEL_PATTERN_OVERRIDES,
) -> FieldRule:
    override = overrides.get((str(model).lower(), descriptor.name))
    return FieldRule(
        field=descriptor.name,
        kind=rule_kind_for(descriptor),
        required=descriptor.allow_null is False,
        max_length=descriptor.max_length or None,
        email=bool(EMAIL_FIELD_RE.search(descriptor.name)),
        pattern=override.pattern if override else None,
        pattern_message=override.message if override else None,
        async_unique=descriptor.unique,
    )


class RuleSet:
    """
    Неизменяемый набор правил для тройки (дескрипторы, модель, редактируемая запись).
    При смене любого из трех строится новый RuleSet.
    """

    def __init__(
        self,
        model: str,
        rules: Mapping[str, FieldRule],
        client: Optional["MaintenanceClient"] = None,
        exclude_id: Any = None,
    ):
        self.model = model
        self._rules: Mapping[str, FieldRule] = MappingProxyType(dict(rules))
        self._client = client
        self.exclude_id = exclude_id
        self._sequence: Dict[str, int] = {}

    @property
    def rules(self) -> Mapping[str, FieldRule]:
        return self._rules

    @property
    def unique_fields(self) -> Tuple[str, ...]:
        return tuple(name for name, rule in self._rules.items() if rule.async_unique)

    def __contains__(self, field: object) -> bool:
        return field in self._rules

    def __getitem__(self, field: str) -> FieldRule:
        return self._rules[field]

    def __iter__(self):
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def validate_field(self, field: str, value: Any) -> Optional[str]:
        rule = self._rules.get(field)
        if rule is None:
            return None
        return rule.validate_value(value)

    def validate_sync(self, values: Mapping[str, Any]) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        for name, rule in self._rules.items():
            error = rule.validate_value(values.get(name))
            if error:
                errors[name] = error
        return errors

    async def check_unique(self, field: str, value: Any) -> UniqueCheckResult:
        rule = self._rules.get(field)
        if rule is None or not rule.async_unique:
            return UniqueCheckResult(field=field, valid=True)

        sequence = self._sequence.get(field, 0) + 1
        self._sequence[field] = sequence

        if not value:
            return UniqueCheckResult(field=field, valid=True)
        if self._client is None:
            logger.debug(f"No client bound to rule set for '{self.model}', skipping uniqueness of '{field}'.")
            return UniqueCheckResult(field=field, valid=True)

        try:
            unique = await self._client.check_unique(self.model, field, value, self.exclude_id)
        except ServiceCommunicationError as e:
            logger.warning(f"Uniqueness check for '{self.model}.{field}' failed, treating as valid: {e}")
            unique = True

        if self._sequence.get(field) != sequence:
            logger.debug(f"Discarding stale uniqueness response for '{self.model}.{field}' (request #{sequence}).")
            return UniqueCheckResult(field=field, valid=True, stale=True)
        if unique:
            return UniqueCheckResult(field=field, valid=True)
        return UniqueCheckResult(field=field, valid=False, error=MSG_NOT_UNIQUE)

    async def validate_async(
        self, values: Mapping[str, Any], skip: Iterable[str] = ()
    ) -> Dict[str, str]:
        skipped = set(skip)
        fields = [name for name in self.unique_fields if name not in skipped]
        if not fields:
            return {}
        results = await asyncio.gather(
            *(self.check_unique(name, values.get(name)) for name in fields)
        )
        return {r.field: r.error for r in results if not r.valid and r.error and not r.stale}

    async def validate(self, values: Mapping[str, Any]) -> Dict[str, str]:
        errors = self.validate_sync(values)
        errors.update(await self.validate_async(values, skip=errors.keys()))
        return errors


def build_rules(
    descriptors: Sequence[FieldDescriptor],
    model: str,
    editing: Optional[Mapping[str, Any]] = None,
    *,
    client: Optional["MaintenanceClient"] = None,
    key_fields: Optional[Sequence[str]] = None,
    overrides: Mapping[Tuple[str, str], PatternOverride] = MODEL_PATTERN_OVERRIDES,
) -> RuleSet:
    """
    Строит RuleSet для всех не-ключевых полей.
    exclude_id для проверки уникальности - идентификатор редактируемой записи.
    """
    rules = {
        d.name: build_field_rule(d, model, overrides)
        for d in descriptors
        if not d.primary_key
    }
    meta = ModelMeta(attributes=list(descriptors), primary_key_attributes=list(key_fields or []))
    exclude_id = record_identity(editing, meta)
    logger.debug(f"Built {len(rules)} rules for '{model}' (exclude_id={exclude_id}).")
    return RuleSet(model=model, rules=rules, client=client, exclude_id=exclude_id)
