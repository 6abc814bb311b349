# maintenance_sdk/frontend/field.py
import logging
import re
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from maintenance_sdk.schemas.descriptor import FieldDescriptor
from maintenance_sdk.schemas.options import OptionItem, ReferenceEntity

from .config import (
    BOOLEAN_NAME_KEYWORDS,
    DECIMAL_STEP,
    DEFAULT_HINT_MAX_LENGTH,
    FOREIGN_KEY_ALIASES,
    FREE_TEXT_NAME_KEYWORDS,
    INTEGER_STEP,
    MODEL_FIELD_HINTS,
    MULTILINE_MIN_LENGTH,
    NUMERIC_NAME_KEYWORDS,
    REFERENCE_ENTITIES,
    SELECT_EMPTY_LABEL,
)
from .exceptions import FieldTypeError
from .types import WidgetKind, WidgetSpec

logger = logging.getLogger("maintenance_sdk.frontend.field")

_LABEL_SPLIT_RE = re.compile(r"[_\-\s]+")


class ReferenceTables(NamedTuple):
    """Справочные модели и явные алиасы полей внешних ключей."""

    entities: Mapping[str, ReferenceEntity]
    aliases: Mapping[str, str]


def reference_tables(
    entities: Optional[Mapping[str, ReferenceEntity]] = None,
    aliases: Optional[Mapping[str, str]] = None,
) -> ReferenceTables:
    # Встроенные алиасы ссылаются на встроенные справочники, к чужим не применяются
    if entities is None:
        entities = REFERENCE_ENTITIES
    if aliases is None:
        aliases = FOREIGN_KEY_ALIASES if entities is REFERENCE_ENTITIES else {}
    return ReferenceTables(entities=entities, aliases=aliases)


def reference_for(
    name: str,
    entities: Optional[Mapping[str, ReferenceEntity]] = None,
    aliases: Optional[Mapping[str, str]] = None,
) -> Optional[ReferenceEntity]:
    """Справочная модель для поля внешнего ключа или None."""
    tables = reference_tables(entities, aliases)
    lowered = name.lower()
    alias = tables.aliases.get(lowered)
    if alias is not None:
        entity = tables.entities.get(alias)
        if entity is None:
            raise FieldTypeError(f"Field '{name}' is aliased to unknown reference '{alias}'.")
        return entity
    for key, entity in tables.entities.items():
        if lowered.endswith(f"_id_{key}"):
            return entity
    return None


def _foreign_key(d: FieldDescriptor, refs: ReferenceTables) -> Optional[WidgetSpec]:
    entity = reference_for(d.name, refs.entities, refs.aliases)
    if entity is None:
        return None
    return WidgetSpec(kind=WidgetKind.FOREIGN_KEY_SELECT, reference=entity.name)


def _boolean(d: FieldDescriptor, refs: ReferenceTables) -> Optional[WidgetSpec]:
    name = d.name.lower()
    if d.is_boolean or any(k in name for k in BOOLEAN_NAME_KEYWORDS):
        return WidgetSpec(kind=WidgetKind.BOOLEAN_TOGGLE)
    return None


def _numeric(d: FieldDescriptor, refs: ReferenceTables) -> Optional[WidgetSpec]:
    name = d.name.lower()
    type_key = d.type_key
    if "integer" in type_key or "decimal" in type_key or any(k in name for k in NUMERIC_NAME_KEYWORDS):
        return WidgetSpec(kind=WidgetKind.NUMERIC, step=DECIMAL_STEP if d.is_decimal else INTEGER_STEP)
    return None


def _multiline(d: FieldDescriptor, refs: ReferenceTables) -> Optional[WidgetSpec]:
    name = d.name.lower()
    if (d.max_length or 0) > MULTILINE_MIN_LENGTH and any(k in name for k in FREE_TEXT_NAME_KEYWORDS):
        return WidgetSpec(kind=WidgetKind.MULTILINE_TEXT)
    return None


class WidgetRule(NamedTuple):
    name: str
    match: Callable[[FieldDescriptor, ReferenceTables], Optional[WidgetSpec]]


# Порядок важен: выигрывает первое совпадение.
# atr_id_rol с типом BOOLEAN все равно будет select'ом.
WIDGET_RULES: Tuple[WidgetRule, ...] = (
    WidgetRule("foreign_key", _foreign_key),
    WidgetRule("boolean", _boolean),
    WidgetRule("numeric", _numeric),
    WidgetRule("multiline", _multiline),
)

TEXT_WIDGET = WidgetSpec(kind=WidgetKind.TEXT)


def classify(
    descriptor: FieldDescriptor,
    rules: Tuple[WidgetRule, ...] = WIDGET_RULES,
    entities: Optional[Mapping[str, ReferenceEntity]] = None,
    aliases: Optional[Mapping[str, str]] = None,
) -> WidgetSpec:
    refs = reference_tables(entities, aliases)
    for rule in rules:
        spec = rule.match(descriptor, refs)
        if spec is not None:
            logger.debug(f"Field '{descriptor.name}': matched widget rule '{rule.name}' -> {spec.kind.value}")
            return spec
    return TEXT_WIDGET


def field_label(descriptor: FieldDescriptor) -> str:
    if descriptor.label:
        return descriptor.label
    words = [w for w in _LABEL_SPLIT_RE.split(descriptor.name) if w]
    return " ".join(w[:1].upper() + w[1:] for w in words)


class FieldRenderContext(BaseModel):
    name: str
    value: Any = None
    label: str
    widget: WidgetSpec
    placeholder: Optional[str] = None
    helper: Optional[str] = None
    is_required: bool = False
    input_attrs: Dict[str, Any] = Field(default_factory=dict)
    options: Optional[List[OptionItem]] = None
    errors: Optional[List[str]] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)


def build_field_context(
    descriptor: FieldDescriptor,
    model: str,
    value: Any = None,
    options: Optional[List[OptionItem]] = None,
    errors: Optional[List[str]] = None,
    hints: Mapping[Tuple[str, str], Mapping[str, str]] = MODEL_FIELD_HINTS,
    widget: Optional[WidgetSpec] = None,
) -> FieldRenderContext:
    """
    Все, что нужно UI для отрисовки одного поля:
    вид элемента, подпись, подсказки, атрибуты input'а и опции select'а.
    """
    if widget is None:
        widget = classify(descriptor)
    hint = hints.get((str(model).lower(), descriptor.name), {})

    input_attrs: Dict[str, Any] = {}
    if widget.kind == WidgetKind.NUMERIC:
        input_attrs["step"] = widget.step
    elif widget.kind in (WidgetKind.TEXT, WidgetKind.MULTILINE_TEXT) and descriptor.max_length:
        input_attrs["maxLength"] = descriptor.max_length

    placeholder = hint.get("placeholder")
    if placeholder is None and widget.kind == WidgetKind.FOREIGN_KEY_SELECT:
        placeholder = SELECT_EMPTY_LABEL

    helper = hint.get("helper")
    if helper:
        helper = helper.format(max_length=descriptor.max_length or DEFAULT_HINT_MAX_LENGTH)

    return FieldRenderContext(
        name=descriptor.name,
        value=value,
        label=field_label(descriptor),
        widget=widget,
        placeholder=placeholder,
        helper=helper,
        is_required=descriptor.allow_null is False,
        input_attrs=input_attrs,
        options=list(options or []) if widget.kind == WidgetKind.FOREIGN_KEY_SELECT else None,
        errors=errors,
    )
