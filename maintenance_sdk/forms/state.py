# maintenance_sdk/forms/state.py
from typing import Any, Mapping, Optional, Sequence

from maintenance_sdk.schemas.descriptor import FieldDescriptor, Record


def empty_value_for(descriptor: FieldDescriptor) -> Any:
    """
    Пустое значение по типу поля.
    Числовые поля тоже стартуют с '' - приведение к числу делает UI при отправке.
    """
    if descriptor.is_boolean:
        return False
    return ""


def build_initial_values(
    descriptors: Sequence[FieldDescriptor],
    existing: Optional[Mapping[str, Any]] = None,
) -> Record:
    """
    Начальные значения формы. Первичные ключи в набор не попадают.
    Значение из существующей записи берется как есть, без приведения типов.
    """
    values: Record = {}
    for descriptor in descriptors:
        if descriptor.primary_key:
            continue
        if existing is not None and descriptor.name in existing:
            values[descriptor.name] = existing[descriptor.name]
        else:
            values[descriptor.name] = empty_value_for(descriptor)
    return values
