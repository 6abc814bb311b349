# maintenance_sdk/frontend/table.py
from typing import Any, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from maintenance_sdk.schemas.descriptor import FieldDescriptor

from .config import CELL_TRUNCATE_THRESHOLD, PAGE_SIZE_CHOICES
from .field import field_label


class TableColumn(BaseModel):
    key: str
    label: str


def build_columns(
    descriptors: Sequence[FieldDescriptor],
    rows: Sequence[Mapping[str, Any]] = (),
) -> List[TableColumn]:
    """
    Колонки таблицы: не-ключевые поля из дескрипторов.
    Без дескрипторов колонки берутся из ключей первой строки как есть.
    """
    if descriptors:
        return [
            TableColumn(key=d.name, label=field_label(d))
            for d in descriptors
            if not d.primary_key
        ]
    if rows:
        return [TableColumn(key=str(k), label=str(k)) for k in rows[0].keys()]
    return []


def format_cell(value: Any, threshold: int = CELL_TRUNCATE_THRESHOLD) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value)
    if len(text) > threshold:
        return text[:threshold] + "..."
    return text


def page_size_choices(default: Optional[int] = None) -> List[int]:
    choices = set(PAGE_SIZE_CHOICES)
    if default:
        choices.add(int(default))
    return sorted(choices)
