# maintenance_sdk/frontend/types.py
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class WidgetKind(str, Enum):
    """
    Вид элемента ввода, которым отображается поле формы обслуживания.
    """
    FOREIGN_KEY_SELECT = "foreign_key_select"  # select по справочной модели
    BOOLEAN_TOGGLE = "boolean_toggle"          # переключатель да/нет
    NUMERIC = "numeric"                        # числовой input со step
    MULTILINE_TEXT = "multiline_text"          # textarea
    TEXT = "text"                              # обычный input


class FormMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class WidgetSpec(BaseModel):
    kind: WidgetKind
    reference: Optional[str] = None  # имя справочной модели, только для FOREIGN_KEY_SELECT
    step: Optional[str] = None       # только для NUMERIC

    model_config = ConfigDict(frozen=True)
