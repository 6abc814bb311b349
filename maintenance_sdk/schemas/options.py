# maintenance_sdk/schemas/options.py
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class OptionItem(BaseModel):
    id: Any
    label: str

    model_config = ConfigDict(frozen=True)


class ReferenceEntity(BaseModel):
    """
    Справочная модель, из которой наполняются select'ы внешних ключей.
    value_keys/label_keys перебираются по порядку, берется первое непустое значение.
    """

    name: str
    value_keys: Tuple[str, ...] = ("id",)
    label_keys: Tuple[str, ...] = ("name",)

    model_config = ConfigDict(frozen=True)

    def to_option(self, record: Dict[str, Any]) -> Optional[OptionItem]:
        value = next((record.get(k) for k in self.value_keys if record.get(k) not in (None, "")), None)
        if value is None:
            return None
        label = next((record.get(k) for k in self.label_keys if record.get(k)), None)
        return OptionItem(id=value, label=str(label) if label is not None else str(value))
