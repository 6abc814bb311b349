# maintenance_sdk/forms/identity.py
import json
from typing import Any, List, Mapping, Optional, Sequence, Union

from maintenance_sdk.schemas.descriptor import ModelMeta

# Типовые имена одиночных ключей, встречающиеся в моделях backend'а
ROW_ID_CANDIDATES = (
    "id",
    "atr_id_usuario",
    "atr_id_objetos",
    "atr_id_paciente",
    "atr_id_medico",
    "atr_id_productos",
    "atr_id_rol",
    "atr_id",
)


def record_identity(
    record: Optional[Mapping[str, Any]], meta: ModelMeta
) -> Union[str, int, List[Any], None]:
    """
    Идентификатор записи для CRUD-вызовов.
    Составной ключ собирается по явному упорядоченному списку ключей модели.
    """
    if not record:
        return None
    key_fields = meta.key_fields
    if len(key_fields) == 1:
        value = record.get(key_fields[0])
        return value if value not in (None, "") else record.get("id")
    if len(key_fields) > 1:
        parts = [record.get(k) for k in key_fields]
        if any(p in (None, "") for p in parts):
            return None
        return parts
    return record.get("id")


def row_id(record: Optional[Mapping[str, Any]], key_fields: Sequence[str] = ()) -> str:
    """Стабильный строковый id строки таблицы."""
    if not record:
        return ""
    if key_fields:
        parts = [str(record[k]) for k in key_fields if record.get(k) is not None]
        composite = "/".join(p for p in parts if p != "")
        if composite:
            return composite
    for candidate in ROW_ID_CANDIDATES:
        if record.get(candidate) is not None:
            return str(record[candidate])
    return json.dumps(record, sort_keys=True, default=str)
