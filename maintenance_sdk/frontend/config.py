# maintenance_sdk/frontend/config.py
from typing import Dict, Tuple

from maintenance_sdk.schemas.options import ReferenceEntity

# Справочные модели для select'ов внешних ключей.
# Ключ - суффикс имени поля после "_id_" (atr_id_rol -> "rol").
REFERENCE_ENTITIES: Dict[str, ReferenceEntity] = {
    "rol": ReferenceEntity(
        name="Rol",
        value_keys=("atr_id_rol", "id"),
        label_keys=("atr_rol", "name"),
    ),
    "objeto": ReferenceEntity(
        name="Objeto",
        value_keys=("atr_id_objetos", "id"),
        label_keys=("atr_objeto", "name"),
    ),
}

# Явные псевдонимы: имя поля -> ключ в REFERENCE_ENTITIES
FOREIGN_KEY_ALIASES: Dict[str, str] = {
    "atr_id_rol": "rol",
    "atr_id_objeto": "objeto",
}

# Ключевые слова в имени поля
BOOLEAN_NAME_KEYWORDS: Tuple[str, ...] = ("activo",)
NUMERIC_NAME_KEYWORDS: Tuple[str, ...] = ("precio", "stock")
FREE_TEXT_NAME_KEYWORDS: Tuple[str, ...] = ("valor", "descripcion")

MULTILINE_MIN_LENGTH = 60
DECIMAL_STEP = "0.01"
INTEGER_STEP = "1"

# Подсказки для конкретных полей конкретных моделей: (модель, поле) -> placeholder/helper.
# В helper можно использовать {max_length}.
MODEL_FIELD_HINTS: Dict[Tuple[str, str], Dict[str, str]] = {
    ("parametro", "atr_parametro"): {
        "placeholder": "EJ: ADMIN_NUM_REGISTROS",
        "helper": "Nombre identificador en mayúsculas, sin espacios; usar _ para separar palabras.",
    },
    ("parametro", "atr_valor"): {
        "placeholder": "Valor del parámetro",
        "helper": "Valor asociado al parámetro. Máx. {max_length} caracteres.",
    },
}
DEFAULT_HINT_MAX_LENGTH = 100

# Таблица списка
CELL_TRUNCATE_THRESHOLD = 40
PAGE_SIZE_CHOICES: Tuple[int, ...] = (5, 10, 20, 50, 100)
SELECT_EMPTY_LABEL = "--Seleccione--"
