# maintenance_sdk/descriptors/fallback.py
from typing import Any, Dict, List

from maintenance_sdk.schemas.descriptor import ModelMeta

# Статическое описание моделей на случай, когда /meta недоступен.
# Ключи - имена моделей в нижнем регистре.
_RAW_FALLBACK_META: Dict[str, Dict[str, Any]] = {
    "parametro": {
        "primaryKeyAttributes": ["atr_id_parametro"],
        "attributes": [
            {"name": "atr_id_parametro", "type": "INTEGER", "primaryKey": True, "allowNull": False},
            {"name": "atr_parametro", "type": "STRING", "allowNull": False, "maxLength": 50, "label": "Parámetro"},
            {"name": "atr_valor", "type": "STRING", "allowNull": False, "maxLength": 100, "label": "Valor"},
        ],
    },
    "rol": {
        "primaryKeyAttributes": ["atr_id_rol"],
        "attributes": [
            {"name": "atr_id_rol", "type": "INTEGER", "primaryKey": True, "allowNull": False},
            {"name": "atr_rol", "type": "STRING", "allowNull": False, "maxLength": 30, "unique": True, "label": "Rol"},
            {"name": "atr_descripcion", "type": "STRING", "maxLength": 100, "label": "Descripción"},
        ],
    },
    "objeto": {
        "primaryKeyAttributes": ["atr_id_objetos"],
        "attributes": [
            {"name": "atr_id_objetos", "type": "INTEGER", "primaryKey": True, "allowNull": False},
            {"name": "atr_objeto", "type": "STRING", "allowNull": False, "maxLength": 100, "unique": True, "label": "Objeto"},
            {"name": "atr_descripcion", "type": "STRING", "maxLength": 100, "label": "Descripción"},
            {"name": "atr_tipo_objeto", "type": "STRING", "maxLength": 15, "label": "Tipo de objeto"},
        ],
    },
    "permiso": {
        "primaryKeyAttributes": ["atr_id_rol", "atr_id_objeto"],
        "attributes": [
            {"name": "atr_id_rol", "type": "INTEGER", "primaryKey": True, "allowNull": False},
            {"name": "atr_id_objeto", "type": "INTEGER", "primaryKey": True, "allowNull": False},
            {"name": "atr_permiso_insercion", "type": "STRING", "maxLength": 50, "label": "Insertar"},
            {"name": "atr_permiso_eliminacion", "type": "STRING", "maxLength": 50, "label": "Eliminar"},
            {"name": "atr_permiso_actualizacion", "type": "STRING", "maxLength": 50, "label": "Actualizar"},
            {"name": "atr_permiso_consultar", "type": "STRING", "maxLength": 50, "label": "Consultar"},
        ],
    },
    "producto": {
        "primaryKeyAttributes": ["atr_id_producto"],
        "attributes": [
            {"name": "atr_id_producto", "type": "INTEGER", "primaryKey": True, "allowNull": False},
            {"name": "atr_nombre_producto", "type": "STRING", "allowNull": False, "maxLength": 100, "unique": True, "label": "Nombre"},
            {"name": "atr_descripcion", "type": "TEXT", "label": "Descripción"},
            {"name": "atr_codigo_barra", "type": "STRING", "maxLength": 50, "unique": True, "label": "Código de barra"},
            {"name": "atr_categoria", "type": "STRING", "maxLength": 50, "label": "Categoría"},
            {"name": "atr_precio_venta_unitario", "type": "DECIMAL", "allowNull": False, "label": "Precio de venta"},
            {"name": "atr_stock_actual", "type": "INTEGER", "allowNull": False, "label": "Stock actual"},
        ],
    },
}

STATIC_FALLBACK_META: Dict[str, ModelMeta] = {
    name: ModelMeta.model_validate(raw) for name, raw in _RAW_FALLBACK_META.items()
}


def fallback_model_names() -> List[str]:
    return sorted(STATIC_FALLBACK_META.keys())
