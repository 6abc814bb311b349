# maintenance_sdk/frontend/__init__.py
from .field import FieldRenderContext, build_field_context, classify, field_label
from .table import TableColumn, build_columns, format_cell, page_size_choices
from .types import FormMode, WidgetKind, WidgetSpec

__all__ = [
    "FieldRenderContext",
    "build_field_context",
    "classify",
    "field_label",
    "TableColumn",
    "build_columns",
    "format_cell",
    "page_size_choices",
    "FormMode",
    "WidgetKind",
    "WidgetSpec",
]
