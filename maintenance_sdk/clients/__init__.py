# maintenance_sdk/clients/__init__.py
from .base import (
    MaintenanceClient,
    ExportedFile,
    build_id_segment,
    normalize_permiso_payload,
    normalize_permiso_flag,
    is_permiso_model,
)
from .envelope import EnvelopeKind, detect_envelope, parse_envelope

__all__ = [
    "MaintenanceClient",
    "ExportedFile",
    "build_id_segment",
    "normalize_permiso_payload",
    "normalize_permiso_flag",
    "is_permiso_model",
    "EnvelopeKind",
    "detect_envelope",
    "parse_envelope",
]
