# maintenance_sdk/descriptors/__init__.py
from .fallback import STATIC_FALLBACK_META, fallback_model_names
from .store import DescriptorStore, coerce_descriptors

__all__ = [
    "STATIC_FALLBACK_META",
    "fallback_model_names",
    "DescriptorStore",
    "coerce_descriptors",
]
