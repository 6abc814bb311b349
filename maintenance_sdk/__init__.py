# maintenance_sdk/__init__.py
from maintenance_sdk.clients.base import MaintenanceClient
from maintenance_sdk.config import MaintenanceSettings, get_settings
from maintenance_sdk.descriptors.store import DescriptorStore
from maintenance_sdk.exceptions import ConfigurationError, MaintenanceSDKError, ServiceCommunicationError
from maintenance_sdk.forms.session import MaintenanceFormSession
from maintenance_sdk.logging_config import setup_sdk_logging

__all__ = [
    "MaintenanceClient",
    "MaintenanceSettings",
    "get_settings",
    "DescriptorStore",
    "ConfigurationError",
    "MaintenanceSDKError",
    "ServiceCommunicationError",
    "MaintenanceFormSession",
    "setup_sdk_logging",
]
