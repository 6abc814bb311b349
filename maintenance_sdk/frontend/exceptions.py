# maintenance_sdk/frontend/exceptions.py
from maintenance_sdk.exceptions import MaintenanceSDKError

class FrontendError(MaintenanceSDKError):
    """Базовый класс для ошибок слоя представления SDK."""
    pass

class FieldTypeError(FrontendError):
    """Ошибка определения вида элемента для поля."""
    pass
