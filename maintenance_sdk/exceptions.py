# maintenance_sdk/exceptions.py
from typing import Any, Optional

from pydantic import BaseModel


class MaintenanceSDKError(Exception):
    """
    Базовый класс для всех исключений maintenance_sdk.
    Позволяет ловить все ошибки SDK одним блоком except MaintenanceSDKError.
    """

    pass


class ConfigurationError(MaintenanceSDKError):
    """
    Ошибка конфигурации SDK: не задан базовый URL, неизвестная модель и т.п.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"Configuration Error: {self.message}"


class NormalizedError(BaseModel):
    """Единая форма ошибки, которую видит вызывающий код."""

    status: Optional[int] = None
    message: str
    data: Optional[Any] = None
    errors: Optional[Any] = None


class ServiceCommunicationError(MaintenanceSDKError):
    """
    Ошибка связи с backend'ом обслуживания.
    Включает URL, статус-код (если есть), тело ответа и блок errors (для 422).
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        data: Any = None,
        errors: Any = None,
    ):
        """
        :param message: Основное сообщение об ошибке.
        :param status_code: HTTP статус-код ответа (например, 404, 422, 500).
        :param url: URL, при обращении к которому произошла ошибка.
        :param data: Разобранное тело ответа, если оно было JSON.
        :param errors: Содержимое `errors`/`error` из тела ответа.
        """
        self.message = message
        self.status_code = status_code
        self.url = url
        self.data = data
        self.errors = errors
        full_message = "Service Communication Error"
        if self.url:
            full_message += f" accessing {self.url}"
        if self.status_code:
            full_message += f" (Status Code: {self.status_code})"
        full_message += f": {self.message}"
        super().__init__(full_message)

    @property
    def is_validation_error(self) -> bool:
        return self.status_code == 422

    @property
    def normalized(self) -> NormalizedError:
        return NormalizedError(
            status=self.status_code,
            message=self.message,
            data=self.data,
            errors=self.errors,
        )
