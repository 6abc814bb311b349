# maintenance_sdk/schemas/pagination.py
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PaginationMeta(BaseModel):
    """
    Нормализованная мета пагинации.
    total_pages всегда вычислима из total и limit, даже если backend ее не прислал.
    """

    total: int = Field(0, description="Общее количество записей.")
    total_pages: int = Field(0, alias="totalPages", description="Количество страниц.")
    page: Optional[int] = Field(None, description="Номер текущей страницы (с 1).")
    limit: Optional[int] = Field(None, description="Размер страницы.")

    model_config = ConfigDict(populate_by_name=True)


class CrudResult(BaseModel):
    """
    Результат любого вызова CRUD Gateway.
    Вызывающий код никогда не разбирает форму конверта сам.
    """

    data: Union[List[Dict[str, Any]], Dict[str, Any], None] = None
    meta: Optional[PaginationMeta] = None
    message: Optional[str] = None

    @property
    def records(self) -> List[Dict[str, Any]]:
        if isinstance(self.data, list):
            return self.data
        if isinstance(self.data, dict):
            return [self.data]
        return []
