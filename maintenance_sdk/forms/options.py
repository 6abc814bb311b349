# maintenance_sdk/forms/options.py
import asyncio
import logging
from typing import Dict, Iterable, List, Mapping, Optional

from maintenance_sdk.clients.base import MaintenanceClient
from maintenance_sdk.exceptions import ServiceCommunicationError
from maintenance_sdk.frontend.field import reference_tables
from maintenance_sdk.schemas.options import OptionItem, ReferenceEntity

logger = logging.getLogger("maintenance_sdk.forms.options")


class OptionsResolver:
    """
    Загружает и кэширует справочники для select'ов внешних ключей.

    Кэш принадлежит одному экземпляру и живет до close(). Сброс - явный:
    refresh()/invalidate(); сессия формы сбрасывает справочник после записи в него.
    После close() завершившиеся запросы состояние не меняют.
    """

    def __init__(
        self,
        client: MaintenanceClient,
        page_size: int = 1000,
        entities: Optional[Mapping[str, ReferenceEntity]] = None,
        aliases: Optional[Mapping[str, str]] = None,
    ):
        self.client = client
        self.page_size = page_size
        self._tables = reference_tables(entities, aliases)
        # Доступ по имени модели в нижнем регистре
        self._entities: Dict[str, ReferenceEntity] = {e.name.lower(): e for e in self._tables.entities.values()}
        self._cache: Dict[str, List[OptionItem]] = {}
        self._alive = True

    @property
    def entities(self) -> Mapping[str, ReferenceEntity]:
        return self._tables.entities

    @property
    def aliases(self) -> Mapping[str, str]:
        return self._tables.aliases

    @property
    def is_alive(self) -> bool:
        return self._alive

    def cached(self, reference_name: str) -> Optional[List[OptionItem]]:
        items = self._cache.get(reference_name)
        return list(items) if items is not None else None

    def _entity_for(self, reference_name: str) -> ReferenceEntity:
        return self._entities.get(reference_name.lower()) or ReferenceEntity(name=reference_name)

    async def _load(self, reference_name: str) -> Optional[List[OptionItem]]:
        try:
            result = await self.client.list(reference_name, page=1, limit=self.page_size)
        except ServiceCommunicationError as e:
            logger.warning(f"Failed to load options for '{reference_name}': {e}")
            return None
        entity = self._entity_for(reference_name)
        options: List[OptionItem] = []
        for record in result.records:
            option = entity.to_option(record)
            if option is not None:
                options.append(option)
        logger.debug(f"Loaded {len(options)} options for '{reference_name}'.")
        return options

    async def resolve_options(self, reference_names: Iterable[str]) -> Dict[str, List[OptionItem]]:
        names = list(dict.fromkeys(reference_names))
        if not self._alive:
            logger.debug("OptionsResolver is closed, ignoring resolve request.")
            return {}
        missing = [name for name in names if name not in self._cache]
        loaded = await asyncio.gather(*(self._load(name) for name in missing))
        if not self._alive:
            logger.debug(f"OptionsResolver closed while loading {missing}, discarding results.")
            return {}
        for name, items in zip(missing, loaded):
            # Неудачная загрузка не кэшируется: следующий resolve попробует снова
            if items is not None:
                self._cache[name] = items
        return {name: list(self._cache.get(name, [])) for name in names}

    def invalidate(self, reference_name: Optional[str] = None) -> None:
        if reference_name is None:
            self._cache.clear()
            return
        for cached_name in list(self._cache):
            if cached_name.lower() == reference_name.lower():
                del self._cache[cached_name]

    async def refresh(self, reference_name: Optional[str] = None) -> Dict[str, List[OptionItem]]:
        names = [reference_name] if reference_name else list(self._cache)
        self.invalidate(reference_name)
        return await self.resolve_options(names)

    def close(self) -> None:
        self._alive = False
        self._cache.clear()
