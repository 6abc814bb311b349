# maintenance_sdk/descriptors/store.py
import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from maintenance_sdk.clients.base import MaintenanceClient
from maintenance_sdk.exceptions import ServiceCommunicationError
from maintenance_sdk.schemas.descriptor import FieldDescriptor, ModelMeta

from .fallback import STATIC_FALLBACK_META

logger = logging.getLogger("maintenance_sdk.descriptors.store")

DescriptorInput = Sequence[Union[FieldDescriptor, Mapping[str, Any]]]


def coerce_descriptors(descriptors: Optional[DescriptorInput]) -> List[FieldDescriptor]:
    if not descriptors:
        return []
    return [
        d if isinstance(d, FieldDescriptor) else FieldDescriptor.model_validate(d)
        for d in descriptors
    ]


class DescriptorStore:
    """
    Источник метаданных модели.
    Порядок: явный список вызывающего кода -> /meta backend'а -> статическая таблица.
    Ошибка /meta не поднимается наружу, а только логируется.
    """

    def __init__(
        self,
        client: Optional[MaintenanceClient] = None,
        fallback: Optional[Mapping[str, ModelMeta]] = None,
    ):
        self.client = client
        self.fallback = fallback if fallback is not None else STATIC_FALLBACK_META

    def fallback_meta(self, model: str) -> ModelMeta:
        meta = self.fallback.get(str(model).lower())
        if meta is None:
            logger.debug(f"No static metadata for model '{model}'.")
            return ModelMeta()
        return meta

    def get_descriptors(
        self, model: str, explicit: Optional[DescriptorInput] = None
    ) -> List[FieldDescriptor]:
        if explicit:
            return coerce_descriptors(explicit)
        return list(self.fallback_meta(model).attributes)

    async def load(self, model: str, explicit: Optional[DescriptorInput] = None) -> ModelMeta:
        if explicit:
            return ModelMeta(attributes=coerce_descriptors(explicit))
        if self.client is not None:
            try:
                meta = await self.client.get_meta(model)
                if not meta.is_empty():
                    return meta
                logger.info(f"Remote metadata for '{model}' is empty, using static fallback.")
            except ServiceCommunicationError as e:
                logger.warning(f"Failed to fetch metadata for '{model}', using static fallback: {e}")
        return self.fallback_meta(model)
