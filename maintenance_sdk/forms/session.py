# maintenance_sdk/forms/session.py
import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from maintenance_sdk.clients.base import MaintenanceClient, is_permiso_model
from maintenance_sdk.descriptors.store import DescriptorInput, DescriptorStore
from maintenance_sdk.exceptions import ServiceCommunicationError
from maintenance_sdk.frontend.field import FieldRenderContext, build_field_context, classify
from maintenance_sdk.frontend.types import FormMode, WidgetKind, WidgetSpec
from maintenance_sdk.schemas.descriptor import FieldDescriptor, ModelMeta, Record
from maintenance_sdk.schemas.pagination import CrudResult

from .errors import SubmissionErrors, map_submission_errors
from .identity import record_identity
from .options import OptionsResolver
from .rules import RuleSet, build_rules
from .state import build_initial_values

logger = logging.getLogger("maintenance_sdk.forms.session")


class FormContract(BaseModel):
    """Все, что нужно UI для отрисовки формы создания/редактирования."""

    model: str
    mode: FormMode
    fields: List[FieldRenderContext] = Field(default_factory=list)
    initial_values: Record = Field(default_factory=dict)
    record_id: Any = None


class SubmissionOutcome(BaseModel):
    success: bool
    mode: FormMode
    result: Optional[CrudResult] = None
    errors: SubmissionErrors = Field(default_factory=SubmissionErrors)


class MaintenanceFormSession:
    """
    Одна сессия редактирования: модель, ее метаданные, редактируемая запись (или None),
    правила валидации и справочники.

    RuleSet строится один раз на тройку (дескрипторы, модель, запись). Для другой
    записи создается новая сессия через with_editing().
    """

    def __init__(
        self,
        model: str,
        meta: ModelMeta,
        client: MaintenanceClient,
        editing: Optional[Mapping[str, Any]] = None,
        resolver: Optional[OptionsResolver] = None,
        options_page_size: int = 1000,
    ):
        self.model = model
        self.meta = meta
        self.client = client
        self.editing: Optional[Record] = dict(editing) if editing else None
        self._owns_resolver = resolver is None
        self.resolver = resolver or OptionsResolver(client, page_size=options_page_size)
        self.rules: RuleSet = build_rules(
            meta.attributes,
            model,
            self.editing,
            client=client,
            key_fields=meta.key_fields,
        )

    @classmethod
    async def open(
        cls,
        model: str,
        client: MaintenanceClient,
        editing: Optional[Mapping[str, Any]] = None,
        descriptors: Optional[DescriptorInput] = None,
        store: Optional[DescriptorStore] = None,
        resolver: Optional[OptionsResolver] = None,
        options_page_size: int = 1000,
    ) -> "MaintenanceFormSession":
        store = store or DescriptorStore(client=client)
        meta = await store.load(model, explicit=descriptors)
        return cls(
            model=model,
            meta=meta,
            client=client,
            editing=editing,
            resolver=resolver,
            options_page_size=options_page_size,
        )

    @property
    def descriptors(self) -> List[FieldDescriptor]:
        return self.meta.attributes

    @property
    def record_id(self) -> Any:
        return record_identity(self.editing, self.meta)

    @property
    def mode(self) -> FormMode:
        return FormMode.EDIT if self.record_id is not None else FormMode.CREATE

    def with_editing(self, editing: Optional[Mapping[str, Any]]) -> "MaintenanceFormSession":
        """Новая сессия для другой записи; справочники остаются общими."""
        session = MaintenanceFormSession(
            model=self.model,
            meta=self.meta,
            client=self.client,
            editing=editing,
            resolver=self.resolver,
        )
        session._owns_resolver = False
        return session

    def initial_values(self) -> Record:
        return build_initial_values(self.descriptors, self.editing)

    def form_fields(self) -> List[str]:
        """Имена полей, которые форма показывает пользователю."""
        return [d.name for d in self.meta.editable_fields]

    def _classify(self, descriptor: FieldDescriptor) -> WidgetSpec:
        return classify(descriptor, entities=self.resolver.entities, aliases=self.resolver.aliases)

    def reference_names(self) -> List[str]:
        names: List[str] = []
        for descriptor in self.meta.editable_fields:
            widget = self._classify(descriptor)
            if widget.kind == WidgetKind.FOREIGN_KEY_SELECT and widget.reference not in names:
                names.append(widget.reference)
        return names

    async def form_contract(self, errors: Optional[Mapping[str, str]] = None) -> FormContract:
        values = self.initial_values()
        options = await self.resolver.resolve_options(self.reference_names())
        fields = []
        for descriptor in self.meta.editable_fields:
            widget = self._classify(descriptor)
            field_errors = [errors[descriptor.name]] if errors and errors.get(descriptor.name) else None
            fields.append(
                build_field_context(
                    descriptor,
                    self.model,
                    value=values.get(descriptor.name),
                    options=options.get(widget.reference) if widget.reference else None,
                    errors=field_errors,
                    widget=widget,
                )
            )
        return FormContract(
            model=self.model,
            mode=self.mode,
            fields=fields,
            initial_values=values,
            record_id=self.record_id,
        )

    async def validate(self, values: Mapping[str, Any]) -> Dict[str, str]:
        return await self.rules.validate(values)

    def _payload(self, values: Mapping[str, Any]) -> Record:
        payload = dict(values)
        # upsert прав определяет запись по составному ключу, которого нет среди полей формы
        if is_permiso_model(self.model) and self.editing:
            for key in self.meta.key_fields:
                if key not in payload and key in self.editing:
                    payload[key] = self.editing[key]
        return payload

    def _invalidate_reference_options(self) -> None:
        model_key = str(self.model).lower()
        for entity in self.resolver.entities.values():
            if entity.name.lower() == model_key:
                logger.debug(f"Write to reference model '{self.model}', invalidating cached options.")
                self.resolver.invalidate(entity.name)

    async def submit(self, values: Mapping[str, Any]) -> SubmissionOutcome:
        """
        Проверяет и отправляет форму. Обновление, если у редактируемой записи есть
        идентификатор, иначе создание. 422 раскладывается по полям, остальные
        ошибки backend'а поднимаются как ServiceCommunicationError.
        """
        mode = self.mode
        client_errors = await self.validate(values)
        if client_errors:
            logger.info(f"Submission for '{self.model}' blocked by {len(client_errors)} validation error(s).")
            return SubmissionOutcome(
                success=False,
                mode=mode,
                errors=SubmissionErrors(field_errors=client_errors),
            )

        payload = self._payload(values)
        try:
            if mode == FormMode.EDIT:
                result = await self.client.update(self.model, self.record_id, payload)
            else:
                result = await self.client.create(self.model, payload)
        except ServiceCommunicationError as e:
            if not e.is_validation_error:
                raise
            logger.info(f"Backend rejected '{self.model}' submission with validation errors.")
            errors = map_submission_errors(e, fields=self.form_fields())
            return SubmissionOutcome(success=False, mode=mode, errors=errors)

        self._invalidate_reference_options()
        logger.info(f"Submission for '{self.model}' succeeded ({mode.value}).")
        return SubmissionOutcome(success=True, mode=mode, result=result)

    def close(self) -> None:
        if self._owns_resolver:
            self.resolver.close()
