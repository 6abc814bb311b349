# maintenance_sdk/tests/forms/test_form_session.py
from unittest import mock

import pytest

from maintenance_sdk.clients.base import MaintenanceClient
from maintenance_sdk.descriptors import STATIC_FALLBACK_META
from maintenance_sdk.exceptions import ServiceCommunicationError
from maintenance_sdk.forms.options import OptionsResolver
from maintenance_sdk.forms.session import MaintenanceFormSession
from maintenance_sdk.frontend.types import FormMode, WidgetKind
from maintenance_sdk.schemas.descriptor import ModelMeta
from maintenance_sdk.schemas.options import OptionItem, ReferenceEntity
from maintenance_sdk.schemas.pagination import CrudResult

pytestmark = pytest.mark.asyncio


@pytest.fixture
def client_mock() -> mock.AsyncMock:
    client = mock.AsyncMock(spec=MaintenanceClient)
    client.check_unique.return_value = True
    client.list.return_value = CrudResult(data=[{"atr_id_rol": 1, "atr_rol": "ADMIN"}])
    client.create.return_value = CrudResult(data={"atr_id_usuario": 10})
    client.update.return_value = CrudResult(data={"atr_id_usuario": 10})
    return client


async def test_form_contract_for_create(usuario_meta, client_mock):
    session = MaintenanceFormSession("Usuario", usuario_meta, client_mock)
    contract = await session.form_contract()

    assert contract.mode == FormMode.CREATE
    assert contract.record_id is None
    assert contract.initial_values == {"atr_usuario": "", "atr_email": "", "atr_id_rol": "", "atr_activo": False}
    by_name = {f.name: f for f in contract.fields}
    assert "atr_id_usuario" not in by_name
    assert by_name["atr_id_rol"].widget.kind == WidgetKind.FOREIGN_KEY_SELECT
    assert [o.label for o in by_name["atr_id_rol"].options] == ["ADMIN"]
    assert by_name["atr_activo"].widget.kind == WidgetKind.BOOLEAN_TOGGLE
    assert by_name["atr_usuario"].is_required
    client_mock.list.assert_awaited_once_with("Rol", page=1, limit=1000)


async def test_open_loads_meta_through_store(client_mock):
    client_mock.get_meta.side_effect = ServiceCommunicationError("down")
    session = await MaintenanceFormSession.open("parametro", client_mock)
    assert [d.name for d in session.meta.editable_fields] == ["atr_parametro", "atr_valor"]


async def test_submit_creates_when_no_identity(usuario_meta, client_mock):
    session = MaintenanceFormSession("Usuario", usuario_meta, client_mock)
    values = {"atr_usuario": "ana", "atr_email": "ana@clinica.hn", "atr_id_rol": 1, "atr_activo": True}

    outcome = await session.submit(values)

    assert outcome.success
    assert outcome.mode == FormMode.CREATE
    client_mock.create.assert_awaited_once_with("Usuario", values)
    client_mock.update.assert_not_called()


async def test_submit_updates_with_record_identity(usuario_meta, client_mock):
    editing = {"atr_id_usuario": 10, "atr_usuario": "ana", "atr_email": "ana@clinica.hn", "atr_id_rol": 1}
    session = MaintenanceFormSession("Usuario", usuario_meta, client_mock, editing=editing)
    values = session.initial_values()

    outcome = await session.submit(values)

    assert outcome.success
    assert outcome.mode == FormMode.EDIT
    client_mock.update.assert_awaited_once_with("Usuario", 10, values)
    client_mock.check_unique.assert_awaited_once_with("Usuario", "atr_usuario", "ana", 10)


async def test_submit_blocked_by_client_validation(usuario_meta, client_mock):
    session = MaintenanceFormSession("Usuario", usuario_meta, client_mock)

    outcome = await session.submit({"atr_usuario": "", "atr_email": "no-es-email", "atr_id_rol": 1})

    assert not outcome.success
    assert outcome.errors.field_errors == {"atr_usuario": "Requerido", "atr_email": "Formato de email inválido"}
    client_mock.create.assert_not_called()


async def test_submit_maps_server_validation_errors(usuario_meta, client_mock):
    client_mock.create.side_effect = ServiceCommunicationError(
        "Datos inválidos",
        status_code=422,
        data={"message": "Datos inválidos", "errors": {"atr_usuario": ["Ya registrado"]}},
        errors={"atr_usuario": ["Ya registrado"]},
    )
    session = MaintenanceFormSession("Usuario", usuario_meta, client_mock)

    outcome = await session.submit({"atr_usuario": "ana", "atr_email": "ana@clinica.hn", "atr_id_rol": 1})

    assert not outcome.success
    assert outcome.errors.field_errors == {"atr_usuario": "Ya registrado"}
    assert outcome.errors.general == "Datos inválidos"


async def test_submit_propagates_other_errors(usuario_meta, client_mock):
    client_mock.create.side_effect = ServiceCommunicationError("Forbidden", status_code=403)
    session = MaintenanceFormSession("Usuario", usuario_meta, client_mock)

    with pytest.raises(ServiceCommunicationError):
        await session.submit({"atr_usuario": "ana", "atr_email": "ana@clinica.hn", "atr_id_rol": 1})


async def test_write_to_reference_model_invalidates_options(rol_meta, client_mock):
    resolver = OptionsResolver(client_mock)
    await resolver.resolve_options(["Rol"])
    session = MaintenanceFormSession("rol", rol_meta, client_mock, resolver=resolver)

    outcome = await session.submit({"atr_rol": "CAJERO", "atr_descripcion": ""})

    assert outcome.success
    assert resolver.cached("Rol") is None
    session.close()
    assert resolver.is_alive


async def test_permiso_submit_keeps_composite_key(client_mock):
    meta = STATIC_FALLBACK_META["permiso"]
    editing = {"atr_id_rol": 5, "atr_id_objeto": 2, "atr_permiso_consultar": "1"}
    session = MaintenanceFormSession("Permiso", meta, client_mock, editing=editing)
    values = session.initial_values()

    await session.submit(values)

    model, item_id, payload = client_mock.update.await_args.args
    assert item_id == [5, 2]
    assert payload["atr_id_rol"] == 5
    assert payload["atr_id_objeto"] == 2


async def test_with_editing_builds_new_rules(rol_meta, client_mock):
    session = MaintenanceFormSession("rol", rol_meta, client_mock)
    edit_session = session.with_editing({"atr_id_rol": 3, "atr_rol": "ADMIN"})

    assert session.rules.exclude_id is None
    assert edit_session.rules.exclude_id == 3
    assert edit_session.resolver is session.resolver
    edit_session.close()
    assert session.resolver.is_alive
    session.close()
    assert not session.resolver.is_alive


async def test_server_errors_outside_form_go_to_general_notice(rol_meta, client_mock):
    client_mock.create.side_effect = ServiceCommunicationError(
        "Validación fallida",
        status_code=422,
        data={"message": "Validación fallida"},
        errors=[
            {"field": "atr_id_rol", "message": "Valor duplicado"},
            {"field": "atr_rol", "message": "Muy corto"},
            {"message": "Registro bloqueado"},
        ],
    )
    session = MaintenanceFormSession("rol", rol_meta, client_mock)

    outcome = await session.submit({"atr_rol": "CAJERO", "atr_descripcion": ""})

    assert not outcome.success
    assert outcome.errors.field_errors == {"atr_rol": "Muy corto"}
    assert "atr_id_rol: Valor duplicado" in outcome.errors.general
    assert "Registro bloqueado" in outcome.errors.general


async def test_resolver_reference_tables_drive_classification(client_mock):
    meta = ModelMeta.model_validate(
        {
            "primaryKeyAttributes": ["atr_id_medico"],
            "attributes": [
                {"name": "atr_id_medico", "type": "INTEGER", "primaryKey": True},
                {"name": "atr_id_especialidad", "type": "INTEGER", "allowNull": False},
            ],
        }
    )
    entities = {
        "especialidad": ReferenceEntity(
            name="Especialidad", value_keys=("atr_id_especialidad",), label_keys=("atr_especialidad",)
        )
    }
    client_mock.list.return_value = CrudResult(data=[{"atr_id_especialidad": 4, "atr_especialidad": "Ortodoncia"}])
    resolver = OptionsResolver(client_mock, entities=entities)
    session = MaintenanceFormSession("Medico", meta, client_mock, resolver=resolver)

    contract = await session.form_contract()

    assert session.reference_names() == ["Especialidad"]
    field = contract.fields[0]
    assert field.widget.kind == WidgetKind.FOREIGN_KEY_SELECT
    assert field.options == [OptionItem(id=4, label="Ortodoncia")]
    client_mock.list.assert_awaited_once_with("Especialidad", page=1, limit=1000)
