# maintenance_sdk/tests/api/test_maintenance_router.py
from unittest import mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from maintenance_sdk.api.router import router as maintenance_router
from maintenance_sdk.clients.base import ExportedFile, MaintenanceClient
from maintenance_sdk.data_access.common import get_maintenance_client
from maintenance_sdk.exceptions import ServiceCommunicationError
from maintenance_sdk.schemas.auth_user import ModelPermissions
from maintenance_sdk.schemas.pagination import CrudResult, PaginationMeta

BASE = "/sdk/maintenance"


@pytest.fixture
def client_mock(usuario_meta) -> mock.AsyncMock:
    client = mock.AsyncMock(spec=MaintenanceClient)
    client.get_meta.return_value = usuario_meta
    client.check_unique.return_value = True
    client.get_permissions.return_value = ModelPermissions(create=True, read=True, update=True, delete=False)
    client.list.return_value = CrudResult(data=[{"atr_id_rol": 1, "atr_rol": "ADMIN"}])
    return client


@pytest.fixture
def test_client(client_mock) -> TestClient:
    app = FastAPI()
    app.include_router(maintenance_router)
    app.dependency_overrides[get_maintenance_client] = lambda: client_mock
    return TestClient(app)


def test_create_form_contract(test_client: TestClient):
    response = test_client.get(f"{BASE}/Usuario/form")

    assert response.status_code == 200
    body = response.json()
    assert body["mode"] == "create"
    assert [f["name"] for f in body["fields"]] == ["atr_usuario", "atr_email", "atr_id_rol", "atr_activo"]
    rol_field = next(f for f in body["fields"] if f["name"] == "atr_id_rol")
    assert rol_field["widget"]["kind"] == "foreign_key_select"
    assert rol_field["options"] == [{"id": 1, "label": "ADMIN"}]


def test_edit_form_fetches_record(test_client: TestClient, client_mock):
    client_mock.get_by_id.return_value = CrudResult(
        data={"atr_id_usuario": 10, "atr_usuario": "ana", "atr_email": "ana@clinica.hn", "atr_id_rol": 1, "atr_activo": True}
    )

    response = test_client.get(f"{BASE}/Usuario/form/10")

    assert response.status_code == 200
    body = response.json()
    assert body["mode"] == "edit"
    assert body["record_id"] == 10
    assert body["initial_values"]["atr_usuario"] == "ana"
    client_mock.get_by_id.assert_awaited_once_with("Usuario", "10")


def test_edit_form_not_found(test_client: TestClient, client_mock):
    client_mock.get_by_id.return_value = CrudResult(data=None)
    assert test_client.get(f"{BASE}/Usuario/form/99").status_code == 404


def test_validate_endpoint(test_client: TestClient):
    response = test_client.post(f"{BASE}/Usuario/validate", json={"values": {"atr_usuario": "", "atr_email": "x", "atr_id_rol": 1}})

    assert response.status_code == 200
    assert response.json() == {
        "valid": False,
        "errors": {"atr_usuario": "Requerido", "atr_email": "Formato de email inválido"},
    }


def test_submit_endpoint_creates(test_client: TestClient, client_mock):
    client_mock.create.return_value = CrudResult(data={"atr_id_usuario": 11})
    values = {"atr_usuario": "ana", "atr_email": "ana@clinica.hn", "atr_id_rol": 1, "atr_activo": True}

    response = test_client.post(f"{BASE}/Usuario/submit", json={"values": values})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["result"]["data"] == {"atr_id_usuario": 11}
    client_mock.create.assert_awaited_once_with("Usuario", values)


def test_submit_endpoint_maps_422(test_client: TestClient, client_mock):
    client_mock.create.side_effect = ServiceCommunicationError(
        "Datos inválidos", status_code=422, errors=[{"field": "atr_usuario", "message": "Ya existe"}]
    )
    values = {"atr_usuario": "ana", "atr_email": "ana@clinica.hn", "atr_id_rol": 1}

    response = test_client.post(f"{BASE}/Usuario/submit", json={"values": values})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["errors"]["field_errors"] == {"atr_usuario": "Ya existe"}
    assert body["errors"]["general"] == "Errores de validación"


def test_submit_endpoint_surfaces_backend_errors(test_client: TestClient, client_mock):
    client_mock.create.side_effect = ServiceCommunicationError("Prohibido", status_code=403)
    values = {"atr_usuario": "ana", "atr_email": "ana@clinica.hn", "atr_id_rol": 1}

    response = test_client.post(f"{BASE}/Usuario/submit", json={"values": values})

    assert response.status_code == 403
    assert response.json()["detail"]["message"] == "Prohibido"


def test_table_page(test_client: TestClient, client_mock):
    long_name = "n" * 45
    client_mock.list.return_value = CrudResult(
        data=[{"atr_id_usuario": 10, "atr_usuario": long_name, "atr_email": "ana@clinica.hn", "atr_id_rol": 1, "atr_activo": True}],
        meta=PaginationMeta(total=23, total_pages=3, page=2, limit=10),
    )

    response = test_client.get(f"{BASE}/Usuario/table", params={"page": 2, "q": "ana"})

    assert response.status_code == 200
    body = response.json()
    assert [c["key"] for c in body["columns"]] == ["atr_usuario", "atr_email", "atr_id_rol", "atr_activo"]
    row = body["rows"][0]
    assert row["id"] == "10"
    assert row["cells"]["atr_usuario"] == "n" * 40 + "..."
    assert row["cells"]["atr_activo"] == "true"
    assert body["meta"]["totalPages"] == 3
    assert body["page_sizes"] == [5, 10, 20, 50, 100]
    assert body["permissions"]["delete"] is False
    client_mock.list.assert_awaited_once_with("Usuario", page=2, limit=10, query="ana")


def test_export_endpoint(test_client: TestClient, client_mock):
    client_mock.export.return_value = ExportedFile(content=b"a,b\n", content_type="text/csv", filename="usuarios.csv")

    response = test_client.get(f"{BASE}/Usuario/export")

    assert response.status_code == 200
    assert response.content == b"a,b\n"
    assert 'filename="usuarios.csv"' in response.headers["content-disposition"]
    client_mock.export.assert_awaited_once_with("Usuario", format="csv")


def test_delete_endpoint(test_client: TestClient, client_mock):
    client_mock.remove.return_value = CrudResult(data=None)

    response = test_client.delete(f"{BASE}/Permiso/5/2")

    assert response.status_code == 204
    client_mock.remove.assert_awaited_once_with("Permiso", "5/2")


def test_models_endpoint(test_client: TestClient, client_mock):
    client_mock.get_models.return_value = {"sistemas": ["rol"], "catalogos": []}
    assert test_client.get(f"{BASE}/models").json() == {"sistemas": ["rol"], "catalogos": []}


def test_router_is_guarded_when_admin_role_configured(test_client: TestClient, monkeypatch):
    monkeypatch.setenv("ADMIN_ROLE_ID", "1")
    assert test_client.get(f"{BASE}/models").status_code == 401
