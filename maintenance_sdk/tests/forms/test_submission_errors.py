# maintenance_sdk/tests/forms/test_submission_errors.py
import pytest

from maintenance_sdk.exceptions import ServiceCommunicationError
from maintenance_sdk.forms.errors import MSG_VALIDATION_GENERAL, map_submission_errors


def _error(data, errors=None) -> ServiceCommunicationError:
    return ServiceCommunicationError("Unprocessable", status_code=422, data=data, errors=errors)


def test_list_shape_is_mapped_and_merged():
    data = {
        "errors": [
            {"field": "atr_rol", "message": "Requerido"},
            {"field": "atr_rol", "message": "Muy corto"},
            {"message": "sin campo"},
        ]
    }
    mapped = map_submission_errors(_error(data, data["errors"]))
    assert mapped.field_errors == {"atr_rol": "Requerido Muy corto"}
    assert mapped.general == "sin campo"


@pytest.mark.parametrize(
    "errors, expected",
    [
        ({"atr_rol": ["Requerido", "Muy corto"]}, "Requerido Muy corto"),
        ({"atr_rol": {"message": "Valor ya existe"}}, "Valor ya existe"),
        ({"atr_rol": {"msg": "Valor ya existe"}}, "Valor ya existe"),
        ({"atr_rol": "Inválido"}, "Inválido"),
    ],
)
def test_mapping_shapes(errors, expected):
    mapped = map_submission_errors(_error({"message": "Datos inválidos", "errors": errors}))
    assert mapped.field_errors == {"atr_rol": expected}
    assert mapped.general == "Datos inválidos"


def test_string_errors_become_general_notice():
    mapped = map_submission_errors(_error({"errors": "Registro duplicado"}))
    assert mapped.field_errors == {}
    assert mapped.general == "Registro duplicado"
    assert mapped.has_errors


def test_unmapped_errors_use_general_fallback():
    mapped = map_submission_errors(_error(None))
    assert mapped.field_errors == {}
    assert mapped.general == MSG_VALIDATION_GENERAL


def test_errors_for_fields_outside_the_form_become_general():
    errors = [
        {"field": "atr_id_rol", "message": "Valor duplicado"},
        {"field": "atr_rol", "message": "Muy corto"},
        {"message": "Registro bloqueado"},
    ]
    error = _error({"message": "Validación fallida"}, errors)
    mapped = map_submission_errors(error, fields=["atr_rol", "atr_descripcion"])

    assert mapped.field_errors == {"atr_rol": "Muy corto"}
    assert mapped.general == "atr_id_rol: Valor duplicado Registro bloqueado"


def test_unknown_mapping_fields_become_general():
    data = {"errors": {"atr_codigo": ["Inválido"], "atr_rol": "Requerido"}}
    mapped = map_submission_errors(_error(data), fields=["atr_rol"])

    assert mapped.field_errors == {"atr_rol": "Requerido"}
    assert mapped.general == "atr_codigo: Inválido"


def test_without_form_fields_every_named_error_stays_on_its_field():
    mapped = map_submission_errors(_error(None, [{"field": "atr_id_rol", "message": "Valor duplicado"}]))
    assert mapped.field_errors == {"atr_id_rol": "Valor duplicado"}
    assert mapped.general == MSG_VALIDATION_GENERAL
