# maintenance_sdk/api/router.py
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from fastapi.responses import Response
from pydantic import BaseModel, Field

from maintenance_sdk.clients.base import MaintenanceClient
from maintenance_sdk.config import get_settings
from maintenance_sdk.data_access.common import get_maintenance_client
from maintenance_sdk.descriptors.store import DescriptorStore
from maintenance_sdk.exceptions import ServiceCommunicationError
from maintenance_sdk.forms.identity import row_id
from maintenance_sdk.forms.session import FormContract, MaintenanceFormSession, SubmissionOutcome
from maintenance_sdk.frontend.table import TableColumn, build_columns, format_cell, page_size_choices
from maintenance_sdk.permissions.gate import require_role
from maintenance_sdk.schemas.auth_user import ModelPermissions
from maintenance_sdk.schemas.descriptor import Record
from maintenance_sdk.schemas.pagination import PaginationMeta

logger = logging.getLogger("maintenance_sdk.api.router")

router = APIRouter(
    prefix="/sdk/maintenance",
    tags=["SDK Maintenance"],
    dependencies=[Depends(require_role())],
)


class FormValues(BaseModel):
    values: Dict[str, Any] = Field(default_factory=dict)
    editing: Optional[Dict[str, Any]] = None


class ValidationResponse(BaseModel):
    valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)


class TableRow(BaseModel):
    id: str
    cells: Dict[str, str]
    record: Record


class TablePage(BaseModel):
    model: str
    columns: List[TableColumn]
    rows: List[TableRow]
    meta: Optional[PaginationMeta] = None
    page_sizes: List[int]
    permissions: ModelPermissions


def _to_http_error(e: ServiceCommunicationError) -> HTTPException:
    status_code = e.status_code if e.status_code and e.status_code >= 400 else 502
    return HTTPException(status_code=status_code, detail=e.normalized.model_dump())


async def _open_session(
    model: str, client: MaintenanceClient, editing: Optional[Dict[str, Any]] = None
) -> MaintenanceFormSession:
    return await MaintenanceFormSession.open(
        model,
        client,
        editing=editing,
        store=DescriptorStore(client=client),
        options_page_size=get_settings().OPTIONS_PAGE_SIZE,
    )


@router.get("/models", name="maintenance_models")
async def list_models(client: MaintenanceClient = Depends(get_maintenance_client)) -> Dict[str, List[str]]:
    try:
        return await client.get_models()
    except ServiceCommunicationError as e:
        raise _to_http_error(e)


@router.get("/{model}/form", response_model=FormContract, name="maintenance_create_form")
async def get_create_form(
    model: str = Path(...),
    client: MaintenanceClient = Depends(get_maintenance_client),
):
    session = await _open_session(model, client)
    try:
        return await session.form_contract()
    finally:
        session.close()


@router.get("/{model}/form/{item_id:path}", response_model=FormContract, name="maintenance_edit_form")
async def get_edit_form(
    model: str = Path(...),
    item_id: str = Path(...),
    client: MaintenanceClient = Depends(get_maintenance_client),
):
    try:
        result = await client.get_by_id(model, item_id)
    except ServiceCommunicationError as e:
        raise _to_http_error(e)
    records = result.records
    if not records:
        raise HTTPException(status_code=404, detail=f"{model} '{item_id}' not found")
    session = await _open_session(model, client, editing=records[0])
    try:
        return await session.form_contract()
    finally:
        session.close()


@router.post("/{model}/validate", response_model=ValidationResponse, name="maintenance_validate")
async def validate_form(
    payload: FormValues,
    model: str = Path(...),
    client: MaintenanceClient = Depends(get_maintenance_client),
):
    session = await _open_session(model, client, editing=payload.editing)
    try:
        errors = await session.validate(payload.values)
    finally:
        session.close()
    return ValidationResponse(valid=not errors, errors=errors)


@router.post("/{model}/submit", response_model=SubmissionOutcome, name="maintenance_submit")
async def submit_form(
    payload: FormValues,
    model: str = Path(...),
    client: MaintenanceClient = Depends(get_maintenance_client),
):
    session = await _open_session(model, client, editing=payload.editing)
    try:
        return await session.submit(payload.values)
    except ServiceCommunicationError as e:
        logger.warning(f"Submission for '{model}' failed: {e}")
        raise _to_http_error(e)
    finally:
        session.close()


@router.delete("/{model}/{item_id:path}", status_code=204, name="maintenance_delete")
async def delete_record(
    model: str = Path(...),
    item_id: str = Path(...),
    client: MaintenanceClient = Depends(get_maintenance_client),
):
    try:
        await client.remove(model, item_id)
    except ServiceCommunicationError as e:
        raise _to_http_error(e)
    return Response(status_code=204)


@router.get("/{model}/table", response_model=TablePage, name="maintenance_table")
async def get_table_page(
    model: str = Path(...),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    q: Optional[str] = Query(None),
    client: MaintenanceClient = Depends(get_maintenance_client),
):
    settings = get_settings()
    effective_limit = limit or settings.ADMIN_NUM_REGISTROS
    meta = await DescriptorStore(client=client).load(model)
    try:
        result = await client.list(model, page=page, limit=effective_limit, query=q)
    except ServiceCommunicationError as e:
        raise _to_http_error(e)
    permissions = await client.get_permissions(model)

    columns = build_columns(meta.attributes, result.records)
    rows = [
        TableRow(
            id=row_id(record, meta.key_fields),
            cells={c.key: format_cell(record.get(c.key)) for c in columns},
            record=record,
        )
        for record in result.records
    ]
    return TablePage(
        model=model,
        columns=columns,
        rows=rows,
        meta=result.meta,
        page_sizes=page_size_choices(settings.ADMIN_NUM_REGISTROS),
        permissions=permissions,
    )


@router.get("/{model}/export", name="maintenance_export")
async def export_records(
    model: str = Path(...),
    format: str = Query("csv"),
    client: MaintenanceClient = Depends(get_maintenance_client),
):
    try:
        exported = await client.export(model, format=format)
    except ServiceCommunicationError as e:
        raise _to_http_error(e)
    return Response(
        content=exported.content,
        media_type=exported.content_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
