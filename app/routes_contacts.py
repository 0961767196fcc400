# app/routes_contacts.py
from __future__ import annotations

import re
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy import delete, insert, select, update
from starlette import status
from starlette.concurrency import run_in_threadpool

from app.app_logger import get_logger
from app.database import Datastore, get_datastore
from app.errors import InvalidPayload
from app.migrations import ensure_schema
from app.models import contacts_table as contacts
from app.schemas import ContactIn, ContactOut

log = get_logger("api")

router = APIRouter()

NOT_FOUND = "Contact not found"
_ID_RE = re.compile(r"-?[0-9]+")

# --- Utilities ---------------------------------------------------------------


def _row_view(row: Dict[str, Any]) -> Dict[str, Any]:
    return ContactOut.model_validate(row).model_dump(mode="json")


def _error(message: str, code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=code)


def _server_fault(message: str, exc: Exception) -> JSONResponse:
    # ConstraintViolation / DatastoreUnavailable / InvalidPayload carry a kind;
    # anything else is treated as infrastructure.
    kind = getattr(exc, "kind", "infra")
    log.error("%s [%s]: %s", message, kind, exc, exc_info=exc)
    return _error(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


def _coerce_id(raw: str) -> int:
    # ASCII digits only; int() alone would take " 1 ", "0_1" and non-ASCII digits
    if not _ID_RE.fullmatch(raw):
        raise InvalidPayload(f"contact id must be an integer, got {raw!r}")
    return int(raw)


async def _read_payload(request: Request) -> ContactIn:
    try:
        data = await request.json()
    except ValueError as e:
        raise InvalidPayload("request body is not valid JSON") from e
    if not isinstance(data, dict):
        raise InvalidPayload("request body must be a JSON object")
    try:
        return ContactIn.model_validate(data)
    except ValidationError as e:
        raise InvalidPayload(str(e)) from e


def fetch_contacts(datastore: Datastore) -> List[Dict[str, Any]]:
    """Bootstrap the table, then return every contact, newest first."""
    ensure_schema(datastore)
    rows = datastore.execute(
        select(contacts).order_by(contacts.c.created_at.desc(), contacts.c.id.desc())
    )
    return [_row_view(r) for r in rows]


def create_contact(datastore: Datastore, payload: ContactIn) -> Dict[str, Any]:
    ensure_schema(datastore)
    rows = datastore.execute(
        insert(contacts).values(**payload.model_dump()).returning(*contacts.c)
    )
    return _row_view(rows[0])


# --- Collection routes -------------------------------------------------------


@router.get("")
async def list_contacts(datastore: Datastore = Depends(get_datastore)):
    try:
        return JSONResponse(await run_in_threadpool(fetch_contacts, datastore))
    except Exception as e:
        return _server_fault("Failed to fetch contacts", e)


@router.post("")
async def contacts_create(request: Request, datastore: Datastore = Depends(get_datastore)):
    try:
        payload = await _read_payload(request)
        created = await run_in_threadpool(create_contact, datastore, payload)
        return JSONResponse(created, status_code=status.HTTP_201_CREATED)
    except Exception as e:
        return _server_fault("Failed to create contact", e)


@router.delete("")
async def contacts_delete_all(datastore: Datastore = Depends(get_datastore)):
    try:
        await run_in_threadpool(datastore.execute, delete(contacts))
        return JSONResponse({"message": "All contacts deleted"})
    except Exception as e:
        return _server_fault("Failed to delete contacts", e)


# --- Item routes -------------------------------------------------------------
# The id stays a plain string in the path so that a non-integer id becomes a
# 500 from the handler rather than FastAPI's 422.


@router.get("/{contact_id}")
async def contact_detail(contact_id: str, datastore: Datastore = Depends(get_datastore)):
    try:
        cid = _coerce_id(contact_id)
        rows = await run_in_threadpool(
            datastore.execute, select(contacts).where(contacts.c.id == cid)
        )
        if not rows:
            return _error(NOT_FOUND, status.HTTP_404_NOT_FOUND)
        return JSONResponse(_row_view(rows[0]))
    except Exception as e:
        return _server_fault("Failed to fetch contact", e)


@router.put("/{contact_id}")
async def contact_update(
    contact_id: str,
    request: Request,
    datastore: Datastore = Depends(get_datastore),
):
    """Overwrite all four mutable fields; omitted optional ones become null."""
    try:
        cid = _coerce_id(contact_id)
        # Body is validated before the row is looked up, so an invalid body on
        # an unknown id is a 500, not a 404.
        payload = await _read_payload(request)
        stmt = (
            update(contacts)
            .where(contacts.c.id == cid)
            .values(**payload.model_dump())
            .returning(*contacts.c)
        )
        rows = await run_in_threadpool(datastore.execute, stmt)
        if not rows:
            return _error(NOT_FOUND, status.HTTP_404_NOT_FOUND)
        return JSONResponse(_row_view(rows[0]))
    except Exception as e:
        return _server_fault("Failed to update contact", e)


@router.delete("/{contact_id}")
async def contact_delete(contact_id: str, datastore: Datastore = Depends(get_datastore)):
    try:
        cid = _coerce_id(contact_id)
        rows = await run_in_threadpool(
            datastore.execute,
            delete(contacts).where(contacts.c.id == cid).returning(contacts.c.id),
        )
        if not rows:
            return _error(NOT_FOUND, status.HTTP_404_NOT_FOUND)
        return JSONResponse({"message": "Contact deleted successfully"})
    except Exception as e:
        return _server_fault("Failed to delete contact", e)
