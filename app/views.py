from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from app.app_logger import get_logger
from app.database import Datastore, get_datastore
from app.routes_contacts import fetch_contacts

log = get_logger("views")

router = APIRouter()


def render(request: Request, template_name: str, context: dict):
    return request.app.state.templates.TemplateResponse(request, template_name, context)  # type: ignore[attr-defined]


@router.get("/", include_in_schema=False)
async def contacts_page(request: Request, datastore: Datastore = Depends(get_datastore)):
    """
    Form + table. The first render is server side; after that the page's
    script talks to /api/contacts and redraws the table itself.
    """
    error = None
    try:
        rows = await run_in_threadpool(fetch_contacts, datastore)
    except Exception:
        log.exception("contacts page: could not load contacts")
        rows, error = [], "Failed to fetch contacts"
    return render(request, "contacts.html", {"rows": rows, "error": error})
