# app/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

# local imports
from app.app_logger import get_logger, setup_logging
from app.config import Settings, settings as default_settings
from app.database import Datastore
from app.migrations import ensure_schema
from app.routes_contacts import router as contacts_router
from app.views import router as pages_router

TEMPLATES_DIR = Path(__file__).parent / "templates"


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------
def create_app(settings: Optional[Settings] = None, datastore: Optional[Datastore] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)
    log = get_logger()

    # A caller-supplied datastore is the caller's to close.
    owns_datastore = datastore is None
    datastore = datastore or Datastore.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            ensure_schema(datastore)
            log.info("contacts table ready")
        except Exception:
            # collection routes retry the bootstrap on every call
            log.exception("schema bootstrap failed at startup")
        yield
        if owns_datastore:
            datastore.close()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.datastore = datastore

    # --- Templates ------------------------------------------------------------
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.globals["app_name"] = settings.APP_NAME
    app.state.templates = templates

    # --- Middleware -----------------------------------------------------------
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # --- Routes ---------------------------------------------------------------
    app.include_router(contacts_router, prefix="/contacts", tags=["contacts"])
    app.include_router(contacts_router, prefix="/api/contacts", include_in_schema=False)
    app.include_router(pages_router)

    @app.get("/health")
    def health():
        result = datastore.ping()
        return JSONResponse(result, status_code=200 if result["ok"] else 503)

    return app


# Uvicorn entrypoint expects "app"
app = create_app()
