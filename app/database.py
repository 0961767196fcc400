# app/database.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase

from app.app_logger import get_logger
from app.config import Settings
from app.errors import ConstraintViolation, DatastoreUnavailable

log = get_logger("db")


class Base(DeclarativeBase):
    pass


# -------------------------------------------------------------------
# Engine factory with sane defaults per dialect
# -------------------------------------------------------------------
def make_engine(url: str, settings: Optional[Settings] = None) -> Engine:
    settings = settings or Settings()
    is_sqlite = url.startswith("sqlite")
    kwargs: Dict[str, Any] = dict(
        pool_pre_ping=True,  # kill stale connections
        echo=settings.DB_ECHO,
    )

    if is_sqlite:
        # FastAPI runs sync work on a threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )

    engine = create_engine(url, **kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.close()

    return engine


# -------------------------------------------------------------------
# Gateway
# -------------------------------------------------------------------
class Datastore:
    """
    Pooled access to the relational engine.

    Every call to execute() checks a connection out of the pool, runs exactly
    one statement in its own transaction and hands the connection back.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_settings(cls, settings: Settings) -> "Datastore":
        return cls(make_engine(settings.DATABASE_URL, settings))

    def execute(self, statement, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run one parameterized statement; return the rows it produced (if any)."""
        try:
            with self.engine.begin() as conn:
                if params is None:
                    result = conn.execute(statement)
                else:
                    result = conn.execute(statement, params)
                if not result.returns_rows:
                    return []
                return [dict(row) for row in result.mappings().all()]
        except IntegrityError as e:
            raise ConstraintViolation(str(e.orig)) from e
        except SQLAlchemyError as e:
            raise DatastoreUnavailable(str(e)) from e

    def ping(self) -> Dict[str, Any]:
        try:
            self.execute(text("SELECT 1"))
            return {"ok": True}
        except DatastoreUnavailable as e:
            log.warning("health check failed: %s", e)
            return {"ok": False, "error": str(e)}

    def close(self) -> None:
        self.engine.dispose()


# -------------------------------------------------------------------
# FastAPI dependency
# -------------------------------------------------------------------
def get_datastore(request: Request) -> Datastore:
    return request.app.state.datastore
