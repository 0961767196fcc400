# app/migrations.py
from sqlalchemy.schema import CreateTable

from app.database import Datastore
from app.models import contacts_table


def ensure_schema(datastore: Datastore) -> None:
    """
    Idempotent. Safe to run at every startup and before every collection call.

    Relies on CREATE TABLE IF NOT EXISTS alone (no existence probe first), so
    two callers racing here both succeed.
    """
    datastore.execute(CreateTable(contacts_table, if_not_exists=True))
