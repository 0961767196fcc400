from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ContactIn(BaseModel):
    """Body of POST /contacts and PUT /contacts/{id}. Extra keys are ignored."""

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=1, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    message: Optional[str] = None


class ContactOut(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None
    created_at: datetime
