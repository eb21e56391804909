"""
NoteDesk Backend — Profile Request/Response Schemas
=====================================================
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ProfileUpdateInput(BaseModel):
    """Input of profile.update; the settings form always sends both fields."""
    name: str = Field(min_length=1, description="Display name")
    timezone: str = Field(min_length=1, description="IANA time zone name, e.g. 'Europe/Paris'")


class ProfileResponse(BaseModel):
    id: uuid.UUID
    email: Optional[str] = None
    name: str
    timezone: str
    updated_at: datetime

    model_config = {"from_attributes": True}
