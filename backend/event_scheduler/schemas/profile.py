"""Pydantic schemas for Profiles."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ProfileCreate(BaseModel):
    # Optional so the service can report a field-level validation error
    name: Optional[str] = None
    timezone: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    timezone: Optional[str] = None

    model_config = {"extra": "forbid"}


class ProfileOut(BaseModel):
    profile_id: str
    name: str
    timezone: str
    created_at_utc: datetime
    updated_at_utc: datetime

    model_config = {"from_attributes": True}


class ProfileRef(BaseModel):
    """A profile identity resolved to display form."""

    profile_id: str
    name: Optional[str] = None
    timezone: Optional[str] = None


class ProfileDeleted(BaseModel):
    success: bool
    id: str
