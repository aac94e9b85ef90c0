"""Profile ORM model — a person bound to one IANA timezone."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime

from event_scheduler.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Base):
    __tablename__ = "profiles"

    profile_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False, unique=True)
    timezone = Column(String(64), nullable=False, default="UTC")  # canonical IANA tz
    created_at_utc = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at_utc = Column(DateTime(timezone=True), nullable=False, default=utcnow)
