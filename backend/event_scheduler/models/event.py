"""Event ORM model — one UTC interval shared by an ordered list of participants."""
import uuid

from sqlalchemy import CheckConstraint, Column, String, DateTime, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship

from event_scheduler.database import Base
from event_scheduler.models.profile import utcnow


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=True)
    event_timezone = Column(String(64), nullable=False)  # canonical IANA tz the times were authored in
    start_at_utc = Column(DateTime(timezone=True), nullable=False, index=True)
    end_at_utc = Column(DateTime(timezone=True), nullable=False)
    created_by = Column(String(36), ForeignKey("profiles.profile_id", ondelete="SET NULL"), nullable=True)
    created_at_utc = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at_utc = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    participant_links = relationship(
        "EventParticipant",
        back_populates="event",
        order_by="EventParticipant.position",
        cascade="all, delete-orphan",
    )
    creator = relationship("Profile", lazy="joined")

    __table_args__ = (CheckConstraint("end_at_utc > start_at_utc", name="ck_events_end_after_start"),)

    @property
    def participant_ids(self) -> list[str]:
        return [link.profile_id for link in self.participant_links]


class EventParticipant(Base):
    __tablename__ = "event_participants"

    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), primary_key=True)
    profile_id = Column(String(36), ForeignKey("profiles.profile_id", ondelete="CASCADE"), primary_key=True)
    position = Column(Integer, nullable=False, default=0)

    event = relationship("Event", back_populates="participant_links")
    profile = relationship("Profile", lazy="joined")

    __table_args__ = (Index("ix_event_participants_profile_id", "profile_id"),)
