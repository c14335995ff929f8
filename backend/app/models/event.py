"""Event ORM model — the ledger row every booking and payment hangs off."""
import enum
from sqlalchemy import (
    Column, Integer, String, Text, Date, Time, DateTime, Numeric, ForeignKey,
    CheckConstraint, Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class EventStatus(str, enum.Enum):
    inquiry = "inquiry"
    confirmed = "confirmed"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


ALLOWED_TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.inquiry: frozenset({EventStatus.confirmed, EventStatus.cancelled}),
    EventStatus.confirmed: frozenset({EventStatus.in_progress, EventStatus.completed, EventStatus.cancelled}),
    EventStatus.in_progress: frozenset({EventStatus.completed, EventStatus.cancelled}),
    EventStatus.completed: frozenset(),
    EventStatus.cancelled: frozenset(),
}

TERMINAL_STATUSES = frozenset({EventStatus.completed, EventStatus.cancelled})


def can_transition(current: EventStatus, new: EventStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


class Event(Base):
    __tablename__ = "events"

    event_id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, nullable=False, index=True)
    event_type_id = Column(Integer, ForeignKey("event_types.event_type_id"), nullable=False)
    event_name = Column(String(200), nullable=False)
    event_date = Column(Date, nullable=False)
    event_time = Column(Time, nullable=True)
    venue = Column(String(255), nullable=True)
    guest_count = Column(Integer, nullable=False, default=50)
    budget = Column(Numeric(12, 2), nullable=True)
    special_notes = Column(Text, nullable=True)
    status = Column(SAEnum(EventStatus, native_enum=False, length=20), nullable=False, default=EventStatus.inquiry)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    services = relationship("EventService", back_populates="event", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="event", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("guest_count > 0", name="check_event_guest_count_positive"),
    )
