"""EventService ORM model — one catalog service booked against an event."""
import enum
from sqlalchemy import (
    Column, Integer, DateTime, Numeric, ForeignKey, CheckConstraint, Index, text,
    Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
from app.money import line_total


class BookingStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    delivered = "delivered"
    cancelled = "cancelled"


BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.pending: frozenset({BookingStatus.confirmed, BookingStatus.cancelled}),
    BookingStatus.confirmed: frozenset({BookingStatus.delivered, BookingStatus.cancelled}),
    BookingStatus.delivered: frozenset(),
    BookingStatus.cancelled: frozenset(),
}


class EventService(Base):
    __tablename__ = "event_services"

    event_service_id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.event_id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.service_id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    agreed_price = Column(Numeric(12, 2), nullable=False)
    status = Column(SAEnum(BookingStatus, native_enum=False, length=20), nullable=False, default=BookingStatus.pending)
    added_by = Column(Integer, nullable=False)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="services")
    service = relationship("Service")

    @property
    def subtotal(self):
        return line_total(self.agreed_price, self.quantity)

    @property
    def service_name(self):
        return self.service.service_name if self.service else None

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_event_service_quantity_positive"),
        CheckConstraint("agreed_price > 0", name="check_event_service_price_positive"),
        # A service may be booked again only after its earlier booking was cancelled
        Index(
            "uq_event_services_active",
            "event_id",
            "service_id",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
    )
