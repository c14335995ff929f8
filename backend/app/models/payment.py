"""Payment ORM model."""
import enum
from sqlalchemy import (
    Column, Integer, String, Text, Date, DateTime, Numeric, ForeignKey,
    CheckConstraint, Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class PaymentMethod(str, enum.Enum):
    cash = "cash"
    card = "card"
    bank_transfer = "bank_transfer"
    online = "online"


class PaymentType(str, enum.Enum):
    advance = "advance"
    partial = "partial"
    final = "final"


class PaymentStatus(str, enum.Enum):
    completed = "completed"
    pending = "pending"
    failed = "failed"


class Payment(Base):
    __tablename__ = "payments"

    payment_id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.event_id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(SAEnum(PaymentMethod, native_enum=False, length=20), nullable=False)
    payment_type = Column(SAEnum(PaymentType, native_enum=False, length=20), nullable=False)
    reference_number = Column(String(40), nullable=False, unique=True)
    status = Column(SAEnum(PaymentStatus, native_enum=False, length=20), nullable=False, default=PaymentStatus.completed)
    recorded_by = Column(Integer, nullable=False)
    payment_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    event = relationship("Event", back_populates="payments")

    __table_args__ = (
        CheckConstraint("amount > 0", name="check_payment_amount_positive"),
    )
