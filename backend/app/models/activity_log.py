"""ActivityLog ORM model — append-only audit trail of every ledger mutation."""
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime
from app.database import Base


class ActionType(str, enum.Enum):
    event_created = "event_created"
    event_updated = "event_updated"
    event_deleted = "event_deleted"
    status_updated = "status_updated"
    service_added = "service_added"
    service_status_updated = "service_status_updated"
    payment_received = "payment_received"
    payment_updated = "payment_updated"
    payment_deleted = "payment_deleted"


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    log_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    action_type = Column(String(50), nullable=False, index=True)
    table_name = Column(String(50), nullable=False)
    record_id = Column(Integer, nullable=False)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, index=True,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<ActivityLog {self.table_name}/{self.record_id} {self.action_type}>"
