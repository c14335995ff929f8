"""Activity audit log — write path and read path.

``record`` stages an entry in the caller's transaction. It is not
best-effort: if the insert fails, the whole ledger operation fails with it.
"""
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.auth import Actor
from app.config import settings
from app.errors import ValidationError
from app.models.activity_log import ActivityLog, ActionType

logger = logging.getLogger(__name__)

MAX_SINCE_DAYS = 3660


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True, default=str)
    if hasattr(value, "value"):  # enum members
        return str(value.value)
    return str(value)


def record(
    db: Session,
    actor: Actor,
    action_type: ActionType,
    table_name: str,
    record_id: int,
    old_value: Any = None,
    new_value: Any = None,
    origin: Optional[str] = None,
) -> ActivityLog:
    """Append one audit entry inside the current transaction."""
    entry = ActivityLog(
        user_id=actor.actor_id,
        action_type=ActionType(action_type).value,
        table_name=table_name,
        record_id=record_id,
        old_value=_as_text(old_value),
        new_value=_as_text(new_value),
        ip_address=origin if origin is not None else actor.origin,
    )
    db.add(entry)
    db.flush()
    return entry


def query_activity(
    db: Session,
    action_type: Optional[str] = None,
    table_name: Optional[str] = None,
    since_days: Optional[int] = None,
) -> list[ActivityLog]:
    """Entries from the last ``since_days`` days, newest first, capped at ACTIVITY_QUERY_LIMIT."""
    if since_days is None:
        since_days = settings.ACTIVITY_DEFAULT_DAYS
    if since_days < 0 or since_days > MAX_SINCE_DAYS:
        raise ValidationError(f"since_days must be between 0 and {MAX_SINCE_DAYS}")
    if action_type is not None:
        try:
            action_type = ActionType(action_type).value
        except ValueError:
            raise ValidationError(f"Unknown action type: {action_type}")

    since = datetime.now(timezone.utc) - timedelta(days=since_days)
    stmt = select(ActivityLog).where(ActivityLog.created_at >= since)
    if action_type:
        stmt = stmt.where(ActivityLog.action_type == action_type)
    if table_name:
        stmt = stmt.where(ActivityLog.table_name == table_name)
    stmt = stmt.order_by(ActivityLog.created_at.desc(), ActivityLog.log_id.desc())
    return list(db.scalars(stmt.limit(settings.ACTIVITY_QUERY_LIMIT)))


def event_activity(db: Session, event_id: int, limit: int = 10) -> list[ActivityLog]:
    """Most recent entries recorded against an event row."""
    stmt = (
        select(ActivityLog)
        .where(ActivityLog.table_name == "events", ActivityLog.record_id == event_id)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.log_id.desc())
        .limit(limit)
    )
    return list(db.scalars(stmt))
