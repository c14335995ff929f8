"""Activity log API routes — read-only audit trail for staff."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth import Actor, get_actor, require_staff
from app.database import get_db
from app.schemas.activity_log import ActivityLogOut
from app.services import audit_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[ActivityLogOut])
def query_activity(
    action: Optional[str] = Query(None),
    table: Optional[str] = Query(None),
    days: Optional[int] = Query(None, ge=0, le=audit_service.MAX_SINCE_DAYS),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Audit entries from the last ``days`` days, newest first (max 500)."""
    require_staff(actor, "view the activity log")
    return audit_service.query_activity(db, action_type=action, table_name=table, since_days=days)
