"""Booking line API routes."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth import Actor, get_actor
from app.database import get_db
from app.schemas.booking import EventServiceOut, ServiceStatusUpdate
from app.services import booking_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.put("/{event_service_id}/status", response_model=EventServiceOut)
def update_service_status(
    event_service_id: int,
    payload: ServiceStatusUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Confirm, deliver, or cancel a booking line (admin/manager only)."""
    return booking_service.update_service_status(db, event_service_id, payload.status, actor)
