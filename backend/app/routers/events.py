"""Event API routes — delegates to event_service for ledger rules."""
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth import Actor, get_actor
from app.database import get_db
from app.schemas.booking import BookingOut, EventServiceOut, ServiceBookingCreate
from app.schemas.event import (
    EventCreate, EventDetailOut, EventOut, EventStatusUpdate, EventUpdate,
    FinancialsOut, UpcomingEventOut,
)
from app.services import booking_service, event_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Open a new event in 'inquiry' status."""
    return event_service.create_event(
        db,
        actor,
        event_name=payload.event_name,
        event_type_id=payload.event_type_id,
        event_date=payload.event_date,
        event_time=payload.event_time,
        venue=payload.venue,
        guest_count=payload.guest_count,
        budget=payload.budget,
        special_notes=payload.special_notes,
        client_id=payload.client_id,
    )


@router.get("/", response_model=list[EventOut])
def list_events(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """List events with optional filters. Clients only see their own."""
    return event_service.list_events(
        db, actor, status=status_filter, search=search, date_from=date_from, date_to=date_to,
    )


@router.get("/upcoming", response_model=list[UpcomingEventOut])
def list_upcoming_events(
    days: int = Query(7, ge=0, le=event_service.MAX_UPCOMING_DAYS),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Events coming up in the next ``days`` days with their payment status."""
    upcoming = event_service.list_upcoming_events(db, actor, days=days)
    return [UpcomingEventOut.model_validate(item, from_attributes=True) for item in upcoming]


@router.get("/{event_id}", response_model=EventDetailOut)
def get_event(event_id: int, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Fetch an event with financials, booking lines, payments, and recent activity."""
    detail = event_service.get_event_detail(db, event_id, actor)
    return EventDetailOut.model_validate(detail, from_attributes=True)


@router.get("/{event_id}/financials", response_model=FinancialsOut)
def get_financials(event_id: int, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Total cost, total paid, balance, payment status, and days until the event."""
    event_service.get_event_for(db, event_id, actor)
    return FinancialsOut.model_validate(event_service.get_financials(db, event_id))


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int,
    payload: EventUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Edit event details (owner or staff). Status changes go through /status."""
    updates = payload.model_dump(exclude_unset=True)
    return event_service.update_event(db, event_id, actor, updates)


@router.put("/{event_id}/status", response_model=EventOut)
def update_status(
    event_id: int,
    payload: EventStatusUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Change event status (admin/manager only)."""
    return event_service.update_status(db, event_id, payload.status, actor)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: int, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Delete an event that has no completed payments."""
    event_service.delete_event(db, event_id, actor)


@router.get("/{event_id}/services", response_model=list[EventServiceOut])
def list_event_services(event_id: int, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Booking lines on the event, newest first."""
    return booking_service.list_event_services(db, event_id, actor)


@router.post("/{event_id}/services", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
def add_service(
    event_id: int,
    payload: ServiceBookingCreate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Book a catalog service on the event. Budget overruns come back as a warning."""
    result = booking_service.add_service(
        db,
        event_id,
        service_id=payload.service_id,
        quantity=payload.quantity,
        agreed_price=payload.agreed_price,
        actor=actor,
    )
    return BookingOut.model_validate(result)
