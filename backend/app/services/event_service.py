"""Event ledger — owns each event's cost, paid, balance, and status.

Responsibilities:
- Event creation and detail edits, with client ownership checks
- Status transitions (staff only) against the transition table
- Delete guard: events with completed payments must be cancelled instead
- Financial summary, always recomputed from booking and payment rows
- Audit entry for every write, in the same transaction as the write
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Optional

import pytz
from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from app.auth import Actor, require_owner_or_staff, require_staff
from app.config import settings
from app.errors import (
    ConflictError, InvalidTransitionError, NotFoundError, ValidationError,
)
from app.models.activity_log import ActivityLog, ActionType
from app.models.booking import BookingStatus, EventService
from app.models.event import Event, EventStatus, can_transition
from app.models.payment import Payment, PaymentStatus
from app.money import ZERO, line_total, money_sum, require_positive
from app.services import audit_service, catalog_service
from app.services.transaction import lock_event, transactional

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "event_name", "event_type_id", "event_date", "event_time",
    "venue", "guest_count", "budget", "special_notes",
)
UPCOMING_LIMIT = 10
MAX_UPCOMING_DAYS = 366


@dataclass(frozen=True)
class Financials:
    total_cost: Decimal
    total_paid: Decimal
    balance: Decimal
    payment_status: str
    days_until_event: int


def local_today() -> date:
    """Today's date in the configured local timezone."""
    return datetime.now(pytz.timezone(settings.LOCAL_TIMEZONE)).date()


def _event_snapshot(event: Event) -> dict[str, Any]:
    """Serialize an event to a JSON-safe dict for the audit log."""
    return {
        "event_id": event.event_id,
        "event_name": event.event_name,
        "event_type_id": event.event_type_id,
        "event_date": event.event_date.isoformat() if event.event_date else None,
        "event_time": event.event_time.isoformat() if event.event_time else None,
        "venue": event.venue,
        "guest_count": event.guest_count,
        "budget": str(event.budget) if event.budget is not None else None,
        "status": event.status.value if event.status else None,
    }


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return event


def get_event_for(db: Session, event_id: int, actor: Actor) -> Event:
    """Fetch an event the actor is allowed to see."""
    event = get_event(db, event_id)
    require_owner_or_staff(actor, event.client_id, "view this event")
    return event


# ---------------------------------------------------------------------------
# Derived financials
# ---------------------------------------------------------------------------
def total_cost(db: Session, event_id: int) -> Decimal:
    """Sum of agreed_price x quantity over the event's non-cancelled booking lines."""
    rows = db.execute(
        select(EventService.agreed_price, EventService.quantity).where(
            EventService.event_id == event_id,
            EventService.status != BookingStatus.cancelled,
        )
    ).all()
    return money_sum(line_total(price, quantity) for price, quantity in rows)


def total_paid(db: Session, event_id: int) -> Decimal:
    """Sum of the event's completed payments."""
    amounts = db.scalars(
        select(Payment.amount).where(
            Payment.event_id == event_id,
            Payment.status == PaymentStatus.completed,
        )
    )
    return money_sum(amounts)


def payment_status(cost: Decimal, paid: Decimal) -> str:
    if paid <= ZERO:
        return "unpaid"
    if paid < cost:
        return "partial"
    if paid == cost:
        return "paid"
    return "overpaid"


def days_until(event_date: date, today: Optional[date] = None) -> int:
    today = today or local_today()
    return max((event_date - today).days, 0)


def get_financials(db: Session, event_id: int, today: Optional[date] = None) -> Financials:
    """Recompute the event's financial state from current rows. Takes no lock."""
    event = get_event(db, event_id)
    cost = total_cost(db, event_id)
    paid = total_paid(db, event_id)
    return Financials(
        total_cost=cost,
        total_paid=paid,
        balance=cost - paid,
        payment_status=payment_status(cost, paid),
        days_until_event=days_until(event.event_date, today),
    )


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------
def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"Invalid event date: {value!r}")
    raise ValidationError("Event date is required")


def _parse_time(value: Any) -> Optional[time]:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        try:
            return time.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"Invalid event time: {value!r}")
    raise ValidationError(f"Invalid event time: {value!r}")


def _validate_guest_count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError("Guest count must be a positive integer")
    return value


def _validate_event_type(db: Session, event_type_id: Any) -> int:
    if event_type_id is None:
        raise ValidationError("Event type is required")
    if not catalog_service.event_type_exists(db, event_type_id):
        raise ValidationError(f"Unknown event type: {event_type_id}")
    return event_type_id


def _parse_status(value: Any) -> EventStatus:
    try:
        return EventStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid event status: {value!r}")


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
@transactional
def create_event(
    db: Session,
    actor: Actor,
    event_name: Optional[str],
    event_type_id: Optional[int],
    event_date: Any,
    event_time: Any = None,
    venue: Optional[str] = None,
    guest_count: Optional[int] = None,
    budget: Any = None,
    special_notes: Optional[str] = None,
    client_id: Optional[int] = None,
) -> Event:
    """Open a new event in ``inquiry``. Past dates are accepted at this stage."""
    if not event_name or not event_name.strip():
        raise ValidationError("Event name is required")
    event_type_id = _validate_event_type(db, event_type_id)
    parsed_date = _parse_date(event_date)
    parsed_time = _parse_time(event_time)
    guest_count = _validate_guest_count(
        settings.DEFAULT_GUEST_COUNT if guest_count is None else guest_count
    )
    budget = require_positive(budget, "budget") if budget is not None else None

    # Staff may open events on behalf of a client; clients always book for themselves
    owner_id = actor.actor_id
    if actor.is_staff and client_id is not None:
        owner_id = client_id

    event = Event(
        client_id=owner_id,
        event_type_id=event_type_id,
        event_name=event_name.strip(),
        event_date=parsed_date,
        event_time=parsed_time,
        venue=venue,
        guest_count=guest_count,
        budget=budget,
        special_notes=special_notes,
        status=EventStatus.inquiry,
    )
    db.add(event)
    db.flush()

    audit_service.record(
        db, actor, ActionType.event_created, "events", event.event_id,
        old_value=None, new_value=event.event_name,
    )
    logger.info("Created event '%s' (%s) for client %s", event.event_name, event.event_id, owner_id)
    return event


@transactional
def update_event(db: Session, event_id: int, actor: Actor, updates: dict[str, Any]) -> Event:
    """Edit event details. Status is never changed here; use update_status."""
    event = lock_event(db, event_id)
    require_owner_or_staff(actor, event.client_id, "update this event")
    if event.status == EventStatus.cancelled:
        raise ConflictError("Cancelled events cannot be edited")

    changes = {k: v for k, v in updates.items() if k in EDITABLE_FIELDS}
    if not changes:
        raise ValidationError("No fields to update")

    before = _event_snapshot(event)
    for field, value in changes.items():
        if field == "event_name":
            if not value or not str(value).strip():
                raise ValidationError("Event name cannot be empty")
            value = str(value).strip()
        elif field == "event_type_id":
            value = _validate_event_type(db, value)
        elif field == "event_date":
            value = _parse_date(value)
        elif field == "event_time":
            value = _parse_time(value)
        elif field == "guest_count":
            value = _validate_guest_count(value)
        elif field == "budget":
            value = require_positive(value, "budget") if value is not None else None
        setattr(event, field, value)
    db.flush()

    audit_service.record(
        db, actor, ActionType.event_updated, "events", event.event_id,
        old_value=before, new_value=_event_snapshot(event),
    )
    logger.info("Updated event %s (%s)", event_id, ", ".join(sorted(changes)))
    return event


def apply_transition(
    db: Session, event: Event, new_status: EventStatus, actor: Actor
) -> EventStatus:
    """Move ``event`` to ``new_status`` and audit it. Caller holds the event lock."""
    old_status = event.status
    if not can_transition(old_status, new_status):
        raise InvalidTransitionError(
            f"Cannot change event status from {old_status.value} to {new_status.value}"
        )
    event.status = new_status
    db.flush()
    audit_service.record(
        db, actor, ActionType.status_updated, "events", event.event_id,
        old_value=old_status, new_value=new_status,
    )
    return old_status


@transactional
def update_status(db: Session, event_id: int, new_status: Any, actor: Actor) -> Event:
    """Staff-initiated status change, checked against the transition table."""
    require_staff(actor, "change event status")
    target = _parse_status(new_status)
    event = lock_event(db, event_id)
    if not can_transition(event.status, target):
        raise InvalidTransitionError(
            f"Cannot change event status from {event.status.value} to {target.value}"
        )
    if target == EventStatus.confirmed and event.event_date < local_today():
        raise ValidationError("Past-dated events cannot be confirmed")

    old_status = apply_transition(db, event, target, actor)
    logger.info("Event %s status %s -> %s by %s", event_id, old_status.value, target.value, actor.actor_id)
    return event


@transactional
def delete_event(db: Session, event_id: int, actor: Actor) -> None:
    """Hard-delete an event that has taken no money, with its booking lines and audit trail."""
    event = lock_event(db, event_id)
    require_owner_or_staff(actor, event.client_id, "delete this event")

    completed = db.scalars(
        select(Payment.payment_id).where(
            Payment.event_id == event_id,
            Payment.status == PaymentStatus.completed,
        )
    ).first()
    if completed is not None:
        raise ConflictError("Cannot delete event with payments. Cancel the event instead.")

    line_ids = list(db.scalars(
        select(EventService.event_service_id).where(EventService.event_id == event_id)
    ))
    payment_ids = list(db.scalars(select(Payment.payment_id).where(Payment.event_id == event_id)))

    conditions = [(ActivityLog.table_name == "events") & (ActivityLog.record_id == event_id)]
    if line_ids:
        conditions.append(
            (ActivityLog.table_name == "event_services") & ActivityLog.record_id.in_(line_ids)
        )
    if payment_ids:
        conditions.append(
            (ActivityLog.table_name == "payments") & ActivityLog.record_id.in_(payment_ids)
        )
    db.execute(delete(ActivityLog).where(or_(*conditions)))

    before = _event_snapshot(event)
    db.delete(event)  # cascades to booking lines and non-completed payments
    db.flush()

    # The purged trail is replaced by this one entry, the only row left for the deleted id
    audit_service.record(
        db, actor, ActionType.event_deleted, "events", event_id,
        old_value=before, new_value=None,
    )
    logger.info("Deleted event %s (%d booking lines) by %s", event_id, len(line_ids), actor.actor_id)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def booking_lines(db: Session, event_id: int) -> list[EventService]:
    """All booking lines on an event, cancelled ones included, newest first."""
    return list(db.scalars(
        select(EventService)
        .where(EventService.event_id == event_id)
        .order_by(EventService.added_at.desc(), EventService.event_service_id.desc())
    ))


def list_events(
    db: Session,
    actor: Actor,
    status: Optional[str] = None,
    search: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[Event]:
    """Event summaries, latest event date first. Clients only see their own events."""
    stmt = select(Event)
    if not actor.is_staff:
        stmt = stmt.where(Event.client_id == actor.actor_id)
    if status:
        stmt = stmt.where(Event.status == _parse_status(status))
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(Event.event_name.ilike(pattern), Event.venue.ilike(pattern)))
    if date_from:
        stmt = stmt.where(Event.event_date >= date_from)
    if date_to:
        stmt = stmt.where(Event.event_date <= date_to)
    stmt = stmt.order_by(Event.event_date.desc(), Event.created_at.desc(), Event.event_id.desc())
    return list(db.scalars(stmt))


def list_upcoming_events(
    db: Session, actor: Actor, days: int = 7, today: Optional[date] = None
) -> list[dict[str, Any]]:
    """Non-cancelled events in the next ``days`` days, soonest first."""
    if days < 0 or days > MAX_UPCOMING_DAYS:
        raise ValidationError(f"days must be between 0 and {MAX_UPCOMING_DAYS}")
    today = today or local_today()
    horizon = today + timedelta(days=days)
    stmt = select(Event).where(
        Event.status != EventStatus.cancelled,
        Event.event_date >= today,
        Event.event_date <= horizon,
    )
    if not actor.is_staff:
        stmt = stmt.where(Event.client_id == actor.actor_id)
    stmt = stmt.order_by(Event.event_date.asc(), Event.event_time.asc()).limit(UPCOMING_LIMIT)

    upcoming = []
    for event in db.scalars(stmt):
        financials = get_financials(db, event.event_id, today=today)
        upcoming.append({
            "event": event,
            "days_until_event": financials.days_until_event,
            "payment_status": financials.payment_status,
        })
    return upcoming


def get_event_detail(db: Session, event_id: int, actor: Actor) -> dict[str, Any]:
    """Event with its financials, booking lines, payments, and recent activity."""
    event = get_event_for(db, event_id, actor)
    payments = db.scalars(
        select(Payment)
        .where(Payment.event_id == event_id)
        .order_by(Payment.payment_date.desc(), Payment.payment_id.desc())
    ).all()
    return {
        "event": event,
        "financials": get_financials(db, event_id),
        "services": booking_lines(db, event_id),
        "payments": list(payments),
        "activities": audit_service.event_activity(db, event_id),
    }
