"""Service booking — attaching catalog services to an event.

Every change to a booking line changes the event's total cost, so each one
runs under the event's row lock.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.auth import Actor, require_owner_or_staff, require_staff
from app.errors import (
    ConflictError, InvalidTransitionError, NotFoundError, ValidationError,
)
from app.models.activity_log import ActionType
from app.models.booking import BOOKING_TRANSITIONS, BookingStatus, EventService
from app.models.event import EventStatus, TERMINAL_STATUSES
from app.money import require_positive
from app.services import audit_service, catalog_service, event_service
from app.services.budget_monitor import BudgetWarning, check_budget
from app.services.transaction import lock_event, transactional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingResult:
    event_service: EventService
    total_cost: Decimal
    budget_warning: Optional[BudgetWarning] = None


def _validate_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer")
    return quantity


@transactional
def add_service(
    db: Session,
    event_id: int,
    service_id: int,
    quantity: int,
    agreed_price: Any,
    actor: Actor,
) -> BookingResult:
    """Book a catalog service on an event at an agreed unit price.

    A booking that pushes the total above the event's declared budget still
    goes through; the overrun comes back as ``budget_warning``.
    """
    event = lock_event(db, event_id)
    require_owner_or_staff(actor, event.client_id, "add services")
    if event.status in TERMINAL_STATUSES:
        raise ConflictError(f"Cannot add services to a {event.status.value} event")

    service = catalog_service.service_exists(db, service_id)
    if service is None:
        raise NotFoundError(f"Service {service_id} not found")
    if not service.active:
        raise ConflictError(f"Service '{service.name}' is not currently available")

    duplicate = db.scalars(
        select(EventService.event_service_id).where(
            EventService.event_id == event_id,
            EventService.service_id == service_id,
            EventService.status != BookingStatus.cancelled,
        )
    ).first()
    if duplicate is not None:
        raise ConflictError(f"Duplicate booking: '{service.name}' is already booked on this event")

    quantity = _validate_quantity(quantity)
    price = require_positive(agreed_price, "agreed_price")

    line = EventService(
        event_id=event_id,
        service_id=service_id,
        quantity=quantity,
        agreed_price=price,
        status=BookingStatus.pending,
        added_by=actor.actor_id,
    )
    db.add(line)
    db.flush()

    cost = event_service.total_cost(db, event_id)
    warning = check_budget(event, cost)

    audit_service.record(
        db, actor, ActionType.service_added, "event_services", line.event_service_id,
        old_value=None, new_value=service.name,
    )
    logger.info(
        "Booked '%s' x%d at %s on event %s (total cost %s)",
        service.name, quantity, price, event_id, cost,
    )
    return BookingResult(event_service=line, total_cost=cost, budget_warning=warning)


@transactional
def update_service_status(
    db: Session, event_service_id: int, new_status: Any, actor: Actor
) -> EventService:
    """Staff progress a booking line; cancelling it drops it from the event's cost."""
    require_staff(actor, "change booking status")
    try:
        target = BookingStatus(new_status)
    except ValueError:
        raise ValidationError(f"Invalid booking status: {new_status!r}")

    event_id = db.scalars(
        select(EventService.event_id).where(EventService.event_service_id == event_service_id)
    ).first()
    if event_id is None:
        raise NotFoundError(f"Booking line {event_service_id} not found")

    event = lock_event(db, event_id)
    if event.status == EventStatus.cancelled:
        raise ConflictError("Cannot change bookings on a cancelled event")

    line = db.get(EventService, event_service_id, populate_existing=True)
    old_status = line.status
    if target not in BOOKING_TRANSITIONS[old_status]:
        raise InvalidTransitionError(
            f"Cannot change booking status from {old_status.value} to {target.value}"
        )
    line.status = target
    db.flush()

    audit_service.record(
        db, actor, ActionType.service_status_updated, "event_services", event_service_id,
        old_value=old_status, new_value=target,
    )
    logger.info("Booking line %s %s -> %s", event_service_id, old_status.value, target.value)
    return line


def list_event_services(db: Session, event_id: int, actor: Actor) -> list[EventService]:
    """Booking lines on an event, newest first."""
    event_service.get_event_for(db, event_id, actor)
    return event_service.booking_lines(db, event_id)
