"""Payment classifier and processor.

A payment is classified (advance / partial / final) from the event's
balance at the moment it is applied. Classification, insert, and the
optional auto-confirmation all happen under the event's row lock, so two
concurrent payments on one event always see each other's committed effect.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.auth import Actor, require_owner_or_staff, require_staff
from app.errors import (
    ClassificationError, ConflictError, NotFoundError, ValidationError,
)
from app.models.activity_log import ActionType
from app.models.event import Event, EventStatus, can_transition
from app.models.payment import Payment, PaymentMethod, PaymentStatus, PaymentType
from app.money import ZERO, require_positive
from app.services import audit_service, event_service
from app.services.transaction import lock_event, transactional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentResult:
    payment: Payment
    classified_type: PaymentType
    event_auto_confirmed: bool


def classify_payment(cost: Decimal, paid_before: Decimal, amount: Decimal) -> PaymentType:
    """Classify a payment from the event's cost and what was paid before it."""
    remaining = cost - paid_before
    if cost == ZERO:
        result = PaymentType.advance
    elif paid_before + amount >= cost:
        result = PaymentType.final
    elif amount >= remaining and remaining > ZERO:
        # Covers the remainder even if rounding upstream disagreed with the check above
        result = PaymentType.final
    elif paid_before == ZERO:
        result = PaymentType.advance
    else:
        result = PaymentType.partial
    return ensure_payment_type(result)


def ensure_payment_type(value: Any) -> PaymentType:
    """Reject any classification outside advance/partial/final."""
    if isinstance(value, PaymentType):
        return value
    raise ClassificationError(f"Payment classification produced an invalid type: {value!r}")


def _parse_method(method: Any) -> PaymentMethod:
    try:
        return PaymentMethod(method)
    except ValueError:
        allowed = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(f"Invalid payment method {method!r}; expected one of: {allowed}")


def _parse_type(payment_type: Any) -> PaymentType:
    try:
        return PaymentType(payment_type)
    except ValueError:
        raise ValidationError(
            f"Invalid payment type {payment_type!r}; expected advance, partial, or final"
        )


def generate_reference(on: Optional[date] = None) -> str:
    on = on or event_service.local_today()
    return f"PAY-{on:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


def _reference_taken(db: Session, reference_number: str) -> bool:
    return db.scalars(
        select(Payment.payment_id).where(Payment.reference_number == reference_number)
    ).first() is not None


@transactional
def record_payment(
    db: Session,
    event_id: int,
    amount: Any,
    payment_method: Any,
    actor: Actor,
    payment_type: Optional[Any] = None,
    reference_number: Optional[str] = None,
    payment_date: Optional[date] = None,
    notes: Optional[str] = None,
) -> PaymentResult:
    """Apply a payment to an event, classifying it unless ``payment_type`` is given.

    When the payment brings an ``inquiry`` event to fully paid, the event is
    confirmed automatically. Nothing is ever advanced past ``confirmed``.
    """
    event = lock_event(db, event_id)
    require_owner_or_staff(actor, event.client_id, "record payments")
    if event.status == EventStatus.cancelled:
        raise ConflictError("Cannot record payments against a cancelled event")

    amount = require_positive(amount, "amount")
    method = _parse_method(payment_method)
    explicit_type = _parse_type(payment_type) if payment_type is not None else None

    if reference_number:
        if _reference_taken(db, reference_number):
            raise ConflictError(f"Reference number {reference_number} already exists")
    else:
        reference_number = generate_reference()
        while _reference_taken(db, reference_number):
            reference_number = generate_reference()

    # Read the balance once, under the lock
    cost = event_service.total_cost(db, event_id)
    paid_before = event_service.total_paid(db, event_id)
    classified = explicit_type or classify_payment(cost, paid_before, amount)

    payment = Payment(
        event_id=event_id,
        amount=amount,
        payment_method=method,
        payment_type=classified,
        reference_number=reference_number,
        status=PaymentStatus.completed,
        recorded_by=actor.actor_id,
        payment_date=payment_date or event_service.local_today(),
        notes=notes,
    )
    db.add(payment)
    db.flush()

    audit_service.record(
        db, actor, ActionType.payment_received, "payments", payment.payment_id,
        old_value=None, new_value=amount,
    )

    paid_after = paid_before + amount
    auto_confirmed = _maybe_auto_confirm(db, event, cost, paid_after, actor)

    logger.info(
        "Recorded %s payment %s of %s on event %s (paid %s of %s)",
        classified.value, payment.reference_number, amount, event_id, paid_after, cost,
    )
    return PaymentResult(payment=payment, classified_type=classified, event_auto_confirmed=auto_confirmed)


def _maybe_auto_confirm(
    db: Session, event: Event, cost: Decimal, paid_after: Decimal, actor: Actor
) -> bool:
    """System-triggered inquiry -> confirmed once the event is fully paid."""
    if cost <= ZERO or paid_after < cost:
        return False
    if event.status != EventStatus.inquiry or not can_transition(event.status, EventStatus.confirmed):
        return False
    event_service.apply_transition(db, event, EventStatus.confirmed, actor)
    logger.info("Event %s auto-confirmed on full payment", event.event_id)
    return True


def get_payment(db: Session, payment_id: int, actor: Actor) -> Payment:
    payment = db.get(Payment, payment_id)
    if payment is None:
        raise NotFoundError(f"Payment {payment_id} not found")
    require_owner_or_staff(actor, payment.event.client_id, "view this payment")
    return payment


def list_payments(db: Session, actor: Actor, event_id: Optional[int] = None) -> list[Payment]:
    """Payments, most recent first. Clients only see payments on their own events."""
    stmt = select(Payment).join(Event, Payment.event_id == Event.event_id)
    if event_id is not None:
        event_service.get_event_for(db, event_id, actor)
        stmt = stmt.where(Payment.event_id == event_id)
    if not actor.is_staff:
        stmt = stmt.where(Event.client_id == actor.actor_id)
    stmt = stmt.order_by(Payment.payment_date.desc(), Payment.created_at.desc(), Payment.payment_id.desc())
    return list(db.scalars(stmt))


@transactional
def update_payment(
    db: Session,
    payment_id: int,
    actor: Actor,
    payment_method: Optional[Any] = None,
    notes: Optional[str] = None,
) -> Payment:
    """Correct a payment's method or notes. Amount, type, and date stay as recorded."""
    if payment_method is None and notes is None:
        raise ValidationError("Nothing to update: only payment_method and notes can be corrected")
    event_id = db.scalars(select(Payment.event_id).where(Payment.payment_id == payment_id)).first()
    if event_id is None:
        raise NotFoundError(f"Payment {payment_id} not found")

    event = lock_event(db, event_id)
    require_owner_or_staff(actor, event.client_id, "update this payment")
    if event.status == EventStatus.cancelled:
        raise ConflictError("Cannot change payments on a cancelled event")
    payment = db.get(Payment, payment_id, populate_existing=True)

    before = {"payment_method": payment.payment_method.value, "notes": payment.notes}
    if payment_method is not None:
        payment.payment_method = _parse_method(payment_method)
    if notes is not None:
        payment.notes = notes
    db.flush()

    audit_service.record(
        db, actor, ActionType.payment_updated, "payments", payment_id,
        old_value=before,
        new_value={"payment_method": payment.payment_method.value, "notes": payment.notes},
    )
    logger.info("Corrected payment %s", payment_id)
    return payment


@transactional
def delete_payment(db: Session, payment_id: int, actor: Actor) -> None:
    """Remove a payment (admin/manager only).

    An event that was auto-confirmed by this payment stays confirmed; the
    resulting shortfall is logged for staff to reconcile by hand.
    """
    require_staff(actor, "delete payments")
    event_id = db.scalars(select(Payment.event_id).where(Payment.payment_id == payment_id)).first()
    if event_id is None:
        raise NotFoundError(f"Payment {payment_id} not found")

    event = lock_event(db, event_id)
    if event.status == EventStatus.cancelled:
        raise ConflictError("Cannot change payments on a cancelled event")
    payment = db.get(Payment, payment_id, populate_existing=True)
    amount = payment.amount
    db.delete(payment)
    db.flush()

    audit_service.record(
        db, actor, ActionType.payment_deleted, "payments", payment_id,
        old_value=amount, new_value=None,
    )

    cost = event_service.total_cost(db, event_id)
    paid = event_service.total_paid(db, event_id)
    if event.status == EventStatus.confirmed and paid < cost:
        logger.warning(
            "Event %s stays confirmed after deleting payment %s but is no longer fully paid "
            "(paid %s of %s)", event_id, payment_id, paid, cost,
        )
    logger.info("Deleted payment %s (%s) from event %s", payment_id, amount, event_id)
