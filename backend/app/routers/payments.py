"""Payment API routes — delegates to payment_service for classification and locking."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth import Actor, get_actor
from app.database import get_db
from app.schemas.payment import PaymentCreate, PaymentOut, PaymentRecordOut, PaymentUpdate
from app.services import payment_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=PaymentRecordOut, status_code=status.HTTP_201_CREATED)
def record_payment(payload: PaymentCreate, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Record a payment; its type is classified from the event balance unless given."""
    result = payment_service.record_payment(
        db,
        payload.event_id,
        amount=payload.amount,
        payment_method=payload.payment_method,
        actor=actor,
        payment_type=payload.payment_type,
        reference_number=payload.reference_number,
        payment_date=payload.payment_date,
        notes=payload.notes,
    )
    return PaymentRecordOut.model_validate(result)


@router.get("/", response_model=list[PaymentOut])
def list_payments(
    event_id: Optional[int] = Query(None),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """List payments, optionally for one event. Clients only see their own."""
    return payment_service.list_payments(db, actor, event_id=event_id)


@router.get("/{payment_id}", response_model=PaymentOut)
def get_payment(payment_id: int, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return payment_service.get_payment(db, payment_id, actor)


@router.put("/{payment_id}", response_model=PaymentOut)
def update_payment(
    payment_id: int,
    payload: PaymentUpdate,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Correct a payment's method or notes."""
    return payment_service.update_payment(
        db, payment_id, actor, payment_method=payload.payment_method, notes=payload.notes,
    )


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(payment_id: int, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Delete a payment (admin/manager only). Does not revert an auto-confirmed event."""
    payment_service.delete_payment(db, payment_id, actor)
