"""Pydantic schemas for Payments."""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel

from app.models.payment import PaymentMethod, PaymentStatus, PaymentType


class PaymentCreate(BaseModel):
    event_id: int
    amount: Decimal
    payment_method: str
    payment_type: Optional[str] = None  # classified automatically when omitted
    reference_number: Optional[str] = None
    payment_date: Optional[date] = None
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class PaymentOut(BaseModel):
    payment_id: int
    event_id: int
    amount: Decimal
    payment_method: PaymentMethod
    payment_type: PaymentType
    reference_number: str
    status: PaymentStatus
    recorded_by: int
    payment_date: date
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PaymentRecordOut(BaseModel):
    payment: PaymentOut
    classified_type: PaymentType
    event_auto_confirmed: bool

    model_config = {"from_attributes": True}
