"""Pydantic schemas for booking lines (EventService rows)."""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel

from app.models.booking import BookingStatus


class ServiceBookingCreate(BaseModel):
    service_id: int
    quantity: int = 1
    agreed_price: Decimal


class ServiceStatusUpdate(BaseModel):
    status: str  # confirmed, delivered, cancelled


class EventServiceOut(BaseModel):
    event_service_id: int
    event_id: int
    service_id: int
    service_name: Optional[str] = None
    quantity: int
    agreed_price: Decimal
    subtotal: Decimal
    status: BookingStatus
    added_by: int
    added_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BudgetWarningOut(BaseModel):
    budget: Decimal
    total_cost: Decimal
    overrun: Decimal
    message: str

    model_config = {"from_attributes": True}


class BookingOut(BaseModel):
    event_service: EventServiceOut
    total_cost: Decimal
    budget_warning: Optional[BudgetWarningOut] = None

    model_config = {"from_attributes": True}
