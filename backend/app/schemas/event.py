"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel

from app.models.event import EventStatus
from app.schemas.activity_log import ActivityLogOut
from app.schemas.booking import EventServiceOut
from app.schemas.payment import PaymentOut


class EventCreate(BaseModel):
    event_name: str
    event_type_id: int
    event_date: date
    event_time: Optional[time] = None
    venue: Optional[str] = None
    guest_count: Optional[int] = None
    budget: Optional[Decimal] = None
    special_notes: Optional[str] = None
    client_id: Optional[int] = None  # staff only; ignored for clients


class EventUpdate(BaseModel):
    event_name: Optional[str] = None
    event_type_id: Optional[int] = None
    event_date: Optional[date] = None
    event_time: Optional[time] = None
    venue: Optional[str] = None
    guest_count: Optional[int] = None
    budget: Optional[Decimal] = None
    special_notes: Optional[str] = None


class EventStatusUpdate(BaseModel):
    status: str


class EventOut(BaseModel):
    event_id: int
    client_id: int
    event_type_id: int
    event_name: str
    event_date: date
    event_time: Optional[time] = None
    venue: Optional[str] = None
    guest_count: int
    budget: Optional[Decimal] = None
    special_notes: Optional[str] = None
    status: EventStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class FinancialsOut(BaseModel):
    total_cost: Decimal
    total_paid: Decimal
    balance: Decimal
    payment_status: str
    days_until_event: int

    model_config = {"from_attributes": True}


class EventDetailOut(BaseModel):
    event: EventOut
    financials: FinancialsOut
    services: list[EventServiceOut] = []
    payments: list[PaymentOut] = []
    activities: list[ActivityLogOut] = []


class UpcomingEventOut(BaseModel):
    event: EventOut
    days_until_event: int
    payment_status: str
