"""Read-only view of the service and event-type catalog."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from app.models.catalog import EventType, Service


@dataclass(frozen=True)
class CatalogService:
    service_id: int
    name: str
    active: bool
    base_price: Decimal


def service_exists(db: Session, service_id: int) -> Optional[CatalogService]:
    service = db.get(Service, service_id)
    if service is None:
        return None
    return CatalogService(
        service_id=service.service_id,
        name=service.service_name,
        active=bool(service.is_available),
        base_price=service.unit_price,
    )


def event_type_exists(db: Session, event_type_id: int) -> bool:
    event_type = db.get(EventType, event_type_id)
    return event_type is not None and bool(event_type.is_active)
