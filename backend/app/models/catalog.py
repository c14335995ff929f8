"""Catalog ORM models — event types and bookable services.

These rows are maintained by the catalog admin screens; the ledger only reads them.
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric
from app.database import Base


class EventType(Base):
    __tablename__ = "event_types"

    event_type_id = Column(Integer, primary_key=True, autoincrement=True)
    type_name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    base_price = Column(Numeric(12, 2), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class Service(Base):
    __tablename__ = "services"

    service_id = Column(Integer, primary_key=True, autoincrement=True)
    service_name = Column(String(150), nullable=False)
    category = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    unit_price = Column(Numeric(12, 2), nullable=False)
    unit_type = Column(String(30), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
