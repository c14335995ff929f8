"""Pytest fixtures — file-backed SQLite database per test, so worker threads can share it."""
from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.auth import Actor, Role
from app.database import Base, get_db, make_engine
from app.main import app

# Import all models so they register with Base.metadata
from app.models.catalog import EventType, Service     # noqa: F401
from app.models.event import Event                     # noqa: F401
from app.models.booking import EventService            # noqa: F401
from app.models.payment import Payment                 # noqa: F401
from app.models.activity_log import ActivityLog        # noqa: F401

CLIENT_ID = 101
OTHER_CLIENT_ID = 102

ADMIN = Actor(actor_id=1, role=Role.admin, origin="10.0.0.1")
MANAGER = Actor(actor_id=2, role=Role.manager, origin="10.0.0.2")
CLIENT = Actor(actor_id=CLIENT_ID, role=Role.client, origin="192.168.1.50")
OTHER_CLIENT = Actor(actor_id=OTHER_CLIENT_ID, role=Role.client, origin="192.168.1.51")


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite engine for each test."""
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def catalog(db):
    """Seed one event type and three services; returns their ids."""
    wedding = EventType(type_name="Wedding", base_price=Decimal("50000.00"))
    decoration = Service(service_name="Poruwa Decoration", category="decoration", unit_price=Decimal("75000.00"))
    catering = Service(service_name="Buffet Catering", category="catering", unit_price=Decimal("2500.00"))
    retired = Service(service_name="Retired Photo Booth", category="photo", unit_price=Decimal("1000.00"),
                      is_available=False)
    db.add_all([wedding, decoration, catering, retired])
    db.commit()
    ids = {
        "event_type_id": wedding.event_type_id,
        "decoration_id": decoration.service_id,
        "catering_id": catering.service_id,
        "retired_id": retired.service_id,
    }
    db.close()
    return ids


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def future_date(days: int = 30) -> date:
    return date.today() + timedelta(days=days)


def actor_headers(actor: Actor) -> dict[str, str]:
    return {"X-Actor-Id": str(actor.actor_id), "X-Actor-Role": actor.role.value}


def make_event(db, catalog, actor: Actor = CLIENT, budget=None, days_ahead: int = 30, **kwargs) -> int:
    """Create an event through the ledger and return its id."""
    from app.services import event_service

    event = event_service.create_event(
        db,
        actor,
        event_name=kwargs.pop("event_name", "Perera Wedding"),
        event_type_id=catalog["event_type_id"],
        event_date=kwargs.pop("event_date", future_date(days_ahead)),
        budget=budget,
        **kwargs,
    )
    return event.event_id


def make_costed_event(db, catalog, cost=Decimal("100000.00"), actor: Actor = CLIENT, **kwargs) -> int:
    """Create an event with one booking line worth ``cost``."""
    from app.services import booking_service

    event_id = make_event(db, catalog, actor=actor, **kwargs)
    booking_service.add_service(
        db, event_id, service_id=catalog["decoration_id"], quantity=1, agreed_price=cost, actor=actor,
    )
    return event_id


def create_event_via_api(client: TestClient, catalog, actor: Actor = CLIENT, **overrides) -> dict:
    """Helper — POST /api/events and return response JSON."""
    payload = {
        "event_name": "Silva Anniversary",
        "event_type_id": catalog["event_type_id"],
        "event_date": future_date().isoformat(),
        "venue": "Galle Face Hotel",
        "guest_count": 120,
    }
    payload.update(overrides)
    resp = client.post("/api/events/", json=payload, headers=actor_headers(actor))
    assert resp.status_code == 201, resp.text
    return resp.json()
