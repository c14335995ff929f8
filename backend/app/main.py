"""FastAPI application entry point."""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.database import Base, engine
from app.errors import LedgerError

# Import routers
from app.routers import events, event_services, payments, activity

# Import all models so Base.metadata knows about them
from app.models.catalog import EventType, Service  # noqa: F401
from app.models.event import Event                  # noqa: F401
from app.models.booking import EventService         # noqa: F401
from app.models.payment import Payment              # noqa: F401
from app.models.activity_log import ActivityLog     # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Event Ledger",
    description="Event booking and payment ledger — services, payments, status, and audit trail",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    """Render every ledger failure as {"error": kind, "detail": message}."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Register routers
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(event_services.router, prefix="/api/event-services", tags=["Bookings"])
app.include_router(payments.router, prefix="/api/payments", tags=["Payments"])
app.include_router(activity.router, prefix="/api/activity-logs", tags=["Activity"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
