"""Transaction coordinator — runs one ledger operation as one atomic unit.

Every mutating ledger operation is wrapped with :func:`transactional`. The
wrapped function runs inside a single transaction that is committed when it
returns and rolled back when it raises, so a failed call never leaves a
payment, booking, status change, or audit row behind.

The event row is the serialization point: :func:`lock_event` takes an
exclusive row lock (``SELECT ... FOR UPDATE``). On SQLite, which has no row
locks, the transaction instead starts with ``BEGIN IMMEDIATE`` (see
``app.database``).
"""
import functools
import logging

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.database import WRITE_LOCK
from app.errors import NotFoundError, StoreUnavailableError
from app.models.event import Event

logger = logging.getLogger(__name__)

_LOCK_TIMEOUT_MARKERS = (
    "database is locked",
    "lock timeout",
    "lock wait timeout",
    "could not obtain lock",
)


def is_lock_timeout(exc: OperationalError) -> bool:
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return any(marker in message for marker in _LOCK_TIMEOUT_MARKERS)


def _begin(db: Session) -> None:
    if db.in_transaction():
        # Close whatever read snapshot the caller left open so the lock is taken at BEGIN
        db.commit()
    db.connection(execution_options={WRITE_LOCK: True})


def transactional(fn):
    """Run ``fn(db, ...)`` in one locked transaction; retry once on lock-wait timeout."""

    @functools.wraps(fn)
    def wrapper(db: Session, *args, **kwargs):
        for attempt in (1, 2):
            try:
                _begin(db)
                result = fn(db, *args, **kwargs)
                db.commit()
                return result
            except OperationalError as exc:
                db.rollback()
                if attempt == 1 and is_lock_timeout(exc):
                    logger.warning("Lock wait timed out in %s, retrying once", fn.__name__)
                    continue
                raise StoreUnavailableError(f"Store unavailable: {exc.orig or exc}") from exc
            except Exception:
                db.rollback()
                raise

    return wrapper


def lock_event(db: Session, event_id: int) -> Event:
    """Load the event under an exclusive row lock, re-reading it from the store."""
    event = db.execute(
        select(Event)
        .where(Event.event_id == event_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return event
