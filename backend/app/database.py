"""SQLAlchemy engine, session factory, and declarative base."""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from app.config import settings

# Execution option asking the store for its write lock when the transaction begins.
WRITE_LOCK = "ledger_write_lock"


class Base(DeclarativeBase):
    pass


def make_engine(url: str, lock_timeout: float = settings.LOCK_TIMEOUT_SECONDS) -> Engine:
    """Build an engine whose lock waits give up after ``lock_timeout`` seconds."""
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": lock_timeout},
        )
        _install_sqlite_hooks(engine)
        return engine
    if url.startswith("postgresql"):
        return create_engine(
            url,
            pool_pre_ping=True,
            connect_args={"options": f"-c lock_timeout={int(lock_timeout * 1000)}"},
        )
    return create_engine(url, pool_pre_ping=True)


def _install_sqlite_hooks(engine: Engine) -> None:
    """SQLite has no row locks: ledger transactions take the database write lock at BEGIN."""

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        # pysqlite must not emit its own BEGIN; the "begin" hook below does it
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin(conn):
        if conn.get_execution_options().get(WRITE_LOCK):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency — yields a session closed after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
