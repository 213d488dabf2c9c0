"""Database session factory and configuration.

Provides database connectivity and session management. Lifecycle services
record notifications on ``session.info``; the session listeners below hand
them to the dispatcher after a successful commit and drop them on rollback,
so a notification never describes a transition that did not persist.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

from .config import get_settings
from .notifications import dispatcher

DATABASE_URL = get_settings().DATABASE_URL

# Create engine with connection pooling
# Pool settings only apply to PostgreSQL (not SQLite)
_engine_kwargs = {
    "pool_pre_ping": True,  # Verify connections before using
    "echo": False,  # Set to True for SQL query logging
}

if DATABASE_URL.startswith("sqlite"):
    _engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    _engine_kwargs["pool_size"] = 5
    _engine_kwargs["max_overflow"] = 10

def enable_sqlite_savepoints(sqlite_engine) -> None:
    """Let pysqlite honour SAVEPOINT by emitting BEGIN ourselves.

    pysqlite defers BEGIN until the first DML statement, which breaks
    ``Session.begin_nested()`` when the savepoint is the first write.
    """

    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = create_engine(DATABASE_URL, **_engine_kwargs)
if DATABASE_URL.startswith("sqlite"):
    enable_sqlite_savepoints(engine)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            session.query(Door).all()

    Automatically commits on success, rolls back on exception.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI endpoints.

    Usage:
        @app.get("/doors")
        def list_doors(db: Session = Depends(get_db)):
            return db.query(Door).all()
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@event.listens_for(Session, "after_commit")
def dispatch_pending_notifications(session):
    """Deliver notifications recorded during the committed transaction."""
    # Releasing a savepoint also fires after_commit
    if session.in_nested_transaction():
        return
    dispatcher.flush_pending(session)


@event.listens_for(Session, "after_rollback")
def discard_pending_notifications(session):
    """Drop notifications of a transaction that did not persist."""
    if session.in_nested_transaction():
        return
    dispatcher.discard_pending(session)
