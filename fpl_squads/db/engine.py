# fpl_squads/db/engine.py
import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fpl_squads.core.errors import StorageUnavailableError
from fpl_squads.db.models import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # in-memory DB must be a single shared connection or every session sees an empty schema
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=False, future=True, **kwargs)

        @event.listens_for(engine, "connect")
        def _sqlite_fk_pragma(dbapi_conn, _record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    # Add SSL + TCP keepalive args only for Postgres
    connect_args = {}
    if database_url.startswith("postgresql"):
        connect_args = {
            "sslmode": "prefer",
            "keepalives": 1,
            "keepalives_idle": 30,     # seconds before starting keepalives
            "keepalives_interval": 10, # seconds between keepalives
            "keepalives_count": 5,     # number of failed keepalives before drop
        }

    return create_engine(
        database_url,
        pool_pre_ping=True,     # automatically tests and replaces stale conns
        pool_recycle=300,       # recycles every 5 min to beat provider idle timeout
        pool_size=10,
        max_overflow=10,
        pool_timeout=10,
        echo=False,
        future=True,
        connect_args=connect_args,
    )


class Database:
    """
    Storage handle: one engine plus its session factory.
    Opened by the app lifespan, passed to whoever needs sessions, closed at shutdown.
    """

    def __init__(self, database_url: str):
        self.url = database_url
        self.engine = build_engine(database_url)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            expire_on_commit=False,
            future=True,
        )

    def session(self) -> Session:
        return self.SessionLocal()

    def ping(self) -> None:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except OperationalError as exc:
            logger.error("Database connection failed: %s", exc)
            raise StorageUnavailableError("Database connection failed") from exc

    def create_tables(self) -> list[str]:
        """Create any missing tables; returns the table names the schema defines."""
        try:
            Base.metadata.create_all(bind=self.engine)
        except OperationalError as exc:
            logger.error("Database setup failed: %s", exc)
            raise StorageUnavailableError("Database setup failed") from exc
        return sorted(Base.metadata.tables)

    def close(self) -> None:
        self.engine.dispose()
