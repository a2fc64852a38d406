import logging

from sqlalchemy import event
from sqlmodel import SQLModel, create_engine, Session

from .config import settings

logger = logging.getLogger(__name__)


def build_engine(db_url: str, echo: bool = False, **extra):
    # Choose engine options based on database scheme
    engine_kwargs = {}
    if db_url.startswith("sqlite"):
        # SQLite specific connect args
        engine_kwargs.update({
            "connect_args": {"check_same_thread": False}
        })
    else:
        # Better resiliency for managed Postgres
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 10,
        })
    engine_kwargs.update(extra)
    new_engine = create_engine(db_url, echo=echo, **engine_kwargs)

    if db_url.startswith("sqlite"):
        # Needed for ON DELETE CASCADE on doctors/patients
        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def create_db_and_tables(target_engine=None):
    # Import models so they are registered on the metadata
    from .db import models  # noqa: F401

    SQLModel.metadata.create_all(target_engine or engine)
    logger.info("Database tables ensured")


def get_session():
    with Session(engine) as session:
        yield session
