"""
Database connection and session management module.

Uses SQLAlchemy for ORM operations. Supports MariaDB/MySQL (production)
and SQLite (local development and tests).

The engine lives inside an explicitly constructed `Database` handle that the
application factory receives, opens at startup and disposes at shutdown.
Sessions are handed to routes through the `get_db` dependency.
"""

import os
from sqlalchemy import create_engine, func, select, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool
from fastapi import Request

from students_api.logging_config import get_logger, log_with_context

logger = get_logger("db")

# ──────────────────────────────────────────────────────────────
# Connection parameters, read from the environment.
# DATABASE_URL, when set, takes precedence over the individual parts.
# ──────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv("DATABASE_URL", "")
DB_DRIVER = os.getenv("DB_DRIVER", "mysql+pymysql")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", "3306"))
DB_USER = os.getenv("DB_USER", "admin")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "students_db")

# Row inserted on first boot when the table is empty
SAMPLE_STUDENT = {
    "id": "11111111-1111-1111-1111-111111111111",
    "name": "John Doe",
    "address": "Example Address",
    "city": "Example City",
    "state": "Example State",
    "email": "example@example.com",
    "phone": "9009009009",
}


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def database_url_from_env():
    """Build the SQLAlchemy URL from DATABASE_URL or the DB_* variables."""
    if DATABASE_URL:
        return DATABASE_URL
    return URL.create(
        DB_DRIVER,
        username=DB_USER,
        password=DB_PASSWORD or None,
        host=DB_HOST,
        port=DB_PORT,
        database=DB_NAME,
    )


class Database:
    """
    Store handle: one engine plus its session factory.

    Engine options depend on the backend:
    - server databases get a bounded pool with pre-ping
    - SQLite gets check_same_thread=False (FastAPI runs sync routes in a
      thread pool); in-memory SQLite additionally shares one connection
      through StaticPool so every session sees the same data
    """

    def __init__(self, url=None, echo: bool = False):
        self.url = url if url is not None else database_url_from_env()
        url_str = str(self.url)

        engine_kwargs = {"echo": echo}
        if url_str.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url_str in ("sqlite://", "sqlite:///:memory:"):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update({
                "pool_size": 10,
                "max_overflow": 20,
                "pool_pre_ping": True,
            })

        self.engine = create_engine(self.url, **engine_kwargs)

        # Rows handed out by the service stay readable after later commits
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False,
                                         expire_on_commit=False, bind=self.engine)

    def session(self):
        return self.SessionLocal()

    def ping(self) -> bool:
        """Run SELECT 1; False when the store cannot be reached."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            log_with_context(logger, "WARNING", "Database ping failed",
                             extra_data={"error": str(e)})
            return False

    def dispose(self):
        self.engine.dispose()
        log_with_context(logger, "INFO", "Database pool closed")


def init_database(database: Database):
    """
    Create the students table if absent and seed the sample row when empty.

    Safe to run on every boot: the seed is only inserted into an empty table.
    """
    from students_api.models.student import Student

    Base.metadata.create_all(bind=database.engine)
    log_with_context(logger, "INFO", "Students table ready")

    db = database.session()
    try:
        count = db.scalar(select(func.count()).select_from(Student))
        if count == 0:
            db.add(Student(**SAMPLE_STUDENT))
            db.commit()
            log_with_context(logger, "INFO", "Sample student created",
                             context={"student_id": SAMPLE_STUDENT["id"]})
    finally:
        db.close()


def startup(database: Database):
    """
    Connect and initialize the store, exiting the process on failure.

    Serving requests against a broken store is never attempted.
    """
    try:
        with database.engine.connect():
            pass
        log_with_context(logger, "INFO", "Connected to database",
                         extra_data={"backend": database.engine.dialect.name})
        init_database(database)
    except SQLAlchemyError as e:
        log_with_context(logger, "CRITICAL", "Failed to initialize database",
                         extra_data={"error": str(e)}, exc_info=e)
        raise SystemExit(1) from e


def get_db(request: Request):
    """
    FastAPI dependency that provides a database session.

    Yields a session from the application's store handle and closes it after
    the request, returning the connection to the pool even on errors.
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
