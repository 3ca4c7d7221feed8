# tests/conftest.py

import itertools
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from students_api.database import Base, Database
from students_api.main import create_app
from students_api.models.student import Student  # noqa: F401  registers the table
from students_api.services.students import StudentService


@pytest.fixture
def database():
    database = Database("sqlite://")
    yield database
    database.dispose()


@pytest.fixture
def session(database):
    Base.metadata.create_all(bind=database.engine)
    db = database.session()
    yield db
    db.close()


@pytest.fixture
def clock():
    """Deterministic clock advancing one second per call."""
    start = datetime(2026, 1, 1, 12, 0, 0)
    ticks = itertools.count()
    return lambda: start + timedelta(seconds=next(ticks))


@pytest.fixture
def service(session, clock):
    return StudentService(session, now=clock)


@pytest.fixture
def app(database):
    return create_app(database=database)


@pytest.fixture
def client(app):
    # Entering the context runs startup: table creation and the sample row
    with TestClient(app) as c:
        yield c


@pytest.fixture
def valid_payload():
    return {
        "name": "John Doe",
        "address": "12 Main St",
        "city": "Springfield",
        "state": "IL",
        "email": "x@example.com",
        "phone": "5551234567",
    }
