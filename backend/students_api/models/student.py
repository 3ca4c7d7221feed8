"""
Student model - the single record type managed by the service.

Optional text fields are stored as empty strings, never NULL.
"""

import threading
import time
from datetime import datetime, timezone
from sqlalchemy import BigInteger, Column, DateTime, String
from sqlalchemy.dialects import mysql
from students_api.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp (MySQL DATETIME and SQLite store no offset)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


_seq_lock = threading.Lock()
_last_seq = 0


def next_insert_seq() -> int:
    """Strictly increasing per process; nanosecond wall clock across restarts."""
    global _last_seq
    with _seq_lock:
        _last_seq = max(time.time_ns(), _last_seq + 1)
        return _last_seq


# Microsecond precision on MySQL/MariaDB so newest-first ordering holds
# for rows created within the same second
Timestamp = DateTime().with_variant(mysql.DATETIME(fsp=6), "mysql", "mariadb")


class Student(Base):
    """SQLAlchemy model for the students table."""
    __tablename__ = "students"

    id = Column(String(36), primary_key=True,
                doc="UUID assigned by the service at creation")
    name = Column(String(255), nullable=False,
                  doc="Trimmed display name, at least 3 characters")
    address = Column(String(500), nullable=False, default="")
    city = Column(String(100), nullable=False, default="")
    state = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=False, default="",
                   doc="Empty or a syntactically valid address")
    phone = Column(String(20), nullable=False, default="",
                   doc="Empty or 7-15 digits")
    created_at = Column(Timestamp, nullable=False, default=utcnow,
                        doc="Insertion time, used for newest-first ordering")
    insert_seq = Column(BigInteger, nullable=False, default=next_insert_seq, index=True,
                        doc="Insertion order, breaks created_at ties")

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.name}', email='{self.email}')>"
