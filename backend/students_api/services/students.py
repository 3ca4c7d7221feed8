"""
Student Service - CRUD operations over the students table.

Each operation validates (where applicable), issues a single statement
against the store, and re-reads the affected row so callers always see
persisted state:
- create: INSERT, then SELECT by id
- update: UPDATE ... WHERE id, 404 when no row matched, then SELECT by id
- delete: DELETE ... WHERE id, 404 when no row matched
- list/export: SELECT ordered by created_at DESC, then insertion order DESC

Returned rows are detached from the session with every column loaded, so
they stay readable after later commits, rollbacks or deletes.

Update is whole-record replacement: fields missing from the payload are
written as empty strings.

Store failures are logged with their cause on the db channel and re-raised
as StoreError with a generic tag.
"""

import time
import uuid
from contextlib import contextmanager
from typing import Callable, List, Mapping

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from students_api.exceptions import StoreError, StudentNotFoundError, StudentValidationError
from students_api.logging_config import get_logger, log_with_context
from students_api.models.student import Student, utcnow
from students_api.services.validation import validate_student

logger = get_logger("students")
db_logger = get_logger("db")

READ_ERROR = "DB read error"
INSERT_ERROR = "DB insert error"
UPDATE_ERROR = "DB update error"
DELETE_ERROR = "DB delete error"


def generate_student_id() -> str:
    return str(uuid.uuid4())


class StudentService:
    """Orchestrates validation and persistence for one database session."""

    def __init__(self, db: Session, now: Callable = utcnow,
                 id_factory: Callable[[], str] = generate_student_id):
        self.db = db
        self.now = now
        self.id_factory = id_factory

    @contextmanager
    def _store(self, tag: str, student_id: str = None):
        """Translate SQLAlchemy failures into StoreError, rolling back first."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            log_with_context(db_logger, "ERROR", tag,
                             context={"student_id": student_id} if student_id else None,
                             extra_data={"error": str(e), "error_type": type(e).__name__},
                             exc_info=e)
            raise StoreError(tag) from e

    def _find(self, student_id: str):
        """SELECT by id; the row is returned detached from the session."""
        student = self.db.scalars(
            select(Student)
            .where(Student.id == student_id)
            .execution_options(populate_existing=True)
        ).first()
        if student is not None:
            self.db.expunge(student)
        return student

    def list_students(self) -> List[Student]:
        """All records, newest first."""
        start_time = time.time()
        with self._store(READ_ERROR):
            students = list(self.db.scalars(
                select(Student).order_by(Student.created_at.desc(), Student.insert_seq.desc())
            ))
        for student in students:
            self.db.expunge(student)
        duration_ms = (time.time() - start_time) * 1000
        log_with_context(logger, "DEBUG", "Listed {} students".format(len(students)),
                         extra_data={"duration_ms": round(duration_ms, 2)})
        return students

    def export_students(self) -> List[Student]:
        """Full-table dump for download; same order as list_students."""
        students = self.list_students()
        log_with_context(logger, "INFO", "Exported {} students".format(len(students)))
        return students

    def get_student(self, student_id: str) -> Student:
        with self._store(READ_ERROR, student_id):
            student = self._find(student_id)
        if student is None:
            raise StudentNotFoundError(student_id)
        return student

    def create_student(self, payload: Mapping) -> Student:
        result = validate_student(payload)
        if not result.is_valid:
            raise StudentValidationError(result.errors)

        student_id = self.id_factory()
        with self._store(INSERT_ERROR, student_id):
            self.db.add(Student(id=student_id, created_at=self.now(), **result.record))
            self.db.commit()
            student = self._find(student_id)

        log_with_context(logger, "INFO", "Created student: {}".format(student.name),
                         context={"student_id": student_id})
        return student

    def update_student(self, student_id: str, payload: Mapping) -> Student:
        result = validate_student(payload)
        if not result.is_valid:
            raise StudentValidationError(result.errors)

        with self._store(UPDATE_ERROR, student_id):
            outcome = self.db.execute(
                update(Student)
                .where(Student.id == student_id)
                .values(**result.record)
                .execution_options(synchronize_session=False)
            )
            if outcome.rowcount == 0:
                self.db.rollback()
                raise StudentNotFoundError(student_id)
            self.db.commit()
            student = self._find(student_id)

        # Deleted between the UPDATE and the re-read
        if student is None:
            raise StudentNotFoundError(student_id)

        log_with_context(logger, "INFO", "Updated student: {}".format(student.name),
                         context={"student_id": student_id})
        return student

    def delete_student(self, student_id: str) -> bool:
        with self._store(DELETE_ERROR, student_id):
            outcome = self.db.execute(
                delete(Student)
                .where(Student.id == student_id)
                .execution_options(synchronize_session=False)
            )
            if outcome.rowcount == 0:
                self.db.rollback()
                raise StudentNotFoundError(student_id)
            self.db.commit()

        log_with_context(logger, "INFO", "Deleted student",
                         context={"student_id": student_id})
        return True
