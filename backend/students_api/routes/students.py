"""
Students API routes - CRUD and export for student records.

Routes only translate HTTP to StudentService calls. Domain exceptions
(validation, not found, store failure) are turned into responses by the
handlers registered in main.py.
"""

from typing import List
from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from students_api.database import get_db
from students_api.schemas.student import DeleteResponse, StudentPayload, StudentRecord
from students_api.services.students import StudentService

router = APIRouter()

EXPORT_FILENAME = "students.json"


def get_student_service(db: Session = Depends(get_db)) -> StudentService:
    return StudentService(db)


@router.get("/api/students", response_model=List[StudentRecord])
def list_students(service: StudentService = Depends(get_student_service)):
    """All students, newest first."""
    return service.list_students()


@router.get("/api/students/{student_id}", response_model=StudentRecord)
def get_student(student_id: str, service: StudentService = Depends(get_student_service)):
    return service.get_student(student_id)


@router.post("/api/students", response_model=StudentRecord, status_code=201)
def create_student(payload: StudentPayload, service: StudentService = Depends(get_student_service)):
    return service.create_student(payload.model_dump())


@router.put("/api/students/{student_id}", response_model=StudentRecord)
def update_student(student_id: str, payload: StudentPayload,
                   service: StudentService = Depends(get_student_service)):
    """Replace every mutable field; omitted optional fields become empty."""
    return service.update_student(student_id, payload.model_dump())


@router.delete("/api/students/{student_id}", response_model=DeleteResponse)
def delete_student(student_id: str, service: StudentService = Depends(get_student_service)):
    return DeleteResponse(success=service.delete_student(student_id))


@router.get("/api/export")
def export_students(service: StudentService = Depends(get_student_service)):
    """Download the whole table as a JSON file."""
    students = [StudentRecord.model_validate(s) for s in service.export_students()]
    return JSONResponse(
        content=jsonable_encoder(students),
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )
