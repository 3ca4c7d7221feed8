"""
Domain exceptions raised by the student service.

Each maps to one HTTP outcome (see the handlers registered in main.py):
- StudentValidationError → 422
- StudentNotFoundError   → 404
- StoreError             → 500, generic message only
"""


class StudentValidationError(Exception):
    """One or more field rules failed; carries the ordered error list."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(e.message for e in self.errors))


class StudentNotFoundError(Exception):
    """No record matches the requested id."""

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__(f"Student {student_id} not found")


class StoreError(Exception):
    """
    The store failed to read or write.

    `tag` is the only text sent to API callers; the original exception is
    kept on `__cause__` for logging.
    """

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(tag)
