"""
Health check route for container health checks and monitoring.

Reports 503 when the store does not answer SELECT 1.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/health")
def health_check(request: Request):
    if request.app.state.database.ping():
        return {"ok": True, "database": "connected"}
    return JSONResponse(status_code=503, content={"ok": False, "database": "disconnected"})
