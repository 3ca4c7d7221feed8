"""
Student Records Service - FastAPI Application Entry Point.

This is the main application module that:
1. Builds the FastAPI app around an injected Database handle
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Maps domain exceptions to HTTP responses
5. Registers API routes and serves the static front-end

The application follows a modular architecture:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response models
- services/: Validation and CRUD logic
- logging_config.py: Structured logging configuration
- database.py: Store handle, table bootstrap and sessions
"""

import os
import time
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from students_api.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from students_api.database import Database, startup
from students_api.exceptions import StoreError, StudentNotFoundError, StudentValidationError
from students_api.routes import health, students

PORT = int(os.getenv("PORT", "3000"))
HOST = os.getenv("HOST", "0.0.0.0")

STATIC_DIR = Path(__file__).resolve().parent / "static"

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")


def _request_error_entry(error: dict) -> dict:
    """Reshape a pydantic/FastAPI error into the 422 error entry format."""
    loc = error.get("loc") or ()
    return {
        "type": "field",
        "msg": error.get("msg", "Invalid value"),
        "path": ".".join(str(part) for part in loc[1:]),
        "location": loc[0] if loc else "body",
        "value": error.get("input"),
    }


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(StudentValidationError)
    async def student_validation_handler(request: Request, exc: StudentValidationError):
        log_with_context(logger, "INFO", "Validation failed: {}".format(exc),
                         extra_data={"fields": [e.field for e in exc.errors]})
        return JSONResponse(
            status_code=422,
            content={"errors": jsonable_encoder([e.to_dict() for e in exc.errors])},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={"errors": jsonable_encoder([_request_error_entry(e) for e in exc.errors()])},
        )

    @app.exception_handler(StudentNotFoundError)
    async def not_found_handler(request: Request, exc: StudentNotFoundError):
        return JSONResponse(status_code=404, content={"error": "Not found"})

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        # Cause already logged by the service
        return JSONResponse(status_code=500, content={"error": exc.tag})


def create_app(database: Database = None) -> FastAPI:
    """
    Build the application around a store handle.

    The handle is initialized (table + seed) when the app starts and
    disposed when it shuts down. Without an explicit handle one is built
    from the DATABASE_URL / DB_* environment variables.
    """
    database = database if database is not None else Database()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        startup(database)
        yield
        log_with_context(logger, "INFO", "Shutting down, closing database pool")
        database.dispose()

    app = FastAPI(
        title="Student Records Service",
        description="CRUD API for student records with JSON export and a static front-end.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Disposition"]
    )

    # ──────────────────────────────────────────────────────────
    # Request ID Middleware
    #
    # Generates a UUID per incoming request, stores it in a context
    # variable for log entries, returns it in X-Request-ID and logs
    # request start/end with latency.
    # ──────────────────────────────────────────────────────────
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        req_id = generate_request_id()
        request_id_var.set(req_id)

        start_time = time.time()

        log_with_context(logger, "INFO",
            f"Request started: {request.method} {request.url.path}",
            context={"request_id": req_id},
            extra_data={
                "ip": request.client.host if request.client else "unknown",
                "user_agent": request.headers.get("user-agent", ""),
            })

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        response.headers["X-Request-ID"] = req_id

        log_with_context(logger, "INFO",
            f"Request completed: {request.method} {request.url.path} → {response.status_code}",
            context={"request_id": req_id},
            extra_data={
                "duration_ms": round(duration_ms, 2),
                "status_code": response.status_code
            })

        return response

    register_exception_handlers(app)

    app.include_router(students.router, tags=["Students"])
    app.include_router(health.router, tags=["Health"])

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.get("/", include_in_schema=False)
    def index():
        """Landing page of the browser front-end."""
        return FileResponse(STATIC_DIR / "index.html")

    return app


app = create_app()


def run():
    """Console entry point: serve the module-level app with uvicorn."""
    log_with_context(logger, "INFO", f"Server running on port {PORT}")
    uvicorn.run(app, host=HOST, port=PORT, log_config=None)


if __name__ == "__main__":
    run()
