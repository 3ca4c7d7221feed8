"""
HTTP client for the students API, used for bulk import and export.

Import replays one POST /api/students per item, in order. Items are
independent: a rejected item or a network failure is recorded in the
summary and the next item is still sent. Nothing is retried or rolled back.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import httpx

from students_api.logging_config import get_logger, log_with_context

logger = get_logger("import")

OPTIONAL_FIELDS = ("address", "city", "state", "email", "phone")
UNKNOWN_NAME = "Unknown"
NETWORK_ERROR = "Network error"


def _as_text(value) -> str:
    """Strings pass through, numbers are rendered, anything else is empty."""
    if not value:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def map_import_item(item) -> dict:
    """
    Map one entry of an import file to a create payload.

    The name falls back to `fullName`, then to "Unknown"; every other field
    defaults to an empty string. Numeric values (a phone stored as a JSON
    number) are sent as text. Non-object entries map to an all-default
    payload.
    """
    if not isinstance(item, dict):
        item = {}
    payload = {"name": _as_text(item.get("name")) or _as_text(item.get("fullName")) or UNKNOWN_NAME}
    for name in OPTIONAL_FIELDS:
        payload[name] = _as_text(item.get(name))
    return payload


@dataclass
class ImportSummary:
    total: int = 0
    created: int = 0
    failed: int = 0
    details: List[dict] = field(default_factory=list)


class StudentsClient:
    """
    Thin wrapper over an httpx.Client pointed at the service.

    Accepts an existing client (tests pass FastAPI's TestClient) or builds
    one for `base_url`.
    """

    def __init__(self, base_url: str = "http://localhost:3000",
                 client: Optional[httpx.Client] = None, timeout: float = 30.0):
        self._owns_client = client is None
        self.http = client if client is not None else httpx.Client(base_url=base_url, timeout=timeout)

    def close(self):
        if self._owns_client:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def create_student(self, payload: dict) -> httpx.Response:
        return self.http.post("/api/students", json=payload)

    def export_students(self) -> list:
        resp = self.http.get("/api/export")
        resp.raise_for_status()
        return resp.json()

    def import_students(self, items: Iterable) -> ImportSummary:
        """Create each item in turn; never stops early."""
        summary = ImportSummary()

        for index, item in enumerate(items):
            summary.total += 1
            payload = map_import_item(item)
            try:
                resp = self.create_student(payload)
            except httpx.TransportError as e:
                summary.failed += 1
                summary.details.append({"index": index, "status": "ERROR", "errors": [NETWORK_ERROR]})
                log_with_context(logger, "WARNING", "Import item {} failed: network error".format(index),
                                 extra_data={"error": str(e)})
                continue

            if resp.status_code == 201:
                summary.created += 1
                summary.details.append({"index": index, "status": "CREATED", "id": resp.json()["id"]})
            else:
                summary.failed += 1
                summary.details.append({"index": index, "status": "ERROR",
                                        "status_code": resp.status_code,
                                        "errors": _error_messages(resp)})

        log_with_context(logger, "INFO",
            "Import complete: {} created, {} failed".format(summary.created, summary.failed),
            extra_data={"total": summary.total})
        return summary


def _error_messages(resp: httpx.Response) -> List[str]:
    try:
        body = resp.json()
    except ValueError:
        return ["HTTP {}".format(resp.status_code)]
    if isinstance(body, dict) and "errors" in body:
        return [e.get("msg", "") for e in body["errors"]]
    if isinstance(body, dict) and "error" in body:
        return [body["error"]]
    return ["HTTP {}".format(resp.status_code)]
