from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


# --- Request body ---
class StudentPayload(BaseModel):
    """
    Create/update body. Every field is an optional string; unknown keys are
    dropped. Field rules (length, email, phone) are applied afterwards by
    services.validation so all violations are reported together.
    """
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


# --- Responses ---
class StudentRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: str = ""
    city: str = ""
    state: str = ""
    email: str = ""
    phone: str = ""
    created_at: Optional[datetime] = None


class DeleteResponse(BaseModel):
    success: bool
