import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class CamelModel(BaseModel):
    """Dashboard entities travel as camelCase JSON (patientId, profileImage, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Conversation-log wire types
# ---------------------------------------------------------------------------


class ConditionMatch(BaseModel):
    cond_name_eng: str
    severity: Literal["High", "Moderate", "Low"]
    count: int = 1


class UserInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    email: str = ""
    phone_number: str = ""


class ConversationCreate(BaseModel):
    chat: List[Dict[str, Any]] = Field(default_factory=list)
    user_info: UserInfo
    report: Any = Field(default_factory=dict)
    matches: Optional[Dict[str, ConditionMatch]] = None


class ConversationUpdate(BaseModel):
    chat: Optional[List[Dict[str, Any]]] = None
    user_info: Optional[UserInfo] = None
    report: Any = None
    matches: Optional[Dict[str, ConditionMatch]] = None


# ---------------------------------------------------------------------------
# Dashboard entities
# ---------------------------------------------------------------------------


class Patient(CamelModel):
    id: str
    name: str
    age: int
    gender: str
    contact: str = ""
    email: str = ""
    last_visit: str = ""
    next_appointment: str = ""
    status: str = "Active"
    insurance_provider: str = ""
    policy_number: str = ""
    profile_image: str = ""
    notes: Optional[str] = None
    conversation_id: Optional[str] = None


class Appointment(CamelModel):
    id: str
    patient_id: str
    patient_name: str
    profile_image: str = ""
    date: str
    time: str
    type: str
    status: str = "Pending"


class PatientReport(CamelModel):
    id: str
    patient_id: str
    date: str
    content: str
    created_by: str


class PrescriptionData(CamelModel):
    medications: str
    dosage: str
    instructions: str
    notes: str = ""


class Prescription(PrescriptionData):
    id: str
    patient_id: str
    patient_name: str
    date: str


# ---------------------------------------------------------------------------
# Dashboard request/response bodies
# ---------------------------------------------------------------------------


class PatientIn(CamelModel):
    name: str
    age: int
    gender: str
    contact: str
    email: str
    status: str = "Active"
    insurance_provider: str = ""
    policy_number: str = ""
    profile_image: str = ""
    notes: str = ""

    @field_validator("name", "gender", "contact", "email")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Please fill in all required fields")
        return value

    @field_validator("age")
    @classmethod
    def _positive_age(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Please fill in all required fields")
        return value

    @field_validator("email")
    @classmethod
    def _valid_email(cls, value: str) -> str:
        if not EMAIL_RE.match(value):
            raise ValueError("Please enter a valid email address")
        return value


class AppointmentIn(CamelModel):
    date: Optional[str] = None
    time: str = "09:00"
    type: str = "Check-up"


class ReportIn(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Report content is required")
        return value


class ConversationLink(CamelModel):
    conversation_id: str

    @field_validator("conversation_id")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Conversation id is required")
        return value


class PatientOut(CamelModel):
    patient: Patient
    synced: bool


class AppointmentOut(CamelModel):
    appointment: Appointment
    synced: bool


class ReportOut(CamelModel):
    report: PatientReport
    synced: bool


class PrescriptionOut(CamelModel):
    prescription: Prescription
    synced: bool


class DashboardStats(CamelModel):
    total_patients: int
    appointments_today: int
    pending_appointments: int
    linked_patients: int
    reports_written: int
    prescriptions_issued: int
