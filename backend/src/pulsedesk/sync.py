"""
Read/write synchronisation between dashboard entities and conversation logs.

Reads fetch conversations and project them into Patients. Writes are
read-modify-write cycles on the owning conversation's report/user_info/chat.
Every write returns a bool; a falsy result means nothing was written (or the
remote rejected the write) and the caller decides how to surface it.

There is no versioning: two writes racing on the same conversation resolve
as last-write-wins on the whole document.
"""

import logging
import random
import string
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pulsedesk.core.config import settings
from pulsedesk.log_client import LogServiceClient
from pulsedesk.projection import PATIENT_ID_PREFIX, extract_patient_from_conversation
from pulsedesk.schemas import (
    Appointment,
    Patient,
    PatientReport,
    Prescription,
    PrescriptionData,
)

logger = logging.getLogger(__name__)

NEW_PATIENT_MATCHES = {
    "match_1": {
        "cond_name_eng": "Check Required",
        "severity": "Moderate",
        "count": 1,
    },
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _short_id(prefix: str) -> str:
    return f"{prefix}{random.randrange(10000)}"


def new_local_patient_id() -> str:
    alphabet = string.ascii_uppercase + string.digits
    return PATIENT_ID_PREFIX + "".join(random.choices(alphabet, k=9))


def new_appointment(patient: Patient, date: str, time: str, type: str) -> Appointment:
    return Appointment(
        id=_short_id("A"),
        patient_id=patient.id,
        patient_name=patient.name,
        profile_image=patient.profile_image,
        date=date,
        time=time,
        type=type,
        status="Pending",
    )


def new_patient_report(patient_id: str, content: str) -> PatientReport:
    return PatientReport(
        id=_short_id("R"),
        patient_id=patient_id,
        date=_now_iso(),
        content=content,
        created_by=settings.CLINICIAN_NAME,
    )


def new_prescription(patient: Patient, data: PrescriptionData) -> Prescription:
    return Prescription(
        id=_short_id("P"),
        patient_id=patient.id,
        patient_name=patient.name,
        date=_now_iso(),
        **data.model_dump(),
    )


def prescription_chat_text(prescription: Prescription) -> str:
    text = (
        f"{settings.CLINICIAN_NAME} prescribed {prescription.medications} "
        f"for {prescription.patient_name}. Dosage: {prescription.dosage}. "
        f"Instructions: {prescription.instructions}."
    )
    if prescription.notes:
        text += f" Additional notes: {prescription.notes}"
    return text


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(by_alias=True)


def _report_of(conversation: Dict[str, Any]) -> Dict[str, Any]:
    report = conversation.get("report")
    return dict(report) if isinstance(report, dict) else {}


def _list_of(report: Dict[str, Any], key: str) -> List[Any]:
    value = report.get(key)
    return list(value) if isinstance(value, list) else []


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_all_patients(client: LogServiceClient) -> List[Patient]:
    conversations = await client.fetch_all_conversations()
    patients = []
    for conv in conversations:
        if not conv or not (conv.get("user_info") or {}).get("name"):
            continue
        try:
            patient = extract_patient_from_conversation(conv)
        except ValueError as e:
            logger.warning("Skipping malformed conversation %s: %s", conv.get("_id"), e)
            continue
        if patient is not None:
            patients.append(patient)
    return patients


async def find_patient(client: LogServiceClient, patient_id: str) -> Optional[Patient]:
    for patient in await get_all_patients(client):
        if patient.id == patient_id:
            return patient
    return None


async def get_all_appointments(client: LogServiceClient) -> List[Appointment]:
    appointments: List[Appointment] = []
    for conv in await client.fetch_all_conversations():
        for raw in _list_of(_report_of(conv), "appointments"):
            try:
                appointments.append(Appointment.model_validate(raw))
            except ValueError as e:
                logger.warning("Skipping malformed appointment in %s: %s", conv.get("_id"), e)
    return appointments


async def get_patient_reports(client: LogServiceClient, patient_id: str) -> List[PatientReport]:
    patient = await find_patient(client, patient_id)
    if not patient or not patient.conversation_id:
        return []

    conversation = await client.fetch_conversation(patient.conversation_id)
    if not conversation:
        return []

    reports = []
    for raw in _list_of(_report_of(conversation), "patientReports"):
        try:
            reports.append(PatientReport.model_validate(raw))
        except ValueError as e:
            logger.warning("Skipping malformed report for %s: %s", patient_id, e)
    return reports


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def save_patient(client: LogServiceClient, patient: Patient) -> bool:
    """Create or update the conversation behind a patient.

    A patient without conversation_id gets a fresh conversation; the new id
    is written onto ``patient`` so the next save updates instead of forking
    a duplicate.
    """
    user_info = {
        "name": patient.name,
        "email": patient.email,
        "phone_number": patient.contact,
    }

    if not patient.conversation_id:
        result = await client.save_conversation(
            [{"User": f"Initial patient record for {patient.name}"}],
            user_info,
            {
                "patient_info": {"age": patient.age, "gender": patient.gender},
                "summary": patient.notes or "New patient record",
            },
            NEW_PATIENT_MATCHES,
        )
        saved = result.get("saved") if result.get("success") else None
        if saved and saved.get("_id"):
            patient.conversation_id = saved["_id"]
            logger.info("Created conversation %s for patient %s", patient.conversation_id, patient.name)
            return True
        return False

    existing = await client.fetch_conversation(patient.conversation_id)
    if not existing:
        logger.warning("Conversation %s not found; patient %s not saved", patient.conversation_id, patient.id)
        return False

    merged_user_info = {**(existing.get("user_info") or {}), **user_info}

    report = existing.get("report")
    if report is None:
        report = {}
    if isinstance(report, dict):
        report = dict(report)
        report["patient_info"] = {
            **(report.get("patient_info") or {}),
            "age": patient.age,
            "gender": patient.gender,
        }
        if patient.notes:
            report["summary"] = patient.notes

    result = await client.update_conversation(
        patient.conversation_id,
        {
            "chat": existing.get("chat"),
            "user_info": merged_user_info,
            "report": report,
            "matches": existing.get("matches"),
        },
    )
    return bool(result.get("success"))


async def delete_patient(
    client: LogServiceClient,
    patient_id: str,
    conversation_id: Optional[str] = None,
) -> bool:
    if not conversation_id:
        return False
    result = await client.delete_conversation(conversation_id)
    if result.get("success"):
        logger.info("Deactivated conversation %s (patient %s)", conversation_id, patient_id)
    return bool(result.get("success"))


async def _owning_conversation(client: LogServiceClient, patient_id: str):
    patient = await find_patient(client, patient_id)
    if not patient or not patient.conversation_id:
        logger.info("Patient %s has no linked conversation", patient_id)
        return None, None

    conversation = await client.fetch_conversation(patient.conversation_id)
    if not conversation:
        return patient, None
    return patient, conversation


async def save_appointment(client: LogServiceClient, appointment: Appointment) -> bool:
    patient, conversation = await _owning_conversation(client, appointment.patient_id)
    if not conversation:
        return False

    report = _report_of(conversation)
    report["appointments"] = _list_of(report, "appointments") + [_dump(appointment)]

    result = await client.update_conversation(patient.conversation_id, {"report": report})
    return bool(result.get("success"))


async def save_patient_report(
    client: LogServiceClient,
    patient_id: str,
    content: str,
    report: Optional[PatientReport] = None,
) -> bool:
    """Append a clinician report; the conversation summary becomes its content."""
    patient, conversation = await _owning_conversation(client, patient_id)
    if not conversation:
        return False

    entry = report or new_patient_report(patient_id, content)

    updated = _report_of(conversation)
    updated["patientReports"] = _list_of(updated, "patientReports") + [_dump(entry)]
    updated["summary"] = content

    result = await client.update_conversation(patient.conversation_id, {"report": updated})
    return bool(result.get("success"))


async def save_prescription(
    client: LogServiceClient,
    patient_id: str,
    data: PrescriptionData,
    prescription: Optional[Prescription] = None,
) -> bool:
    """Record a prescription as a chat turn plus a report.prescriptions entry.

    With PRESCRIPTION_WRITE_MODE=create (the default) the result is written
    through save_conversation, which stores a new conversation next to the
    original one. PRESCRIPTION_WRITE_MODE=update writes it in place.
    """
    patient, conversation = await _owning_conversation(client, patient_id)
    if not conversation:
        return False

    entry = prescription or new_prescription(patient, data)

    report = _report_of(conversation)
    report["prescriptions"] = _list_of(report, "prescriptions") + [_dump(entry)]

    chat = list(conversation.get("chat") or [])
    chat.append({"Doctor": prescription_chat_text(entry)})

    if settings.PRESCRIPTION_WRITE_MODE == "update":
        result = await client.update_conversation(
            patient.conversation_id, {"chat": chat, "report": report}
        )
    else:
        result = await client.save_conversation(chat, conversation.get("user_info") or {}, report)
    return bool(result.get("success"))
