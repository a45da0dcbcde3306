import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from pulsedesk import sync
from pulsedesk.api.deps import get_log_client, get_store
from pulsedesk.log_client import LogServiceClient
from pulsedesk.projection import avatar_url, patient_id_for
from pulsedesk.schemas import (
    AppointmentIn,
    AppointmentOut,
    ConversationLink,
    Patient,
    PatientIn,
    PatientOut,
    PatientReport,
    PrescriptionData,
    PrescriptionOut,
    ReportIn,
    ReportOut,
)
from pulsedesk.store import (
    DashboardStore,
    filter_patients,
    get_patient,
    reports_for_patient,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def _require_patient(store: DashboardStore, patient_id: str) -> Patient:
    p = get_patient(store.state, patient_id)
    if not p:
        raise HTTPException(status_code=404, detail="Patient not found")
    return p


def _sync_failed(what: str, patient: Patient) -> HTTPException:
    logger.warning("Failed to sync %s for patient %s (conversation %s)", what, patient.id, patient.conversation_id)
    return HTTPException(status_code=502, detail=f"Failed to sync {what} with the conversation log")


@router.get("", response_model=list[Patient])
async def list_patients(search: str = "", store: DashboardStore = Depends(get_store)):
    return filter_patients(store.state, search)


@router.get("/{patient_id}", response_model=Patient)
async def read_patient(patient_id: str, store: DashboardStore = Depends(get_store)):
    return _require_patient(store, patient_id)


@router.post("", response_model=PatientOut, status_code=201)
async def create_patient(
    payload: PatientIn,
    store: DashboardStore = Depends(get_store),
    client: LogServiceClient = Depends(get_log_client),
):
    data = payload.model_dump()
    patient = Patient(
        id=sync.new_local_patient_id(),
        last_visit=_today(),
        **{**data, "profile_image": data["profile_image"] or avatar_url(payload.name)},
    )

    synced = await sync.save_patient(client, patient)
    if synced:
        # Re-key to the id the next reload will derive from the conversation.
        patient.id = patient_id_for(patient.conversation_id)
    else:
        logger.warning("Patient %s kept locally; conversation log unavailable", patient.id)

    store.dispatch({"type": "patient_added", "patient": patient})
    return PatientOut(patient=patient, synced=synced)


@router.put("/{patient_id}", response_model=PatientOut)
async def update_patient(
    patient_id: str,
    payload: PatientIn,
    store: DashboardStore = Depends(get_store),
    client: LogServiceClient = Depends(get_log_client),
):
    existing = _require_patient(store, patient_id)
    data = payload.model_dump()
    if not data["profile_image"]:
        data["profile_image"] = existing.profile_image
    updated = existing.model_copy(update=data)

    was_linked = bool(existing.conversation_id)
    synced = await sync.save_patient(client, updated)
    if not synced and was_linked:
        raise _sync_failed("patient", existing)
    if synced and not was_linked:
        updated.id = patient_id_for(updated.conversation_id)

    store.dispatch({"type": "patient_updated", "patient": updated, "previous_id": patient_id})
    return PatientOut(patient=updated, synced=synced)


@router.delete("/{patient_id}")
async def delete_patient(
    patient_id: str,
    store: DashboardStore = Depends(get_store),
    client: LogServiceClient = Depends(get_log_client),
):
    existing = _require_patient(store, patient_id)
    synced = False
    if existing.conversation_id:
        synced = await sync.delete_patient(client, existing.id, existing.conversation_id)
        if not synced:
            raise _sync_failed("deletion", existing)

    store.dispatch({"type": "patient_deleted", "patient_id": patient_id})
    return {"success": True, "synced": synced}


@router.post("/{patient_id}/appointments", response_model=AppointmentOut, status_code=201)
async def book_appointment(
    patient_id: str,
    payload: AppointmentIn,
    store: DashboardStore = Depends(get_store),
    client: LogServiceClient = Depends(get_log_client),
):
    patient = _require_patient(store, patient_id)
    appointment = sync.new_appointment(patient, payload.date or _today(), payload.time, payload.type)

    synced = False
    if patient.conversation_id:
        synced = await sync.save_appointment(client, appointment)
        if not synced:
            raise _sync_failed("appointment", patient)

    store.dispatch({"type": "appointment_booked", "appointment": appointment})
    return AppointmentOut(appointment=appointment, synced=synced)


@router.get("/{patient_id}/reports", response_model=list[PatientReport])
async def list_reports(
    patient_id: str,
    store: DashboardStore = Depends(get_store),
    client: LogServiceClient = Depends(get_log_client),
):
    patient = _require_patient(store, patient_id)
    if patient.conversation_id:
        remote = await sync.get_patient_reports(client, patient.id)
        store.dispatch({"type": "reports_loaded", "reports": remote})
    return reports_for_patient(store.state, patient_id)


@router.post("/{patient_id}/reports", response_model=ReportOut, status_code=201)
async def write_report(
    patient_id: str,
    payload: ReportIn,
    store: DashboardStore = Depends(get_store),
    client: LogServiceClient = Depends(get_log_client),
):
    patient = _require_patient(store, patient_id)
    report = sync.new_patient_report(patient.id, payload.content)

    synced = False
    if patient.conversation_id:
        synced = await sync.save_patient_report(client, patient.id, payload.content, report=report)
        if not synced:
            raise _sync_failed("report", patient)

    store.dispatch({"type": "report_saved", "report": report})
    return ReportOut(report=report, synced=synced)


@router.post("/{patient_id}/prescriptions", response_model=PrescriptionOut, status_code=201)
async def prescribe(
    patient_id: str,
    payload: PrescriptionData,
    store: DashboardStore = Depends(get_store),
    client: LogServiceClient = Depends(get_log_client),
):
    patient = _require_patient(store, patient_id)
    prescription = sync.new_prescription(patient, payload)

    synced = False
    if patient.conversation_id:
        synced = await sync.save_prescription(client, patient.id, payload, prescription=prescription)
        if not synced:
            raise _sync_failed("prescription", patient)

    store.dispatch({"type": "prescription_saved", "prescription": prescription})
    return PrescriptionOut(prescription=prescription, synced=synced)


@router.get("/{patient_id}/conversation")
async def patient_conversation(
    patient_id: str,
    store: DashboardStore = Depends(get_store),
    client: LogServiceClient = Depends(get_log_client),
):
    patient = _require_patient(store, patient_id)
    if not patient.conversation_id:
        raise HTTPException(status_code=404, detail="Patient has no linked conversation")

    conv = await client.fetch_conversation(patient.conversation_id)
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conv


@router.put("/{patient_id}/conversation", response_model=Patient)
async def link_conversation(
    patient_id: str,
    payload: ConversationLink,
    store: DashboardStore = Depends(get_store),
    client: LogServiceClient = Depends(get_log_client),
):
    _require_patient(store, patient_id)
    if not await client.fetch_conversation(payload.conversation_id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    store.dispatch(
        {
            "type": "conversation_linked",
            "patient_id": patient_id,
            "conversation_id": payload.conversation_id,
        }
    )
    return get_patient(store.state, patient_id_for(payload.conversation_id))
