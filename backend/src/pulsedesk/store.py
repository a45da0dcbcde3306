"""
Dashboard application state.

State is a single DashboardState value. It only changes through
``reduce(state, action)``, a pure function over action dicts of the form
``{"type": "<action>", ...payload}``. DashboardStore holds the current value
and is the one place that dispatches.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from pulsedesk import sync
from pulsedesk.log_client import LogServiceClient
from pulsedesk.projection import patient_id_for
from pulsedesk.schemas import (
    Appointment,
    DashboardStats,
    Patient,
    PatientReport,
    Prescription,
)

logger = logging.getLogger(__name__)

Action = Dict[str, Any]


class DashboardState(BaseModel):
    patients: List[Patient] = Field(default_factory=list)
    appointments: List[Appointment] = Field(default_factory=list)
    reports: List[PatientReport] = Field(default_factory=list)
    prescriptions: List[Prescription] = Field(default_factory=list)
    loaded_at: Optional[datetime] = None


def _map_patient(state: DashboardState, patient_id: str, **changes) -> List[Patient]:
    return [
        p.model_copy(update=changes) if p.id == patient_id else p
        for p in state.patients
    ]


def _patients_loaded(state: DashboardState, action: Action) -> DashboardState:
    return DashboardState(
        patients=list(action.get("patients") or []),
        appointments=list(action.get("appointments") or []),
        loaded_at=action.get("loaded_at") or datetime.now(timezone.utc),
    )


def _patient_added(state: DashboardState, action: Action) -> DashboardState:
    return state.model_copy(update={"patients": [action["patient"], *state.patients]})


def _patient_updated(state: DashboardState, action: Action) -> DashboardState:
    # previous_id covers a patient re-keyed by its first sync
    updated: Patient = action["patient"]
    target = action.get("previous_id") or updated.id
    patients = [updated if p.id == target else p for p in state.patients]
    return state.model_copy(update={"patients": patients})


def _patient_deleted(state: DashboardState, action: Action) -> DashboardState:
    pid = action["patient_id"]
    return state.model_copy(update={"patients": [p for p in state.patients if p.id != pid]})


def _appointment_booked(state: DashboardState, action: Action) -> DashboardState:
    appt: Appointment = action["appointment"]
    return state.model_copy(
        update={
            "appointments": [appt, *state.appointments],
            "patients": _map_patient(state, appt.patient_id, next_appointment=appt.date),
        }
    )


def _report_saved(state: DashboardState, action: Action) -> DashboardState:
    report: PatientReport = action["report"]
    return state.model_copy(
        update={
            "reports": [report, *state.reports],
            "patients": _map_patient(state, report.patient_id, notes=report.content),
        }
    )


def _reports_loaded(state: DashboardState, action: Action) -> DashboardState:
    known = {r.id for r in state.reports}
    fresh = [r for r in action.get("reports") or [] if r.id not in known]
    return state.model_copy(update={"reports": [*state.reports, *fresh]})


def _prescription_saved(state: DashboardState, action: Action) -> DashboardState:
    return state.model_copy(
        update={"prescriptions": [action["prescription"], *state.prescriptions]}
    )


def _conversation_linked(state: DashboardState, action: Action) -> DashboardState:
    # The local patient replaces any projection already loaded for the conversation
    conversation_id = action["conversation_id"]
    source_id = action["patient_id"]
    target_id = patient_id_for(conversation_id)
    patients = [
        p.model_copy(update={"id": target_id, "conversation_id": conversation_id})
        if p.id == source_id
        else p
        for p in state.patients
        if p.id != target_id or p.id == source_id
    ]
    return state.model_copy(update={"patients": patients})


_REDUCERS: Dict[str, Callable[[DashboardState, Action], DashboardState]] = {
    "patients_loaded": _patients_loaded,
    "patient_added": _patient_added,
    "patient_updated": _patient_updated,
    "patient_deleted": _patient_deleted,
    "appointment_booked": _appointment_booked,
    "report_saved": _report_saved,
    "reports_loaded": _reports_loaded,
    "prescription_saved": _prescription_saved,
    "conversation_linked": _conversation_linked,
}


def reduce(state: DashboardState, action: Action) -> DashboardState:
    handler = _REDUCERS.get(action.get("type", ""))
    if handler is None:
        return state
    return handler(state, action)


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------


def get_patient(state: DashboardState, patient_id: str) -> Optional[Patient]:
    return next((p for p in state.patients if p.id == patient_id), None)


def filter_patients(state: DashboardState, term: str = "") -> List[Patient]:
    needle = term.lower()
    return [
        p
        for p in state.patients
        if needle in p.name.lower()
        or needle in p.id.lower()
        or (p.email and needle in p.email.lower())
    ]


def filter_appointments(state: DashboardState, status: str = "All") -> List[Appointment]:
    if status == "All":
        return list(state.appointments)
    return [a for a in state.appointments if a.status == status]


def reports_for_patient(state: DashboardState, patient_id: str) -> List[PatientReport]:
    return [r for r in state.reports if r.patient_id == patient_id]


def unlinked_patients(state: DashboardState) -> List[Patient]:
    return [p for p in state.patients if not p.conversation_id]


def filter_conversations(conversations: Iterable[Dict[str, Any]], term: str = "") -> List[Dict[str, Any]]:
    """Match on user_info name/email/phone and the first five chat messages."""
    needle = term.lower()
    out = []
    for conv in conversations:
        user_info = conv.get("user_info") or {}
        fields = [
            user_info.get("name") or "",
            user_info.get("email") or "",
            user_info.get("phone_number") or "",
        ]
        for turn in (conv.get("chat") or [])[:5]:
            fields.append(str(next(iter(turn.values()), "") or "") if isinstance(turn, dict) else "")
        if needle in " ".join(fields).lower():
            out.append(conv)
    return out


def dashboard_stats(state: DashboardState, today: Optional[str] = None) -> DashboardStats:
    today = today or datetime.now(timezone.utc).date().isoformat()
    return DashboardStats(
        total_patients=len(state.patients),
        appointments_today=sum(1 for a in state.appointments if a.date == today),
        pending_appointments=sum(1 for a in state.appointments if a.status == "Pending"),
        linked_patients=sum(1 for p in state.patients if p.conversation_id),
        reports_written=len(state.reports),
        prescriptions_issued=len(state.prescriptions),
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class DashboardStore:
    def __init__(self, state: Optional[DashboardState] = None) -> None:
        self.state = state or DashboardState()

    def dispatch(self, action: Action) -> DashboardState:
        self.state = reduce(self.state, action)
        logger.debug("dispatch type=%s patients=%d", action.get("type"), len(self.state.patients))
        return self.state

    async def refresh(self, client: LogServiceClient) -> DashboardState:
        """Full reload from the log service; local-only state is discarded."""
        patients = await sync.get_all_patients(client)
        appointments = await sync.get_all_appointments(client)
        logger.info("Loaded %d patients, %d appointments", len(patients), len(appointments))
        return self.dispatch(
            {"type": "patients_loaded", "patients": patients, "appointments": appointments}
        )
