"""
Conversation -> Patient projection.

A conversation record carries no structured patient card, so one is derived:
identity comes from user_info, age/gender from report.patient_info when
present and otherwise from a keyword scan of the chat transcript. The scan is
deliberately naive (first match wins) and falls back to age 30 / "Unknown".
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pulsedesk.core.config import settings
from pulsedesk.schemas import Patient

PATIENT_ID_PREFIX = "PT-"
DEFAULT_AGE = 30
UNKNOWN_GENDER = "Unknown"

_AGE_RE = re.compile(r"\b(\d+)\s*(?:years old|yrs|year old)\b", re.IGNORECASE)


def patient_id_for(conversation_id: str) -> str:
    return f"{PATIENT_ID_PREFIX}{conversation_id[:8]}"


def avatar_url(seed: str) -> str:
    return f"{settings.AVATAR_BASE_URL.rstrip('/')}/{seed}.svg"


def chat_text(chat: Optional[List[Dict[str, Any]]]) -> str:
    """Lower-cased transcript: the first value of every turn, space-joined."""
    parts = []
    for turn in chat or []:
        value = next(iter(turn.values()), None) if isinstance(turn, dict) else None
        parts.append("" if value is None else str(value))
    return " ".join(parts).lower()


def extract_age(text: str) -> int:
    """Age from "<n> years old" / "<n> yrs" / "<n> year old"; 0 if absent."""
    m = _AGE_RE.search(text)
    return int(m.group(1)) if m else 0


def extract_gender(text: str) -> str:
    """"Male" or "Female" from a keyword scan; "" if neither is mentioned."""
    if " male " in text or "i am male" in text:
        return "Male"
    if " female " in text or "i am female" in text:
        return "Female"
    return ""


def _as_age(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def extract_patient_from_conversation(conversation: Dict[str, Any]) -> Optional[Patient]:
    if not conversation:
        return None
    user_info = conversation.get("user_info")
    if not isinstance(user_info, dict) or not user_info.get("name"):
        return None

    conversation_id = str(conversation.get("_id") or "")
    report = conversation.get("report")
    chat = conversation.get("chat")

    age = 0
    gender = ""
    notes = ""

    if isinstance(report, dict):
        patient_info = report.get("patient_info")
        if isinstance(patient_info, dict):
            age = _as_age(patient_info.get("age"))
            gender = str(patient_info.get("gender") or "")
        notes = str(report.get("summary") or report.get("assessment") or "")

    if (not age or not gender) and chat:
        text = chat_text(chat)
        if not age:
            age = extract_age(text)
        if not gender:
            gender = extract_gender(text)

    patient_id = patient_id_for(conversation_id)
    name = str(user_info["name"])

    return Patient(
        id=patient_id,
        name=name,
        age=age or DEFAULT_AGE,
        gender=gender or UNKNOWN_GENDER,
        contact=str(user_info.get("phone_number") or ""),
        email=str(user_info.get("email") or ""),
        last_visit=datetime.now(timezone.utc).date().isoformat(),
        next_appointment="",
        status="Active",
        insurance_provider="",
        policy_number="",
        profile_image=avatar_url(name or patient_id),
        notes=notes,
        conversation_id=conversation_id,
    )
