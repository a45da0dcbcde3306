import pytest

from pulsedesk.projection import (
    chat_text,
    extract_age,
    extract_gender,
    extract_patient_from_conversation,
    patient_id_for,
)


def _conversation(chat=None, report=None, **user_info):
    info = {"name": "Emma Johnson", "email": "emma@example.com", "phone_number": "555-0101"}
    info.update(user_info)
    return {
        "_id": "a1b2c3d4e5f6a7b8c9d0",
        "chat": chat or [],
        "user_info": info,
        "report": report if report is not None else {},
    }


def test_identity_copied_from_user_info():
    p = extract_patient_from_conversation(_conversation())

    assert p is not None
    assert p.id == "PT-a1b2c3d4"
    assert p.name == "Emma Johnson"
    assert p.email == "emma@example.com"
    assert p.contact == "555-0101"
    assert p.conversation_id == "a1b2c3d4e5f6a7b8c9d0"
    assert p.status == "Active"
    assert p.profile_image.endswith("/Emma Johnson.svg")


def test_missing_user_info_or_name_is_rejected():
    conv = _conversation()
    conv.pop("user_info")
    assert extract_patient_from_conversation(conv) is None
    assert extract_patient_from_conversation(_conversation(name="")) is None
    assert extract_patient_from_conversation({}) is None


def test_age_and_gender_from_chat():
    chat = [
        {"AI": "How old are you?"},
        {"User": "I am 34 years old and I am female"},
    ]
    p = extract_patient_from_conversation(_conversation(chat=chat))

    assert p.age == 34
    assert p.gender == "Female"


def test_defaults_when_nothing_is_mentioned():
    p = extract_patient_from_conversation(_conversation(chat=[{"User": "My head hurts."}]))

    assert p.age == 30
    assert p.gender == "Unknown"
    assert p.notes == ""


def test_patient_info_wins_over_chat():
    chat = [{"User": "I am 50 years old, a male teacher"}]
    report = {"patient_info": {"age": 61, "gender": "Female"}}
    p = extract_patient_from_conversation(_conversation(chat=chat, report=report))

    assert p.age == 61
    assert p.gender == "Female"


def test_partial_patient_info_is_completed_from_chat():
    chat = [{"User": "I'm a 35 yrs old male runner"}]
    report = {"patient_info": {"gender": "Other"}}
    p = extract_patient_from_conversation(_conversation(chat=chat, report=report))

    assert p.age == 35
    assert p.gender == "Other"


def test_notes_prefer_summary_then_assessment():
    with_summary = _conversation(report={"summary": "Dry cough.", "assessment": "Bronchitis."})
    with_assessment = _conversation(report={"assessment": "Bronchitis."})

    assert extract_patient_from_conversation(with_summary).notes == "Dry cough."
    assert extract_patient_from_conversation(with_assessment).notes == "Bronchitis."


def test_chat_text_is_lowercased_first_values():
    chat = [{"User": "Hello THERE"}, {}, {"AI": "Hi"}]
    assert chat_text(chat) == "hello there  hi"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("i am 34 years old", 34),
        ("she turned 7 year old today", 7),
        ("patient, 58 yrs, smoker", 58),
        ("born in 1990", 0),
        ("", 0),
    ],
)
def test_extract_age(text, expected):
    assert extract_age(text) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("i am a female patient", "Female"),
        ("i am female", "Female"),
        ("a male patient of 40", "Male"),
        ("i am male", "Male"),
        ("i feel unwell", ""),
        ("males and females", ""),
    ],
)
def test_extract_gender(text, expected):
    assert extract_gender(text) == expected


def test_patient_id_uses_first_eight_characters():
    assert patient_id_for("0123456789abcdef") == "PT-01234567"
    assert patient_id_for("abc") == "PT-abc"


def test_non_string_identity_fields_are_coerced():
    conv = _conversation(phone_number=5551234, email=None)

    p = extract_patient_from_conversation(conv)

    assert p.contact == "5551234"
    assert p.email == ""
