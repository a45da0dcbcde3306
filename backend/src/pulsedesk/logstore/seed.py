from pulsedesk.logstore.session import AsyncSessionLocal
from pulsedesk.logstore.models import ConversationLog
from sqlalchemy import select
import logging

logger = logging.getLogger("seed")

SAMPLE_CONVERSATIONS = [
    {
        "chat": [
            {"User": "Hi, I have had a dry cough for two weeks."},
            {"AI": "I'm sorry to hear that. How old are you, and do you smoke?"},
            {"User": "I am 42 years old and I quit smoking last year. I am female by the way."},
            {"AI": "Thanks. Any fever or shortness of breath?"},
            {"User": "A mild fever in the evenings."},
        ],
        "user_info": {
            "name": "Emma Johnson",
            "email": "emma.johnson@example.com",
            "phone_number": "+1 (555) 123-4567",
        },
        "report": {
            "summary": "Persistent dry cough with evening low-grade fever.",
            "instructions": "Chest X-ray if symptoms persist beyond three weeks.",
            "qa": {"smoker": "former", "fever": "mild, evenings"},
        },
        "matches": {
            "match_1": {"cond_name_eng": "Acute bronchitis", "severity": "Moderate", "count": 3},
            "match_2": {"cond_name_eng": "Pneumonia", "severity": "High", "count": 1},
        },
    },
    {
        "chat": [
            {"User": "My knee hurts after running."},
            {"AI": "How long has it been hurting?"},
            {"User": "About a week. I'm a 35 yrs old male runner."},
        ],
        "user_info": {
            "name": "Michael Chen",
            "email": "michael.chen@example.com",
            "phone_number": "+1 (555) 987-6543",
        },
        "report": {
            "assessment": "Likely patellofemoral pain syndrome.",
            "instructions": "Rest, ice, reduce mileage for two weeks.",
        },
        "matches": {
            "match_1": {"cond_name_eng": "Patellofemoral pain", "severity": "Low", "count": 2},
        },
    },
    {
        "chat": [
            {"User": "I keep getting headaches in the afternoon."},
            {"AI": "Do you drink enough water during the day?"},
            {"User": "Probably not."},
        ],
        "user_info": {
            "name": "Sophia Martinez",
            "email": "sophia.martinez@example.com",
            "phone_number": "+1 (555) 456-7890",
        },
        "report": {
            "patient_info": {"age": 28, "gender": "Female"},
            "summary": "Tension-type headaches, likely dehydration related.",
        },
    },
]

async def seed_if_empty():
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(ConversationLog).limit(1))
        if result.scalars().first():
            logger.info("Seed: conversations already present, skipping")
            return
        for c in SAMPLE_CONVERSATIONS:
            session.add(
                ConversationLog(
                    chat=c["chat"],
                    user_info=c["user_info"],
                    report=c["report"],
                    matches=c.get("matches"),
                    active=True,
                )
            )
        await session.commit()
        logger.info("Seed: inserted %d sample conversations", len(SAMPLE_CONVERSATIONS))
