from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pulsedesk.logstore.models import ConversationLog
from pulsedesk.schemas import ConversationCreate, ConversationUpdate


def to_document(conv: ConversationLog) -> Dict[str, Any]:
    doc = {
        "_id": conv.id,
        "chat": conv.chat or [],
        "user_info": conv.user_info or {},
        "report": conv.report if conv.report is not None else {},
        "timestamp": conv.timestamp.isoformat() if conv.timestamp else None,
        "active": conv.active,
    }
    if conv.matches is not None:
        doc["matches"] = conv.matches
    return doc


async def create_conversation(db: AsyncSession, payload: ConversationCreate) -> ConversationLog:
    data = payload.model_dump()
    conv = ConversationLog(
        chat=data["chat"] or [],
        user_info=data["user_info"],
        report=data["report"] if data["report"] is not None else {},
        matches=data["matches"],
        active=True,
    )
    db.add(conv)
    await db.commit()
    await db.refresh(conv)
    return conv


async def get_conversation(db: AsyncSession, conv_id: str) -> Optional[ConversationLog]:
    q = await db.execute(
        select(ConversationLog)
        .where(ConversationLog.id == conv_id)
        .where(ConversationLog.active.is_(True))
    )
    return q.scalars().first()


async def list_conversations(db: AsyncSession, limit: Optional[int] = None):
    stmt = (
        select(ConversationLog)
        .where(ConversationLog.active.is_(True))
        .order_by(ConversationLog.timestamp.desc())
    )
    if limit:
        stmt = stmt.limit(limit)
    q = await db.execute(stmt)
    return q.scalars().all()


async def update_conversation(
    db: AsyncSession, conv: ConversationLog, payload: ConversationUpdate
) -> ConversationLog:
    # Only fields present in the request body are replaced, each one whole.
    for field, value in payload.model_dump(include=set(payload.model_fields_set)).items():
        setattr(conv, field, value)
    await db.commit()
    await db.refresh(conv)
    return conv


async def deactivate_conversation(db: AsyncSession, conv: ConversationLog) -> ConversationLog:
    conv.active = False
    await db.commit()
    await db.refresh(conv)
    return conv
