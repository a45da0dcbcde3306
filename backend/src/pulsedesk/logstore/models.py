import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

JSONDoc = JSON().with_variant(JSONB(), "postgresql")


class ConversationLog(Base):
    __tablename__ = "conversation_logs"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    chat = Column(JSONDoc, default=list)  # list of {speaker: text}
    user_info = Column(JSONDoc, default=dict)
    report = Column(JSONDoc, default=dict)
    matches = Column(JSONDoc, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
