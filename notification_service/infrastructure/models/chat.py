"""SQLAlchemy model for chat conversation participants."""

from sqlalchemy import Column, DateTime, String

from notification_service.infrastructure.database import Base


class ConversationParticipantModel(Base):
    __tablename__ = "chat_conversation_participants"

    conversation_id = Column(String(64), primary_key=True)
    user_id = Column(String(64), primary_key=True)
    request_state = Column(String(20), nullable=False, default="none")
    muted_at = Column(DateTime(timezone=True), nullable=True)
    archived_at = Column(DateTime(timezone=True), nullable=True)


__all__ = ["ConversationParticipantModel"]
