import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base


class Chat(Base):
    __tablename__ = "chats"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    activity_id = Column(Uuid, ForeignKey("activities.id"), nullable=False, index=True)
    activity_title = Column(String, nullable=False)

    participant1_email = Column(String, nullable=False, index=True)
    participant1_name = Column(String, nullable=False)
    participant1_avatar = Column(Text, nullable=True)
    participant2_email = Column(String, nullable=False, index=True)
    participant2_name = Column(String, nullable=False)
    participant2_avatar = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    last_message_at = Column(DateTime, default=datetime.utcnow, index=True)

    messages = relationship(
        "Message",
        back_populates="chat",
        cascade="all, delete-orphan",
        order_by="Message.timestamp",
    )

    @property
    def participants(self) -> list[dict]:
        return [
            {"email": self.participant1_email, "name": self.participant1_name, "avatar": self.participant1_avatar},
            {"email": self.participant2_email, "name": self.participant2_name, "avatar": self.participant2_avatar},
        ]

    def has_participant(self, email: str) -> bool:
        return email in (self.participant1_email, self.participant2_email)

    def other_participant(self, email: str) -> str:
        return self.participant2_email if email == self.participant1_email else self.participant1_email


class Message(Base):
    __tablename__ = "messages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    chat_id = Column(Uuid, ForeignKey("chats.id"), nullable=False, index=True)
    sender_email = Column(String, nullable=False)
    sender_name = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow)
    read = Column(Boolean, default=False, nullable=False)

    chat = relationship("Chat", back_populates="messages")
