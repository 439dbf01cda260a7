from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from typing import List, Optional
from datetime import datetime


class ChatParticipant(BaseModel):
    email: EmailStr
    name: str
    avatar: Optional[str] = None


class ChatCreate(BaseModel):
    activity_id: UUID
    other_email: EmailStr


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1)


class MessageOut(BaseModel):
    id: UUID
    chat_id: UUID
    sender_email: str
    sender_name: str
    content: str
    timestamp: datetime
    read: bool

    class Config:
        from_attributes = True


class ChatOut(BaseModel):
    id: UUID
    activity_id: UUID
    activity_title: str
    participants: List[ChatParticipant]
    messages: List[MessageOut]
    created_at: datetime
    last_message_at: datetime

    class Config:
        from_attributes = True


class UnreadCountOut(BaseModel):
    unread: int
