import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, and_
from sqlalchemy.orm import Session

from app.core.errors import NotFound, Forbidden
from app.models.chat_db.chat_db import Chat, Message

logger = logging.getLogger(__name__)


def get_chat_by_id(db: Session, chat_id: UUID) -> Optional[Chat]:
    return db.query(Chat).filter(Chat.id == chat_id).first()


def get_chat_by_activity_and_users(db: Session, activity_id: UUID, user1_email: str, user2_email: str) -> Optional[Chat]:
    return (
        db.query(Chat)
        .filter(Chat.activity_id == activity_id)
        .filter(
            or_(
                and_(Chat.participant1_email == user1_email, Chat.participant2_email == user2_email),
                and_(Chat.participant1_email == user2_email, Chat.participant2_email == user1_email),
            )
        )
        .first()
    )


def create_chat(db: Session, activity_id: UUID, activity_title: str, participant1, participant2, commit: bool = True) -> Chat:
    """
    Returns the chat between both participants for this activity, creating it
    on first use. Participants are any objects with email, name and avatar.
    """
    existing = get_chat_by_activity_and_users(db, activity_id, participant1.email, participant2.email)
    if existing:
        return existing

    now = datetime.utcnow()
    chat = Chat(
        activity_id=activity_id,
        activity_title=activity_title,
        participant1_email=participant1.email,
        participant1_name=participant1.name,
        participant1_avatar=participant1.avatar,
        participant2_email=participant2.email,
        participant2_name=participant2.name,
        participant2_avatar=participant2.avatar,
        created_at=now,
        last_message_at=now,
    )
    db.add(chat)
    db.flush()
    logger.info("Chat %s opened for activity %s between %s and %s",
                chat.id, activity_id, participant1.email, participant2.email)

    if commit:
        db.commit()
        db.refresh(chat)
    return chat


def get_chats_by_user(db: Session, user_email: str) -> List[Chat]:
    return (
        db.query(Chat)
        .filter(or_(Chat.participant1_email == user_email, Chat.participant2_email == user_email))
        .order_by(Chat.last_message_at.desc())
        .all()
    )


def _get_chat_for_member(db: Session, chat_id: UUID, user_email: str) -> Chat:
    chat = get_chat_by_id(db, chat_id)
    if not chat:
        raise NotFound("Chat not found")
    if not chat.has_participant(user_email):
        raise Forbidden("You are not part of this chat")
    return chat


def send_message(db: Session, chat_id: UUID, sender_email: str, sender_name: str, content: str) -> Message:
    chat = _get_chat_for_member(db, chat_id, sender_email)

    now = datetime.utcnow()
    message = Message(
        chat_id=chat.id,
        sender_email=sender_email,
        sender_name=sender_name,
        content=content,
        timestamp=now,
        read=False,
    )
    db.add(message)
    chat.last_message_at = now
    db.commit()
    db.refresh(message)
    return message


def mark_messages_as_read(db: Session, chat_id: UUID, user_email: str) -> int:
    chat = _get_chat_for_member(db, chat_id, user_email)

    updated = 0
    for message in chat.messages:
        if message.sender_email != user_email and not message.read:
            message.read = True
            updated += 1
    db.commit()
    return updated


def get_unread_count(db: Session, user_email: str) -> int:
    return (
        db.query(Message)
        .join(Chat, Message.chat_id == Chat.id)
        .filter(or_(Chat.participant1_email == user_email, Chat.participant2_email == user_email))
        .filter(Message.sender_email != user_email)
        .filter(Message.read.is_(False))
        .count()
    )


def count_connections(db: Session, user_email: str) -> int:
    return len({chat.other_participant(user_email) for chat in get_chats_by_user(db, user_email)})
