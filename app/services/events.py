"""
Domain events raised by ledger operations.

Operations collect events and hand them to ``dispatch`` before committing, so
every side effect lands in the same transaction as the change that caused it.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.chat_db import chat_crud

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatMember:
    email: str
    name: str
    avatar: str | None = None


@dataclass(frozen=True)
class RequestApproved:
    activity_id: UUID
    activity_title: str
    organizer: ChatMember
    participant: ChatMember


def open_chat_for_approval(db: Session, event: RequestApproved):
    return chat_crud.create_chat(
        db,
        event.activity_id,
        event.activity_title,
        event.organizer,
        event.participant,
        commit=False,
    )


HANDLERS = {
    RequestApproved: [open_chat_for_approval],
}


def dispatch(db: Session, events: list):
    for event in events:
        handlers = HANDLERS.get(type(event), [])
        if not handlers:
            logger.warning("No handler registered for %s", type(event).__name__)
        for handler in handlers:
            handler(db, event)
