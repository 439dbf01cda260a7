from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.activity_db.activity_crud import require_activity
from app.models.chat_db import chat_crud
from app.models.user_db.user_db import User
from app.models.user_db.user_db_crud import get_user_by_email
from app.schemas.chat.chat_base import ChatCreate, ChatOut, ChatParticipant, MessageCreate, MessageOut, UnreadCountOut

chat_router = APIRouter(prefix="/chats", tags=["Chats"])


def _as_participant(user: User) -> ChatParticipant:
    return ChatParticipant(email=user.email, name=user.full_name, avatar=user.avatar)


@chat_router.get("/", response_model=List[ChatOut])
def list_my_chats(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return chat_crud.get_chats_by_user(db, current_user.email)


@chat_router.get("/unread", response_model=UnreadCountOut)
def unread_count(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return UnreadCountOut(unread=chat_crud.get_unread_count(db, current_user.email))


@chat_router.post("/", response_model=ChatOut)
def open_chat(payload: ChatCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    activity = require_activity(db, payload.activity_id)
    if payload.other_email == current_user.email:
        raise HTTPException(status_code=400, detail="Cannot open a chat with yourself")
    if not (activity.is_member(current_user.email) and activity.is_member(payload.other_email)):
        raise HTTPException(status_code=403, detail="Both users must be members of the activity")
    other = get_user_by_email(db, payload.other_email)
    if not other:
        raise HTTPException(status_code=404, detail="User not found")

    return chat_crud.create_chat(db, activity.id, activity.title, _as_participant(current_user), _as_participant(other))


@chat_router.get("/{chat_id}", response_model=ChatOut)
def get_chat(chat_id: UUID, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    chat = chat_crud.get_chat_by_id(db, chat_id)
    if not chat or not chat.has_participant(current_user.email):
        raise HTTPException(status_code=404, detail="Chat not found")
    return chat


@chat_router.post("/{chat_id}/messages", response_model=MessageOut, status_code=201)
def send_message(chat_id: UUID, payload: MessageCreate, db: Session = Depends(get_db),
                 current_user: User = Depends(get_current_user)):
    return chat_crud.send_message(db, chat_id, current_user.email, current_user.full_name, payload.content)


@chat_router.post("/{chat_id}/read")
def mark_as_read(chat_id: UUID, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    updated = chat_crud.mark_messages_as_read(db, chat_id, current_user.email)
    return {"chat_id": str(chat_id), "marked_read": updated}
