import uuid
from enum import Enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from datetime import datetime
from app.core.database import Base


class MembershipAction(str, Enum):
    requested = "requested"
    approved = "approved"
    rejected = "rejected"
    withdrawn = "withdrawn"
    revoked = "revoked"


class MembershipLogEntry(Base):
    __tablename__ = "membership_log"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    activity_id = Column(Uuid, ForeignKey("activities.id"), nullable=False, index=True)
    user_email = Column(String, nullable=False)
    actor_email = Column(String, nullable=False)
    action = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
