import uuid
from enum import Enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Float, Text, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base


class RequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class ParticipantRequest(Base):
    __tablename__ = "participant_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    activity_id = Column(Uuid, ForeignKey("activities.id"), nullable=False, index=True)

    user_email = Column(String, nullable=False, index=True)
    user_name = Column(String, nullable=False)
    user_avatar = Column(Text, nullable=True)
    user_rating = Column(Float, default=0.0)  # snapshot al momento de pedir

    status = Column(String, nullable=False, default=RequestStatus.pending.value)
    requested_at = Column(DateTime, default=datetime.utcnow)

    activity = relationship("Activity", back_populates="requests")

    __table_args__ = (
        UniqueConstraint("activity_id", "user_email", name="unique_activity_request"),
    )
