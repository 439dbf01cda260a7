import uuid
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Float, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)

    # snapshot del organizador
    creator_email = Column(String, nullable=False, index=True)
    creator_name = Column(String, nullable=False)
    creator_avatar = Column(Text, nullable=True)

    title = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    subcategory = Column(String, nullable=False)

    location = Column(String, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    time_label = Column(String, nullable=True)  # ex: "Hoy 19:00 hs"
    starts_at = Column(DateTime, nullable=True)

    spots = Column(Integer, nullable=False)
    skill_level = Column(Integer, nullable=True)
    age_min = Column(Integer, nullable=True)
    age_max = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    is_completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relacionamentos
    requests = relationship(
        "ParticipantRequest",
        back_populates="activity",
        cascade="all, delete-orphan",
        order_by="ParticipantRequest.requested_at",
    )
    attendance_records = relationship(
        "AttendanceRecord",
        back_populates="activity",
        cascade="all, delete-orphan",
    )

    @property
    def participants(self) -> list[str]:
        return [r.user_email for r in self.requests if r.status == "approved"]

    @property
    def available_spots(self) -> int:
        return self.spots - len(self.participants)

    def find_request(self, user_email: str):
        return next((r for r in self.requests if r.user_email == user_email), None)

    def find_attendance(self, user_email: str):
        return next((r for r in self.attendance_records if r.user_email == user_email), None)

    def is_member(self, user_email: str) -> bool:
        return user_email == self.creator_email or user_email in self.participants
