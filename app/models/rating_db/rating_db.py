import uuid
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, JSON, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    activity_id = Column(Uuid, ForeignKey("activities.id"), nullable=False, index=True)
    user_email = Column(String, nullable=False, index=True)

    # None hasta que el organizador marque la asistencia
    attended = Column(Boolean, nullable=True)
    on_time = Column(Boolean, nullable=True)
    rated_by = Column(JSON, nullable=False, default=list)  # emails de quien ya calificó

    activity = relationship("Activity", back_populates="attendance_records")

    __table_args__ = (
        UniqueConstraint("activity_id", "user_email", name="unique_activity_attendance"),
    )


class UserRating(Base):
    __tablename__ = "user_ratings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    activity_id = Column(Uuid, ForeignKey("activities.id"), nullable=True)

    from_user_id = Column(Uuid, nullable=False)
    from_user_name = Column(String, nullable=False)
    from_user_avatar = Column(Text, nullable=True)

    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    activity_name = Column(String, nullable=False)
    attended = Column(Boolean, nullable=False, default=True)
    on_time = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="ratings")
