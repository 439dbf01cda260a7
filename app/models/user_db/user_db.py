import uuid
from sqlalchemy import Column, String, Boolean, Integer, DateTime, Text, Float, JSON, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from datetime import datetime


class User(Base):
    __tablename__ = "users"

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        index=True
    )

    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, default="")
    phone = Column(String, nullable=True)
    birth_date = Column(String, nullable=True)
    gender = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    avatar = Column(Text, nullable=True)
    location = Column(String, nullable=True)  # etiqueta libre, ex: "Palermo, CABA"
    interests = Column(JSON, default=list)

    is_verified = Column(Boolean, default=False)
    verification_code = Column(String(6), nullable=True)
    verification_expires_at = Column(DateTime, nullable=True)

    # agregados recalculados desde ratings y attendance_records
    average_rating = Column(Float, default=0.0)
    total_activities = Column(Integer, default=0)
    attended = Column(Integer, default=0)
    on_time = Column(Integer, default=0)
    attendance_rate = Column(Integer, default=100)
    punctuality_rate = Column(Integer, default=100)

    created_at = Column(DateTime, default=datetime.utcnow)

    ratings = relationship(
        "UserRating",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserRating.created_at",
    )

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.last_name}".strip()

    @property
    def attendance_stats(self) -> dict:
        return {
            "total_activities": self.total_activities or 0,
            "attended": self.attended or 0,
            "on_time": self.on_time or 0,
            "attendance_rate": 100 if self.attendance_rate is None else self.attendance_rate,
            "punctuality_rate": 100 if self.punctuality_rate is None else self.punctuality_rate,
        }
