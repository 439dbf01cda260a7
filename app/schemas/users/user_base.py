from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from typing import List, Optional
from datetime import date, datetime

from app.schemas.rating.rating_base import AttendanceStats, UserRatingOut
from app.services.interests import Interest


class UserBase(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1)
    last_name: str = ""
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    location: Optional[str] = None


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)
    interests: List[Interest] = Field(..., min_length=2)


class UserUpdate(BaseModel):
    name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    location: Optional[str] = None
    interests: Optional[List[Interest]] = None


class UserStats(BaseModel):
    activities_created: int = 0
    activities_joined: int = 0
    connections: int = 0


class UserOut(BaseModel):
    id: UUID
    email: EmailStr
    name: str
    last_name: str
    phone: Optional[str] = None
    birth_date: Optional[str] = None
    gender: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    location: Optional[str] = None
    interests: List[str] = []
    is_verified: bool
    average_rating: float
    attendance_stats: AttendanceStats
    created_at: datetime

    class Config:
        from_attributes = True


class UserProfileOut(UserOut):
    stats: UserStats
    ratings: List[UserRatingOut] = []


class RegisterResponse(BaseModel):
    user: UserOut
    token: str
    message: str
    demo_code: Optional[str] = None
