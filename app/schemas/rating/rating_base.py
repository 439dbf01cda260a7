from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from typing import List, Optional
from datetime import datetime


class AttendanceStats(BaseModel):
    total_activities: int
    attended: int
    on_time: int
    attendance_rate: int
    punctuality_rate: int


class AttendanceMark(BaseModel):
    user_email: EmailStr
    attended: bool
    on_time: bool


class AttendanceRecordOut(BaseModel):
    id: UUID
    user_email: str
    attended: Optional[bool] = None
    on_time: Optional[bool] = None
    rated_by: List[str]

    class Config:
        from_attributes = True


class RatingCreate(BaseModel):
    target_email: EmailStr
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    attended: bool = True
    on_time: bool = True


class UserRatingOut(BaseModel):
    id: UUID
    from_user_id: UUID
    from_user_name: str
    from_user_avatar: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    activity_name: str
    attended: bool
    on_time: bool
    created_at: datetime

    class Config:
        from_attributes = True
