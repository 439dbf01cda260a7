from pydantic import BaseModel, Field, model_validator
from uuid import UUID
from typing import List, Literal, Optional
from datetime import datetime

from app.services.categories import AGE_MAX, AGE_MIN, Category, is_valid_subcategory
from app.services.geo import format_distance


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class AgeRange(BaseModel):
    min: int = Field(AGE_MIN, ge=AGE_MIN, le=AGE_MAX)
    max: int = Field(AGE_MAX, ge=AGE_MIN, le=AGE_MAX)

    @model_validator(mode="after")
    def check_order(self):
        if self.min > self.max:
            raise ValueError("age range minimum must not exceed maximum")
        return self


class ActivityCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    category: Category
    subcategory: str
    location: str = Field(..., min_length=1)
    coordinates: Coordinates
    time_label: Optional[str] = None
    starts_at: Optional[datetime] = None
    spots: int = Field(..., ge=1)
    skill_level: Optional[int] = Field(None, ge=1, le=5)
    age_range: Optional[AgeRange] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_category_rules(self):
        if not is_valid_subcategory(self.category, self.subcategory):
            raise ValueError(f"'{self.subcategory}' is not a subcategory of {self.category.value}")
        if self.category == Category.sports and self.skill_level is None:
            raise ValueError("skill_level is required for sports activities")
        if self.category != Category.sports and self.skill_level is not None:
            raise ValueError("skill_level only applies to sports activities")
        return self


class CreatorOut(BaseModel):
    name: str
    avatar: Optional[str] = None
    email: str


class ParticipantRequestOut(BaseModel):
    id: UUID
    user_email: str
    user_name: str
    user_avatar: Optional[str] = None
    user_rating: float
    status: Literal["pending", "approved", "rejected"]
    requested_at: datetime

    class Config:
        from_attributes = True


class ActivityOut(BaseModel):
    id: UUID
    user: CreatorOut
    title: str
    category: Category
    subcategory: str
    location: str
    coordinates: Coordinates
    time_label: Optional[str] = None
    starts_at: Optional[datetime] = None
    spots: int
    available_spots: int
    skill_level: Optional[int] = None
    age_range: Optional[AgeRange] = None
    notes: Optional[str] = None
    participants: List[str]
    participant_requests: List[ParticipantRequestOut]
    is_completed: bool
    created_at: datetime
    distance_km: Optional[float] = None
    distance_label: Optional[str] = None


class RequestStatusOut(BaseModel):
    activity_id: UUID
    status: Literal["none", "pending", "approved", "rejected"]
    available_spots: int


class ActivityRequestOut(BaseModel):
    activity: ActivityOut
    request: ParticipantRequestOut


class MembershipLogOut(BaseModel):
    user_email: str
    actor_email: str
    action: str
    created_at: datetime

    class Config:
        from_attributes = True


def activity_to_out(activity, distance_km: Optional[float] = None) -> ActivityOut:
    age_range = None
    if activity.age_min is not None and activity.age_max is not None:
        age_range = AgeRange(min=activity.age_min, max=activity.age_max)

    return ActivityOut(
        id=activity.id,
        user=CreatorOut(name=activity.creator_name, avatar=activity.creator_avatar, email=activity.creator_email),
        title=activity.title,
        category=activity.category,
        subcategory=activity.subcategory,
        location=activity.location,
        coordinates=Coordinates(lat=activity.latitude, lng=activity.longitude),
        time_label=activity.time_label,
        starts_at=activity.starts_at,
        spots=activity.spots,
        available_spots=activity.available_spots,
        skill_level=activity.skill_level,
        age_range=age_range,
        notes=activity.notes,
        participants=activity.participants,
        participant_requests=[ParticipantRequestOut.model_validate(r) for r in activity.requests],
        is_completed=activity.is_completed,
        created_at=activity.created_at,
        distance_km=round(distance_km, 3) if distance_km is not None else None,
        distance_label=format_distance(distance_km) if distance_km is not None else None,
    )
