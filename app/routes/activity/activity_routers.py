from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import get_current_user, get_verified_user
from app.models.activity_db import activity_crud
from app.models.rating_db import rating_crud
from app.models.user_db.user_db import User
from app.schemas.activity.activity_base import (
    ActivityCreate,
    ActivityOut,
    ActivityRequestOut,
    MembershipLogOut,
    ParticipantRequestOut,
    RequestStatusOut,
    activity_to_out,
)
from app.schemas.common.page_response import PageResponse
from app.schemas.rating.rating_base import AttendanceMark, AttendanceRecordOut, RatingCreate, UserRatingOut
from app.services.categories import CATEGORY_LABELS, SKILL_LEVELS, SUBCATEGORIES, Category
from app.services.geo import calculate_distance, sort_by_distance

activity_router = APIRouter(prefix="/activities", tags=["Activities"])


@activity_router.get("/categories")
def get_categories():
    return {
        "categories": [
            {"id": c.value, "name": CATEGORY_LABELS[c], "subcategories": SUBCATEGORIES[c]}
            for c in Category
        ],
        "skill_levels": SKILL_LEVELS,
    }


@activity_router.post("/", response_model=ActivityOut, status_code=201)
def create_activity(data: ActivityCreate, db: Session = Depends(get_db),
                    current_user: User = Depends(get_verified_user)):
    activity = activity_crud.create_activity(
        db, data, current_user.email, current_user.full_name, current_user.avatar
    )
    return activity_to_out(activity)


@activity_router.get("/", response_model=PageResponse[ActivityOut])
def list_activities(
    category: Optional[Category] = None,
    q: Optional[str] = Query(None, description="Search in title and subcategory"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    sort_by_distance_: bool = Query(True, alias="sort_by_distance"),
    include_completed: bool = True,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    activities = activity_crud.list_activities(
        db, category=category.value if category else None, query=q, include_completed=include_completed
    )

    if lat is not None and lng is not None:
        items = [(a, calculate_distance(lat, lng, a.latitude, a.longitude)) for a in activities]
        if sort_by_distance_:
            items = sort_by_distance(items, key=lambda item: item[1])
    else:
        items = [(a, None) for a in activities]

    total = len(items)
    skip = (page - 1) * size
    page_items = items[skip:skip + size]

    return PageResponse[ActivityOut](
        page=page,
        size=size,
        total=total,
        has_next=(page * size) < total,
        has_prev=page > 1,
        items=[activity_to_out(a, distance) for a, distance in page_items]
    )


@activity_router.get("/mine", response_model=List[ActivityOut])
def my_activities(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return [activity_to_out(a) for a in activity_crud.get_activities_by_creator(db, current_user.email)]


@activity_router.get("/joined", response_model=List[ActivityOut])
def joined_activities(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return [activity_to_out(a) for a in activity_crud.get_activities_joined_by(db, current_user.email)]


@activity_router.get("/requests/mine", response_model=List[ActivityRequestOut])
def my_requests(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return [
        ActivityRequestOut(activity=activity_to_out(a), request=ParticipantRequestOut.model_validate(r))
        for a, r in activity_crud.get_my_requests(db, current_user.email)
    ]


@activity_router.get("/requests/incoming", response_model=List[ActivityRequestOut])
def incoming_requests(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return [
        ActivityRequestOut(activity=activity_to_out(a), request=ParticipantRequestOut.model_validate(r))
        for a, r in activity_crud.get_pending_requests_for_my_activities(db, current_user.email)
    ]


@activity_router.get("/{activity_id}", response_model=ActivityOut)
def get_activity(activity_id: UUID, db: Session = Depends(get_db)):
    activity = activity_crud.get_activity(db, activity_id)
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")
    return activity_to_out(activity)


@activity_router.post("/{activity_id}/requests", response_model=ParticipantRequestOut, status_code=201)
def request_to_join(activity_id: UUID, db: Session = Depends(get_db),
                    current_user: User = Depends(get_verified_user)):
    return activity_crud.request_to_join(
        db,
        activity_id,
        current_user.email,
        current_user.full_name,
        current_user.avatar,
        current_user.average_rating or 0.0,
    )


@activity_router.get("/{activity_id}/requests/status", response_model=RequestStatusOut)
def request_status(activity_id: UUID, db: Session = Depends(get_db),
                   current_user: User = Depends(get_current_user)):
    activity_crud.require_activity(db, activity_id)
    return RequestStatusOut(
        activity_id=activity_id,
        status=activity_crud.get_user_request_status(db, activity_id, current_user.email),
        available_spots=activity_crud.get_available_spots(db, activity_id),
    )


@activity_router.delete("/{activity_id}/requests", status_code=204)
def withdraw_request(activity_id: UUID, db: Session = Depends(get_db),
                     current_user: User = Depends(get_current_user)):
    activity_crud.withdraw_request(db, activity_id, current_user.email)
    return None


@activity_router.get("/{activity_id}/requests/pending", response_model=List[ParticipantRequestOut])
def pending_requests(activity_id: UUID, db: Session = Depends(get_db),
                     current_user: User = Depends(get_current_user)):
    activity = activity_crud.require_activity(db, activity_id)
    if activity.creator_email != current_user.email:
        raise HTTPException(status_code=403, detail="Only the organizer can see pending requests")
    return activity_crud.get_pending_requests(db, activity_id)


@activity_router.post("/{activity_id}/requests/{user_email}/approve", response_model=ParticipantRequestOut)
def approve_request(activity_id: UUID, user_email: str, db: Session = Depends(get_db),
                    current_user: User = Depends(get_current_user)):
    request, _ = activity_crud.approve_request(db, activity_id, user_email, actor_email=current_user.email)
    return request


@activity_router.post("/{activity_id}/requests/{user_email}/reject", response_model=ParticipantRequestOut)
def reject_request(activity_id: UUID, user_email: str, db: Session = Depends(get_db),
                   current_user: User = Depends(get_current_user)):
    return activity_crud.reject_request(db, activity_id, user_email, actor_email=current_user.email)


@activity_router.delete("/{activity_id}/participants/{user_email}", status_code=204)
def revoke_participant(activity_id: UUID, user_email: str, db: Session = Depends(get_db),
                       current_user: User = Depends(get_current_user)):
    activity_crud.revoke_participant(db, activity_id, user_email, actor_email=current_user.email)
    return None


@activity_router.get("/{activity_id}/log", response_model=List[MembershipLogOut])
def membership_log(activity_id: UUID, db: Session = Depends(get_db),
                   current_user: User = Depends(get_current_user)):
    activity = activity_crud.require_activity(db, activity_id)
    if activity.creator_email != current_user.email:
        raise HTTPException(status_code=403, detail="Only the organizer can see the membership log")
    return activity_crud.get_membership_log(db, activity_id)


@activity_router.post("/{activity_id}/complete", response_model=ActivityOut)
def complete_activity(activity_id: UUID, db: Session = Depends(get_db),
                      current_user: User = Depends(get_current_user)):
    return activity_to_out(activity_crud.complete_activity(db, activity_id, actor_email=current_user.email))


@activity_router.put("/{activity_id}/attendance", response_model=AttendanceRecordOut)
def mark_attendance(activity_id: UUID, payload: AttendanceMark, db: Session = Depends(get_db),
                    current_user: User = Depends(get_current_user)):
    return rating_crud.mark_attendance(
        db, activity_id, payload.user_email, payload.attended, payload.on_time, actor_email=current_user.email
    )


@activity_router.post("/{activity_id}/ratings", response_model=UserRatingOut, status_code=201)
def rate_user(activity_id: UUID, payload: RatingCreate, db: Session = Depends(get_db),
              current_user: User = Depends(get_current_user)):
    return rating_crud.rate_user(
        db,
        activity_id,
        current_user,
        payload.target_email,
        payload.rating,
        comment=payload.comment,
        attended=payload.attended,
        on_time=payload.on_time,
    )
