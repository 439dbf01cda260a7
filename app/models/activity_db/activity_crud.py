import logging
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from app.core.errors import NotFound, Forbidden, JoinRejected, CapacityExceeded, InvalidTransition
from app.models.activity_db.activity_db import Activity
from app.models.activity_db.membership_log_db import MembershipLogEntry, MembershipAction
from app.models.activity_db.request_db import ParticipantRequest, RequestStatus
from app.schemas.activity.activity_base import ActivityCreate
from app.services.events import ChatMember, RequestApproved, dispatch

logger = logging.getLogger(__name__)


def get_activity(db: Session, activity_id: UUID) -> Optional[Activity]:
    return db.query(Activity).filter(Activity.id == activity_id).first()


def require_activity(db: Session, activity_id: UUID) -> Activity:
    activity = get_activity(db, activity_id)
    if not activity:
        raise NotFound("Activity not found")
    return activity


def _require_organizer(activity: Activity, actor_email: Optional[str]):
    if actor_email is not None and actor_email != activity.creator_email:
        raise Forbidden("Only the organizer can manage this activity")


def _log(db: Session, activity: Activity, user_email: str, actor_email: str, action: MembershipAction):
    db.add(MembershipLogEntry(
        activity_id=activity.id,
        user_email=user_email,
        actor_email=actor_email,
        action=action.value,
        created_at=datetime.utcnow(),
    ))


def create_activity(db: Session, data: ActivityCreate, creator_email: str, creator_name: str,
                    creator_avatar: Optional[str] = None) -> Activity:
    activity = Activity(
        creator_email=creator_email,
        creator_name=creator_name,
        creator_avatar=creator_avatar,
        title=data.title,
        category=data.category.value,
        subcategory=data.subcategory,
        location=data.location,
        latitude=data.coordinates.lat,
        longitude=data.coordinates.lng,
        time_label=data.time_label,
        starts_at=data.starts_at,
        spots=data.spots,
        skill_level=data.skill_level,
        age_min=data.age_range.min if data.age_range else None,
        age_max=data.age_range.max if data.age_range else None,
        notes=data.notes,
        is_completed=False,
        created_at=datetime.utcnow(),
    )
    db.add(activity)
    db.commit()
    db.refresh(activity)
    logger.info("Activity %s created by %s", activity.id, creator_email)
    return activity


def list_activities(db: Session, category: Optional[str] = None, query: Optional[str] = None,
                    include_completed: bool = True) -> List[Activity]:
    q = db.query(Activity)
    if category:
        q = q.filter(Activity.category == category)
    if query:
        pattern = f"%{query.lower()}%"
        q = q.filter(or_(func.lower(Activity.title).like(pattern), func.lower(Activity.subcategory).like(pattern)))
    if not include_completed:
        q = q.filter(Activity.is_completed.is_(False))
    return q.order_by(Activity.created_at.desc()).all()


def request_to_join(db: Session, activity_id: UUID, user_email: str, user_name: str,
                    user_avatar: Optional[str] = None, user_rating: float = 0.0) -> ParticipantRequest:
    activity = require_activity(db, activity_id)

    if activity.is_completed:
        raise JoinRejected("Activity already completed")
    if user_email == activity.creator_email:
        raise JoinRejected("Organizer cannot join their own activity")
    if activity.find_request(user_email):
        raise JoinRejected("A request for this activity already exists")
    if user_email in activity.participants:
        raise JoinRejected("Already a participant")
    if activity.available_spots <= 0:
        raise JoinRejected("No spots left")

    request = ParticipantRequest(
        user_email=user_email,
        user_name=user_name,
        user_avatar=user_avatar,
        user_rating=user_rating,
        status=RequestStatus.pending.value,
        requested_at=datetime.utcnow(),
    )
    activity.requests.append(request)
    _log(db, activity, user_email, user_email, MembershipAction.requested)
    db.commit()
    db.refresh(request)
    logger.info("%s requested to join activity %s", user_email, activity.id)
    return request


def _pending_request(activity: Activity, user_email: str) -> ParticipantRequest:
    request = activity.find_request(user_email)
    if not request:
        raise NotFound("Request not found")
    if request.status != RequestStatus.pending.value:
        raise InvalidTransition(f"Request is already {request.status}")
    return request


def approve_request(db: Session, activity_id: UUID, user_email: str,
                    actor_email: Optional[str] = None) -> Tuple[ParticipantRequest, list]:
    """
    Approves a pending request and opens the organizer/participant chat.

    Capacity is checked again here since several requests may be pending for
    the last spot. The approval, its audit entry and the chat are committed
    together. Returns the request and the events that were dispatched.
    """
    activity = require_activity(db, activity_id)
    _require_organizer(activity, actor_email)
    request = _pending_request(activity, user_email)

    if len(activity.participants) >= activity.spots:
        raise CapacityExceeded("Activity is full")

    request.status = RequestStatus.approved.value
    _log(db, activity, user_email, actor_email or activity.creator_email, MembershipAction.approved)

    events = [
        RequestApproved(
            activity_id=activity.id,
            activity_title=activity.title,
            organizer=ChatMember(activity.creator_email, activity.creator_name, activity.creator_avatar),
            participant=ChatMember(request.user_email, request.user_name, request.user_avatar),
        )
    ]
    try:
        dispatch(db, events)
    except Exception:
        db.rollback()
        raise
    db.commit()
    db.refresh(request)
    logger.info("Request of %s approved for activity %s", user_email, activity.id)
    return request, events


def reject_request(db: Session, activity_id: UUID, user_email: str,
                   actor_email: Optional[str] = None) -> ParticipantRequest:
    activity = require_activity(db, activity_id)
    _require_organizer(activity, actor_email)
    request = _pending_request(activity, user_email)

    request.status = RequestStatus.rejected.value
    _log(db, activity, user_email, actor_email or activity.creator_email, MembershipAction.rejected)
    db.commit()
    db.refresh(request)
    logger.info("Request of %s rejected for activity %s", user_email, activity.id)
    return request


def cancel_request(db: Session, activity: Activity, user_email: str) -> bool:
    """Removes the user's request, and with it any participation. Does not commit."""
    request = activity.find_request(user_email)
    if not request:
        return False
    activity.requests.remove(request)
    return True


def withdraw_request(db: Session, activity_id: UUID, user_email: str) -> bool:
    activity = require_activity(db, activity_id)
    if activity.is_completed:
        raise InvalidTransition("Activity already completed")
    if not cancel_request(db, activity, user_email):
        raise NotFound("Request not found")
    _log(db, activity, user_email, user_email, MembershipAction.withdrawn)
    db.commit()
    logger.info("%s withdrew from activity %s", user_email, activity.id)
    return True


def revoke_participant(db: Session, activity_id: UUID, user_email: str,
                       actor_email: Optional[str] = None) -> bool:
    activity = require_activity(db, activity_id)
    _require_organizer(activity, actor_email)
    if activity.is_completed:
        raise InvalidTransition("Activity already completed")
    if not cancel_request(db, activity, user_email):
        raise NotFound("Request not found")
    _log(db, activity, user_email, actor_email or activity.creator_email, MembershipAction.revoked)
    db.commit()
    logger.info("%s revoked from activity %s", user_email, activity.id)
    return True


def complete_activity(db: Session, activity_id: UUID, actor_email: Optional[str] = None) -> Activity:
    activity = require_activity(db, activity_id)
    _require_organizer(activity, actor_email)
    if not activity.is_completed:
        activity.is_completed = True
        activity.completed_at = datetime.utcnow()
        db.commit()
        db.refresh(activity)
        logger.info("Activity %s completed", activity.id)
    return activity


def is_user_joined(db: Session, activity_id: UUID, user_email: str) -> bool:
    activity = get_activity(db, activity_id)
    return activity is not None and user_email in activity.participants


def get_user_request_status(db: Session, activity_id: UUID, user_email: str) -> str:
    activity = get_activity(db, activity_id)
    if not activity:
        return "none"
    request = activity.find_request(user_email)
    return request.status if request else "none"


def get_available_spots(db: Session, activity_id: UUID) -> int:
    activity = get_activity(db, activity_id)
    if not activity:
        return 0
    return activity.available_spots


def get_pending_requests(db: Session, activity_id: UUID) -> List[ParticipantRequest]:
    activity = get_activity(db, activity_id)
    if not activity:
        return []
    return [r for r in activity.requests if r.status == RequestStatus.pending.value]


def get_activities_by_creator(db: Session, user_email: str) -> List[Activity]:
    return (
        db.query(Activity)
        .filter(Activity.creator_email == user_email)
        .order_by(Activity.created_at.desc())
        .all()
    )


def get_activities_joined_by(db: Session, user_email: str) -> List[Activity]:
    return (
        db.query(Activity)
        .join(ParticipantRequest)
        .filter(ParticipantRequest.user_email == user_email)
        .filter(ParticipantRequest.status == RequestStatus.approved.value)
        .order_by(Activity.created_at.desc())
        .all()
    )


def get_my_requests(db: Session, user_email: str) -> List[Tuple[Activity, ParticipantRequest]]:
    requests = (
        db.query(ParticipantRequest)
        .filter(ParticipantRequest.user_email == user_email)
        .order_by(ParticipantRequest.requested_at.desc())
        .all()
    )
    return [(r.activity, r) for r in requests]


def get_pending_requests_for_my_activities(db: Session, user_email: str) -> List[Tuple[Activity, ParticipantRequest]]:
    results = []
    for activity in get_activities_by_creator(db, user_email):
        for request in activity.requests:
            if request.status == RequestStatus.pending.value:
                results.append((activity, request))
    return results


def get_membership_log(db: Session, activity_id: UUID) -> List[MembershipLogEntry]:
    return (
        db.query(MembershipLogEntry)
        .filter(MembershipLogEntry.activity_id == activity_id)
        .order_by(MembershipLogEntry.created_at)
        .all()
    )
