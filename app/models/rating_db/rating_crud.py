import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.errors import NotFound, Forbidden, InvalidTransition, AlreadyRated
from app.models.activity_db.activity_crud import require_activity
from app.models.activity_db.activity_db import Activity
from app.models.rating_db.rating_db import AttendanceRecord, UserRating
from app.models.user_db.user_db import User
from app.models.user_db.user_db_crud import get_user_by_email
from app.services.geo import round_half_up

logger = logging.getLogger(__name__)


def _percent(part: int, whole: int) -> int:
    if whole == 0:
        return 100
    return round_half_up(part / whole * 100)


def refresh_reputation(db: Session, user: User) -> User:
    """
    Recomputes the user's aggregates from the ledgers: the mean of every
    rating received and the attendance figures from the attendance records
    the organizer has marked.
    """
    scores = [r.rating for r in db.query(UserRating).filter(UserRating.user_id == user.id).all()]
    user.average_rating = sum(scores) / len(scores) if scores else 0.0

    records = (
        db.query(AttendanceRecord)
        .filter(AttendanceRecord.user_email == user.email, AttendanceRecord.attended.is_not(None))
        .all()
    )
    total = len(records)
    attended = sum(1 for r in records if r.attended)
    on_time = sum(1 for r in records if r.attended and r.on_time)

    user.total_activities = total
    user.attended = attended
    user.on_time = on_time
    user.attendance_rate = _percent(attended, total)
    user.punctuality_rate = _percent(on_time, attended)
    return user


def _upsert_attendance(db: Session, activity: Activity, user_email: str,
                       attended: Optional[bool] = None, on_time: Optional[bool] = None) -> AttendanceRecord:
    record = activity.find_attendance(user_email)
    if record:
        if attended is not None:
            record.attended = attended
            record.on_time = on_time
        return record

    record = AttendanceRecord(user_email=user_email, attended=attended, on_time=on_time, rated_by=[])
    activity.attendance_records.append(record)
    return record


def mark_attendance(db: Session, activity_id: UUID, user_email: str, attended: bool, on_time: bool,
                    actor_email: Optional[str] = None) -> AttendanceRecord:
    activity = require_activity(db, activity_id)
    if actor_email is not None and actor_email != activity.creator_email:
        raise Forbidden("Only the organizer can mark attendance")
    if user_email not in activity.participants:
        raise NotFound("User is not a participant of this activity")

    record = _upsert_attendance(db, activity, user_email, attended, on_time)
    db.flush()

    user = get_user_by_email(db, user_email)
    if user:
        refresh_reputation(db, user)
    db.commit()
    db.refresh(record)
    return record


def has_rated(db: Session, activity_id: UUID, rater_email: str, target_email: str) -> bool:
    activity = require_activity(db, activity_id)
    record = activity.find_attendance(target_email)
    return record is not None and rater_email in (record.rated_by or [])


def rate_user(db: Session, activity_id: UUID, rater: User, target_email: str, rating: int,
              comment: Optional[str] = None, attended: bool = True, on_time: bool = True) -> UserRating:
    activity = require_activity(db, activity_id)

    if not activity.is_completed:
        raise InvalidTransition("Ratings open once the activity is completed")
    if rater.email == target_email:
        raise Forbidden("You cannot rate yourself")
    if not activity.is_member(rater.email):
        raise Forbidden("Only members of the activity can rate")
    if not activity.is_member(target_email):
        raise NotFound("User is not a member of this activity")

    target = get_user_by_email(db, target_email)
    if not target:
        raise NotFound("User not found")

    record = activity.find_attendance(target_email)
    if record and rater.email in (record.rated_by or []):
        raise AlreadyRated("You already rated this user for this activity")

    # only the organizer's flags count as the attendance mark
    if rater.email == activity.creator_email:
        record = _upsert_attendance(db, activity, target_email, attended, on_time)
    else:
        record = _upsert_attendance(db, activity, target_email)
    record.rated_by = [*(record.rated_by or []), rater.email]

    user_rating = UserRating(
        user_id=target.id,
        activity_id=activity.id,
        from_user_id=rater.id,
        from_user_name=rater.full_name,
        from_user_avatar=rater.avatar,
        rating=rating,
        comment=comment,
        activity_name=activity.title,
        attended=attended,
        on_time=on_time,
        created_at=datetime.utcnow(),
    )
    db.add(user_rating)
    db.flush()

    refresh_reputation(db, target)
    db.commit()
    db.refresh(user_rating)
    logger.info("%s rated %s with %s stars for activity %s", rater.email, target_email, rating, activity.id)
    return user_rating


def get_user_rating(db: Session, user_email: str) -> float:
    user = get_user_by_email(db, user_email)
    if not user:
        return 0.0
    return user.average_rating or 0.0
