import logging
import secrets
from datetime import datetime, timedelta
from uuid import UUID
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.errors import Conflict, NotFound, Forbidden
from app.models.user_db.user_db import User
from app.schemas.users.user_base import UserCreate, UserUpdate
from app.core.security import hash_password, verify_password

logger = logging.getLogger(__name__)


def generate_verification_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def _issue_code(user: User) -> str:
    code = generate_verification_code()
    user.verification_code = code
    user.verification_expires_at = datetime.utcnow() + timedelta(minutes=settings.VERIFICATION_CODE_TTL_MINUTES)
    return code


def _code_matches(user: User, code: str) -> bool:
    if not user.verification_code or user.verification_code != code:
        return False
    return user.verification_expires_at is None or user.verification_expires_at >= datetime.utcnow()


def create_user(db: Session, user: UserCreate):
    if get_user_by_email(db, user.email):
        raise Conflict("Email already registered")

    db_user = User(
        email=user.email,
        hashed_password=hash_password(user.password),
        name=user.name,
        last_name=user.last_name,
        phone=user.phone,
        birth_date=user.birth_date.isoformat() if user.birth_date else None,
        gender=user.gender,
        bio=user.bio,
        avatar=user.avatar,
        location=user.location,
        interests=[interest.value for interest in user.interests],
        is_verified=False,
    )
    _issue_code(db_user)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("Registered user %s", db_user.email)
    return db_user


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: UUID):
    return db.query(User).filter(User.id == user_id).first()


def authenticate(db: Session, email: str, password: str):
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def verify_email(db: Session, user: User, code: str) -> bool:
    if not _code_matches(user, code):
        return False
    user.is_verified = True
    user.verification_code = None
    user.verification_expires_at = None
    db.commit()
    db.refresh(user)
    logger.info("User %s verified", user.email)
    return True


def renew_verification_code(db: Session, user: User) -> str:
    code = _issue_code(user)
    db.commit()
    return code


def request_password_reset(db: Session, email: str) -> str:
    user = get_user_by_email(db, email)
    if not user:
        raise NotFound("No account registered with this email")
    return renew_verification_code(db, user)


def reset_password(db: Session, email: str, code: str, new_password: str) -> bool:
    user = get_user_by_email(db, email)
    if not user or not _code_matches(user, code):
        return False
    user.hashed_password = hash_password(new_password)
    user.verification_code = None
    user.verification_expires_at = None
    db.commit()
    logger.info("Password reset for %s", email)
    return True


def change_password(db: Session, user: User, current_password: str, new_password: str):
    if not verify_password(current_password, user.hashed_password):
        raise Forbidden("Current password is incorrect")
    user.hashed_password = hash_password(new_password)
    db.commit()


def update_user(db: Session, user: User, updates: UserUpdate):
    data = updates.model_dump(exclude_unset=True)

    if "interests" in data and data["interests"] is not None:
        data["interests"] = [interest.value for interest in updates.interests]
    if data.get("birth_date") is not None:
        data["birth_date"] = updates.birth_date.isoformat()

    for field, value in data.items():
        if value is not None:
            setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user
