from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.activity_db.activity_crud import get_activities_by_creator, get_activities_joined_by
from app.models.chat_db.chat_crud import count_connections
from app.models.user_db.user_db import User
from app.models.user_db.user_db_crud import get_user_by_email, update_user
from app.schemas.rating.rating_base import UserRatingOut
from app.schemas.users.user_base import UserOut, UserProfileOut, UserStats, UserUpdate


user_router = APIRouter(prefix="/users", tags=["Users"])


def build_profile(db: Session, user: User) -> UserProfileOut:
    stats = UserStats(
        activities_created=len(get_activities_by_creator(db, user.email)),
        activities_joined=len(get_activities_joined_by(db, user.email)),
        connections=count_connections(db, user.email),
    )
    return UserProfileOut(
        **UserOut.model_validate(user).model_dump(),
        stats=stats,
        ratings=[UserRatingOut.model_validate(r) for r in user.ratings],
    )


@user_router.get("/me/profile", response_model=UserProfileOut)
def get_my_profile(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return build_profile(db, current_user)


@user_router.put("/me", response_model=UserOut)
def edit_me(
    updates: UserUpdate = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return update_user(db, current_user, updates)


@user_router.get("/{email}", response_model=UserProfileOut)
def get_user(email: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    user = get_user_by_email(db, email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return build_profile(db, user)
