from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import create_access_token, get_current_user
from app.models.user_db.user_db import User
from app.models.user_db.user_db_crud import (
    authenticate,
    create_user,
    verify_email,
    renew_verification_code,
    request_password_reset,
    reset_password,
    change_password,
)
from app.schemas.login.login_base import (
    LoginRequest,
    VerifyEmailRequest,
    PasswordResetRequest,
    PasswordResetConfirm,
    PasswordChange,
)
from app.schemas.users.user_base import UserCreate, UserOut, RegisterResponse
from app.services.email import send_verification_code
from app.services.interests import Interest

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@auth_router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(payload: UserCreate, db: Session = Depends(get_db)):
    # hashing and the session are blocking, only the SMTP call runs on the loop
    user = await run_in_threadpool(create_user, db, payload)
    delivered = await send_verification_code(user.email, user.verification_code)

    return RegisterResponse(
        user=UserOut.model_validate(user),
        token=create_access_token({"sub": user.email}),
        message=f"Verification code sent to {user.email}",
        demo_code=None if delivered else user.verification_code,
    )


@auth_router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": user.email})
    return {"user": UserOut.model_validate(user), "token": token, "token_type": "bearer"}


@auth_router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@auth_router.post("/verify", response_model=UserOut)
def verify(payload: VerifyEmailRequest, db: Session = Depends(get_db),
           current_user: User = Depends(get_current_user)):
    if current_user.is_verified:
        return current_user
    if not verify_email(db, current_user, payload.code):
        raise HTTPException(status_code=400, detail="Invalid or expired verification code")
    return current_user


@auth_router.post("/verify/resend")
async def resend_verification(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if current_user.is_verified:
        raise HTTPException(status_code=400, detail="Email already verified")

    email = current_user.email
    code = await run_in_threadpool(renew_verification_code, db, current_user)
    delivered = await send_verification_code(email, code)
    return {"message": f"Verification code sent to {email}", "demo_code": None if delivered else code}


@auth_router.post("/password/forgot")
async def forgot_password(payload: PasswordResetRequest, db: Session = Depends(get_db)):
    code = await run_in_threadpool(request_password_reset, db, payload.email)
    delivered = await send_verification_code(payload.email, code)
    return {"message": f"Recovery code sent to {payload.email}", "demo_code": None if delivered else code}


@auth_router.post("/password/reset")
def confirm_password_reset(payload: PasswordResetConfirm, db: Session = Depends(get_db)):
    if not reset_password(db, payload.email, payload.code, payload.new_password):
        raise HTTPException(status_code=400, detail="Invalid or expired recovery code")
    return {"message": "Password updated"}


@auth_router.post("/password/change")
def update_password(payload: PasswordChange, db: Session = Depends(get_db),
                    current_user: User = Depends(get_current_user)):
    change_password(db, current_user, payload.current_password, payload.new_password)
    return {"message": "Password updated"}


@auth_router.get("/interests", response_model=list[str])
def get_interests():
    return [i.value for i in Interest]
