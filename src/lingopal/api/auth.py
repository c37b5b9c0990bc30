"""Auth API — signup, login, profile, password change and reset.

Learn: Routes for the self-service account lifecycle:
- POST /auth/signup → create an account (first one ever becomes admin)
- POST /auth/login → email-or-username + password → JWT
- GET /auth/me → current user's profile
- PATCH /auth/me → edit name / date of birth / gender
- POST /auth/change-password → needs the current password
- POST /auth/forgot-password → email a reset link
- POST /auth/reset-password → token + new password

signup, login, forgot-password and reset-password are open; the rest
declare the Identity Gate themselves since the router is mounted open.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lingopal.auth.dependencies import CurrentIdentity, get_current_user
from lingopal.auth.jwt import create_access_token
from lingopal.config import Settings
from lingopal.db.engine import get_db
from lingopal.dependencies import get_mailer, get_settings
from lingopal.schemas.user import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileUpdate,
    ResetPasswordRequest,
    SignupRequest,
    SignupResponse,
    UserRead,
)
from lingopal.services.mailer import Mailer
from lingopal.services.password_reset import PasswordResetService
from lingopal.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def _reset_svc(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: Mailer = Depends(get_mailer),
) -> PasswordResetService:
    return PasswordResetService(db, settings, mailer)


# ─── Signup / Login ─────────────────────────────────────


@router.post("/signup", response_model=SignupResponse, status_code=201)
async def signup(body: SignupRequest, svc: UserService = Depends(_svc)):
    """Register a new account."""
    user = await svc.create_user(
        full_name=body.full_name,
        dob=body.dob,
        gender=body.gender,
        username=body.username,
        email=body.email,
        password=body.password,
    )
    return {"message": "User registered successfully. Please login.", "user": user}


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    svc: UserService = Depends(_svc),
    settings: Settings = Depends(get_settings),
):
    """Login with email or username → JWT access token + profile."""
    user = await svc.authenticate(body.identifier, body.password)
    return LoginResponse(
        access_token=create_access_token(str(user.id), settings),
        user=UserRead.model_validate(user),
    )


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(identity: CurrentIdentity = Depends(get_current_user)):
    return identity.profile


@router.patch("/me", response_model=UserRead)
async def update_me(
    body: ProfileUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    """Update name, date of birth or gender. Other fields are ignored."""
    return await svc.update_profile(
        identity.user_id,
        full_name=body.full_name,
        dob=body.dob,
        gender=body.gender,
    )


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    await svc.change_password(identity.user_id, body.current_password, body.new_password)
    return {"message": "Password updated successfully"}


# ─── Password reset ─────────────────────────────────────


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    svc: PasswordResetService = Depends(_reset_svc),
):
    await svc.request_reset(body.email)
    return {"message": "A password reset link has been sent to your email."}


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    svc: PasswordResetService = Depends(_reset_svc),
):
    await svc.reset_password(body.token, body.new_password)
    return {"message": "Password has been reset successfully. You can now log in."}
