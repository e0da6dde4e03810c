"""Identity API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from tutorbook.core.config import get_settings
from tutorbook.core.enums import RoleEnum
from tutorbook.modules.identity.schemas import (
    AccessToken,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    PasswordResetIssued,
    ResetPasswordRequest,
    UserCreate,
    UserRead,
    UserSummary,
)
from tutorbook.modules.identity.service import IdentityService, get_current_user, get_identity_service
from tutorbook.shared.pagination import Page, build_page, get_pagination_params

settings = get_settings()
router = APIRouter(prefix="/identity", tags=["identity"])


@router.post("/auth/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserCreate,
    service: IdentityService = Depends(get_identity_service),
) -> UserRead:
    """Register a new student or teacher account."""
    user = await service.register(payload)
    return UserRead.model_validate(user)


@router.post("/auth/login", response_model=AccessToken)
async def login(
    payload: LoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> AccessToken:
    """Sign in by email/password and return a bearer token."""
    return await service.login(payload)


@router.post("/auth/forgot-password", response_model=PasswordResetIssued)
async def forgot_password(
    payload: ForgotPasswordRequest,
    service: IdentityService = Depends(get_identity_service),
) -> PasswordResetIssued:
    """Issue a password reset token; no e-mail is sent."""
    reset_token = await service.forgot_password(payload.email)
    if settings.app_env.strip().lower() in {"production", "prod"}:
        return PasswordResetIssued(message="Password reset token issued")
    return PasswordResetIssued(
        message="Password reset token issued",
        reset_token=reset_token.token_id,
        expires_at=reset_token.expires_at,
    )


@router.post("/auth/reset-password/{token}", response_model=MessageResponse)
async def reset_password(
    token: str,
    payload: ResetPasswordRequest,
    service: IdentityService = Depends(get_identity_service),
) -> MessageResponse:
    """Set a new password using a reset token."""
    await service.reset_password(token, payload)
    return MessageResponse(message="Password has been reset")


@router.get("/users/me", response_model=UserRead)
async def get_me(current_user=Depends(get_current_user)) -> UserRead:
    """Return account of authenticated user."""
    return UserRead.model_validate(current_user)


@router.get("/users", response_model=Page[UserSummary])
async def list_contacts(
    role: RoleEnum | None = Query(default=None),
    pagination=Depends(get_pagination_params),
    service: IdentityService = Depends(get_identity_service),
    _=Depends(get_current_user),
) -> Page[UserSummary]:
    """Students and teachers visible to any signed-in user."""
    users, total = await service.list_contacts(role, pagination.limit, pagination.offset)
    items = [UserSummary.model_validate(user) for user in users]
    return build_page(items, total, pagination)
