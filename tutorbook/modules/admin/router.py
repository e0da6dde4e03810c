"""Admin API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from tutorbook.core.enums import RoleEnum
from tutorbook.modules.admin.schemas import (
    AdminDashboardRead,
    AdminUserRead,
    TeacherAccountCreate,
    UserApprovalUpdate,
)
from tutorbook.modules.admin.service import AdminService, get_admin_service
from tutorbook.modules.identity.schemas import UserRead
from tutorbook.modules.identity.service import require_roles
from tutorbook.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/dashboard", response_model=AdminDashboardRead)
async def get_dashboard(
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_roles(RoleEnum.ADMIN)),
) -> AdminDashboardRead:
    """Platform-wide counters."""
    return await service.get_dashboard(current_user)


@router.get("/users", response_model=Page[AdminUserRead])
async def list_users(
    role: RoleEnum | None = Query(default=None),
    pagination=Depends(get_pagination_params),
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_roles(RoleEnum.ADMIN)),
) -> Page[AdminUserRead]:
    """List students and teachers, newest first."""
    items, total = await service.list_users(current_user, role, pagination.limit, pagination.offset)
    return build_page(items, total, pagination)


@router.post("/teachers", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_teacher(
    payload: TeacherAccountCreate,
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_roles(RoleEnum.ADMIN)),
) -> UserRead:
    """Provision a teacher account."""
    user = await service.create_teacher(payload, current_user)
    return UserRead.model_validate(user)


@router.patch("/users/{user_id}/approval", response_model=UserRead)
async def set_user_approval(
    user_id: UUID,
    payload: UserApprovalUpdate,
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_roles(RoleEnum.ADMIN)),
) -> UserRead:
    """Approve or suspend an account."""
    user = await service.set_approval(user_id, payload, current_user)
    return UserRead.model_validate(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    service: AdminService = Depends(get_admin_service),
    current_user=Depends(require_roles(RoleEnum.ADMIN)),
) -> None:
    """Delete an account with its appointments, slots, ratings and messages."""
    await service.delete_user(user_id, current_user)
