"""Teachers API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from tutorbook.core.enums import RoleEnum
from tutorbook.modules.identity.service import require_roles
from tutorbook.modules.teachers.schemas import (
    RatingCreate,
    RatingSummaryRead,
    StudentRatingRead,
    TeacherDirectoryItem,
    TeacherProfileRead,
    TeacherProfileUpdate,
    TeacherRatingsRead,
    TeacherStatsRead,
)
from tutorbook.modules.teachers.service import TeachersService, get_teachers_service
from tutorbook.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/teachers", tags=["teachers"])


@router.get("", response_model=Page[TeacherDirectoryItem])
async def list_teachers(
    pagination=Depends(get_pagination_params),
    service: TeachersService = Depends(get_teachers_service),
) -> Page[TeacherDirectoryItem]:
    """Public teacher directory."""
    items, total = await service.list_directory(limit=pagination.limit, offset=pagination.offset)
    return build_page(items, total, pagination)


@router.get("/profile/me", response_model=TeacherProfileRead)
async def get_my_profile(
    service: TeachersService = Depends(get_teachers_service),
    current_user=Depends(require_roles(RoleEnum.TEACHER)),
) -> TeacherProfileRead:
    profile = await service.get_my_profile(current_user)
    return TeacherProfileRead.model_validate(profile)


@router.patch("/profile/me", response_model=TeacherProfileRead)
async def update_my_profile(
    payload: TeacherProfileUpdate,
    service: TeachersService = Depends(get_teachers_service),
    current_user=Depends(require_roles(RoleEnum.TEACHER)),
) -> TeacherProfileRead:
    profile = await service.update_my_profile(payload, current_user)
    return TeacherProfileRead.model_validate(profile)


@router.get("/me/ratings", response_model=TeacherRatingsRead)
async def list_my_ratings(
    pagination=Depends(get_pagination_params),
    service: TeachersService = Depends(get_teachers_service),
    current_user=Depends(require_roles(RoleEnum.TEACHER)),
) -> TeacherRatingsRead:
    """Ratings received by the current teacher."""
    return await service.list_ratings(current_user.id, pagination)


@router.get("/me/stats", response_model=TeacherStatsRead)
async def get_my_stats(
    service: TeachersService = Depends(get_teachers_service),
    current_user=Depends(require_roles(RoleEnum.TEACHER)),
) -> TeacherStatsRead:
    """Dashboard counters for the current teacher."""
    return await service.get_stats(current_user)


@router.get("/{teacher_id}/ratings", response_model=TeacherRatingsRead)
async def list_teacher_ratings(
    teacher_id: UUID,
    pagination=Depends(get_pagination_params),
    service: TeachersService = Depends(get_teachers_service),
) -> TeacherRatingsRead:
    """Public ratings of a teacher, most recent first."""
    return await service.list_ratings(teacher_id, pagination)


@router.post("/{teacher_id}/ratings", response_model=RatingSummaryRead)
async def rate_teacher(
    teacher_id: UUID,
    payload: RatingCreate,
    service: TeachersService = Depends(get_teachers_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> RatingSummaryRead:
    """Create or replace the current student's rating."""
    return await service.rate_teacher(teacher_id, payload, current_user)


@router.get("/{teacher_id}/ratings/me", response_model=StudentRatingRead)
async def get_my_rating(
    teacher_id: UUID,
    service: TeachersService = Depends(get_teachers_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> StudentRatingRead:
    return await service.get_student_rating(teacher_id, current_user)
