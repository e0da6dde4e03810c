"""Students API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tutorbook.core.enums import RoleEnum
from tutorbook.modules.identity.service import require_roles
from tutorbook.modules.students.schemas import StudentProfileRead, StudentProfileUpdate, StudentStatsRead
from tutorbook.modules.students.service import StudentsService, get_students_service

router = APIRouter(prefix="/students", tags=["students"])


@router.get("/profile/me", response_model=StudentProfileRead)
async def get_my_profile(
    service: StudentsService = Depends(get_students_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> StudentProfileRead:
    """Current student's profile."""
    profile = await service.get_my_profile(current_user)
    return StudentProfileRead.model_validate(profile)


@router.patch("/profile/me", response_model=StudentProfileRead)
async def update_my_profile(
    payload: StudentProfileUpdate,
    service: StudentsService = Depends(get_students_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> StudentProfileRead:
    profile = await service.update_my_profile(payload, current_user)
    return StudentProfileRead.model_validate(profile)


@router.get("/me/stats", response_model=StudentStatsRead)
async def get_my_stats(
    service: StudentsService = Depends(get_students_service),
    current_user=Depends(require_roles(RoleEnum.STUDENT)),
) -> StudentStatsRead:
    """Dashboard counters for the current student."""
    return await service.get_stats(current_user)
