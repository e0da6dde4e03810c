"""Scheduling API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from tutorbook.core.enums import RoleEnum
from tutorbook.modules.identity.service import require_roles
from tutorbook.modules.scheduling.schemas import (
    AvailabilityPublishRequest,
    AvailabilityRead,
    AvailabilityUpdateRead,
    SlotDeleteRead,
    SlotDeleteRequest,
)
from tutorbook.modules.scheduling.service import SchedulingService, get_scheduling_service

router = APIRouter(prefix="/scheduling", tags=["scheduling"])


@router.post("/slots", response_model=AvailabilityUpdateRead, status_code=status.HTTP_201_CREATED)
async def publish_slots(
    payload: AvailabilityPublishRequest,
    service: SchedulingService = Depends(get_scheduling_service),
    current_user=Depends(require_roles(RoleEnum.TEACHER)),
) -> AvailabilityUpdateRead:
    """Add slots to the teacher's availability."""
    return await service.publish_availability(payload, current_user)


@router.get("/slots/me", response_model=AvailabilityRead)
async def get_my_slots(
    service: SchedulingService = Depends(get_scheduling_service),
    current_user=Depends(require_roles(RoleEnum.TEACHER)),
) -> AvailabilityRead:
    """List the teacher's own future slots."""
    return await service.get_my_availability(current_user)


@router.delete("/slots/me", response_model=SlotDeleteRead)
async def delete_my_slot(
    payload: SlotDeleteRequest,
    service: SchedulingService = Depends(get_scheduling_service),
    current_user=Depends(require_roles(RoleEnum.TEACHER)),
) -> SlotDeleteRead:
    """Withdraw one slot."""
    return await service.delete_my_slot(payload, current_user)


@router.get("/teachers/{teacher_id}/slots", response_model=AvailabilityRead)
async def get_teacher_slots(
    teacher_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
    _=Depends(require_roles(RoleEnum.STUDENT)),
) -> AvailabilityRead:
    """List a teacher's future slots."""
    return await service.get_teacher_availability(teacher_id)
