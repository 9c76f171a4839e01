# examplan/api/v1/routes/exam_scheduler.py
"""API endpoints for the automated exam scheduler (institution admins only)."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ....api.deps import current_profile_id, db_session, require_admin
from ....core.exceptions import AccessDeniedError
from ....models.users import User
from ....schemas.exam_scheduler import (
    HistoryQuery,
    PreviewRequest,
    PreviewResponse,
    RunDetailsResponse,
    RunHistoryResponse,
    RunSummaryResponse,
    ScheduleRequest,
)
from ....services.scheduling import ExamSchedulerService

logger = logging.getLogger(__name__)

router = APIRouter()


def _caller_institution(user: User, requested: Optional[UUID]) -> UUID:
    if requested is not None and requested != user.institution_id:
        raise AccessDeniedError(
            "Cannot schedule exams for another institution", user_id=user.id
        )
    return user.institution_id


@router.post("/preview", response_model=PreviewResponse)
async def preview_classes(
    request: PreviewRequest,
    db: AsyncSession = Depends(db_session),
    user: User = Depends(require_admin),
):
    """List the classes a run with this selection would consider."""
    institution_id = _caller_institution(user, request.institution_id)
    service = ExamSchedulerService(db)
    result = await service.preview(request, institution_id)
    return PreviewResponse.model_validate(result)


@router.post("/schedule", response_model=RunSummaryResponse)
async def schedule_exams(
    request: ScheduleRequest,
    db: AsyncSession = Depends(db_session),
    user: User = Depends(require_admin),
    profile_id: Optional[UUID] = Depends(current_profile_id),
):
    """Create one exam per eligible class-course and record the run."""
    institution_id = _caller_institution(user, request.institution_id)
    logger.info(f"User {user.id} started exam scheduling for institution {institution_id}")
    service = ExamSchedulerService(db)
    summary = await service.schedule(request, profile_id, institution_id)
    return RunSummaryResponse.model_validate(summary)


@router.get("/history", response_model=RunHistoryResponse)
async def list_schedule_runs(
    institution_id: Optional[UUID] = Query(None),
    academic_year_id: Optional[UUID] = Query(None),
    exam_type_id: Optional[UUID] = Query(None),
    cursor: Optional[UUID] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=200),
    db: AsyncSession = Depends(db_session),
    user: User = Depends(require_admin),
):
    """Page through previous runs of the caller's institution."""
    query = HistoryQuery(
        institution_id=institution_id,
        academic_year_id=academic_year_id,
        exam_type_id=exam_type_id,
        cursor=cursor,
        limit=limit,
    )
    service = ExamSchedulerService(db)
    page = await service.history(query, user.institution_id)
    return RunHistoryResponse.model_validate(page)


@router.get("/runs/{run_id}", response_model=RunDetailsResponse)
async def get_schedule_run(
    run_id: UUID,
    db: AsyncSession = Depends(db_session),
    user: User = Depends(require_admin),
):
    """A single run with the exams it created."""
    service = ExamSchedulerService(db)
    details = await service.details(run_id, user.institution_id)
    return RunDetailsResponse.model_validate(details)
