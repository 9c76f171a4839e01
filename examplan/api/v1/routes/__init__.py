# examplan/api/v1/routes/__init__.py
from fastapi import APIRouter
from .exam_scheduler import router as exam_scheduler_router

# Create a main router that includes all sub-routers
router = APIRouter()

router.include_router(
    exam_scheduler_router, prefix="/exam-scheduler", tags=["Exam Scheduler"]
)
