"""API v1 router."""
from fastapi import APIRouter

from lms.api.v1 import auth, courses, dashboard, enrollments, gamification, progress, quizzes, reviews
from lms.schemas.common import ErrorResponse

api_router = APIRouter(
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    }
)

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(courses.router, prefix="/courses", tags=["Courses"])
api_router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
api_router.include_router(progress.router, prefix="/progress", tags=["Lesson Progress"])
api_router.include_router(quizzes.router, prefix="/quizzes", tags=["Quizzes"])
api_router.include_router(gamification.router, prefix="/gamification", tags=["Gamification"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["Course Reviews"])
