from fastapi import APIRouter

from app.api.v1.endpoints import attendance, auth, events, feedback, reports, students, superadmin

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(superadmin.router, prefix="/superadmin", tags=["Super Admin"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
api_router.include_router(feedback.router, prefix="/feedback", tags=["Feedback"])
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
